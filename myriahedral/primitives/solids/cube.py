# SPDX-FileCopyrightText: Copyright (c) 2023 - 2026 NVIDIA CORPORATION & AFFILIATES.
# SPDX-FileCopyrightText: All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Cube base solid, each square face split into two triangles.

Twelve triangles and eighteen edges (twelve cube edges plus one diagonal per
square). The diagonals are ordinary edges for subdivision and unfolding.
"""

import torch

from myriahedral.mesh import Mesh

_POINTS = [
    [0.5, -0.5, -0.5],
    [-0.5, -0.5, -0.5],
    [-0.5, -0.5, 0.5],
    [0.5, -0.5, 0.5],
    [0.5, 0.5, -0.5],
    [-0.5, 0.5, -0.5],
    [-0.5, 0.5, 0.5],
    [0.5, 0.5, 0.5],
]
_EDGES = [
    [2, 0], [3, 0], [3, 4], [0, 1], [4, 0], [0, 5],
    [1, 2], [5, 1], [1, 6], [2, 3], [3, 7], [6, 2],
    [2, 7], [4, 5], [5, 6], [7, 4], [4, 6], [6, 7],
]  # fmt: skip
_CELLS = [
    [2, 1, 0], [3, 2, 0], [3, 0, 4], [7, 3, 4],
    [0, 1, 5], [4, 0, 5], [1, 2, 6], [5, 1, 6],
    [2, 3, 7], [6, 2, 7], [4, 5, 6], [7, 4, 6],
]  # fmt: skip


def load(
    dtype: torch.dtype = torch.float64,
    device: torch.device | str = "cpu",
) -> Mesh:
    """Create the base cube centered at the origin with unit side length.

    Parameters
    ----------
    dtype : torch.dtype
        Floating point dtype of the points.
    device : torch.device or str
        Compute device ('cpu' or 'cuda').

    Returns
    -------
    Mesh
        8 points, 12 triangles, and ``global_data["edges"]`` of shape (18, 2).
    """
    return Mesh(
        points=torch.tensor(_POINTS, dtype=dtype, device=device),
        cells=torch.tensor(_CELLS, dtype=torch.int64, device=device),
        global_data={"edges": torch.tensor(_EDGES, dtype=torch.int64, device=device)},
    )
