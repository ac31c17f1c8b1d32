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

"""Regular icosahedron base solid.

Vertices are the cyclic permutations of ``(0, +-b, +-a)`` with
``b / a`` equal to the golden ratio, scaled to circumradius 0.5.
"""

import torch

from myriahedral.mesh import Mesh

_A = 0.26286500
_B = 0.42532500

_POINTS = [
    [-_A, 0.0, _B], [_A, 0.0, _B], [-_A, 0.0, -_B], [_A, 0.0, -_B],
    [0.0, _B, _A], [0.0, _B, -_A], [0.0, -_B, _A], [0.0, -_B, -_A],
    [_B, _A, 0.0], [-_B, _A, 0.0], [_B, -_A, 0.0], [-_B, -_A, 0.0],
]  # fmt: skip
_CELLS = [
    [0, 6, 1], [0, 11, 6], [1, 4, 0], [1, 8, 4], [1, 10, 8],
    [2, 5, 3], [2, 9, 5], [2, 11, 9], [3, 7, 2], [3, 10, 7],
    [4, 8, 5], [4, 9, 0], [5, 8, 3], [5, 9, 4], [6, 10, 1],
    [6, 11, 7], [7, 10, 6], [7, 11, 2], [8, 10, 3], [9, 11, 0],
]  # fmt: skip


def load(
    dtype: torch.dtype = torch.float64,
    device: torch.device | str = "cpu",
) -> Mesh:
    """Create the base icosahedron.

    Parameters
    ----------
    dtype : torch.dtype
        Floating point dtype of the points.
    device : torch.device or str
        Compute device ('cpu' or 'cuda').

    Returns
    -------
    Mesh
        12 points and 20 triangles. Edges are derived from the faces.

    Examples
    --------
    >>> mesh = load()
    >>> mesh.n_points, mesh.n_cells
    (12, 20)
    """
    return Mesh(
        points=torch.tensor(_POINTS, dtype=dtype, device=device),
        cells=torch.tensor(_CELLS, dtype=torch.int64, device=device),
    )
