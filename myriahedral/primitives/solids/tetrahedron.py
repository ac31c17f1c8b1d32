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

"""Regular tetrahedron base solid.

Four faces, six edges. The edge list is shipped explicitly so that edge
insertion order (and with it the subdivision traversal) is fixed.
"""

import torch

from myriahedral.mesh import Mesh

_POINTS = [
    [0.0, -1.0, 2.0],
    [1.73205081, -1.0, -1.0],
    [-1.73205081, -1.0, -1.0],
    [0.0, 2.0, 0.0],
]
_EDGES = [[2, 0], [0, 1], [3, 0], [1, 2], [2, 3], [3, 1]]
_CELLS = [[0, 2, 1], [0, 3, 2], [0, 1, 3], [1, 2, 3]]


def load(
    dtype: torch.dtype = torch.float64,
    device: torch.device | str = "cpu",
) -> Mesh:
    """Create the base tetrahedron.

    Parameters
    ----------
    dtype : torch.dtype
        Floating point dtype of the points.
    device : torch.device or str
        Compute device ('cpu' or 'cuda').

    Returns
    -------
    Mesh
        4 points, 4 outward-wound triangles, and ``global_data["edges"]``
        of shape (6, 2).

    Examples
    --------
    >>> mesh = load()
    >>> mesh.n_cells, tuple(mesh.global_data["edges"].shape)
    (4, (6, 2))
    """
    return Mesh(
        points=torch.tensor(_POINTS, dtype=dtype, device=device),
        cells=torch.tensor(_CELLS, dtype=torch.int64, device=device),
        global_data={"edges": torch.tensor(_EDGES, dtype=torch.int64, device=device)},
    )
