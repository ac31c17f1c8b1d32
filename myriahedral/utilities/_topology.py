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

"""Triangle-mesh topology utilities."""

import torch


class TopologyError(ValueError):
    """Raised when a mesh cannot be unfolded because its topology is broken.

    Examples are a disconnected dual graph (the spanning tree cannot grow), a
    face that is not bounded by exactly three fold/cut edges, or a fold tree
    with more than one root. A myriahedron that raised this error must not be
    rendered: its buffers would be structurally invalid.
    """


def triangle_edges(cells: torch.Tensor) -> torch.Tensor:
    """Return the directed edges of every triangle.

    Parameters
    ----------
    cells : torch.Tensor
        Triangle connectivity, shape (n_cells, 3).

    Returns
    -------
    torch.Tensor
        Shape (n_cells, 3, 2). Row ``[c, k]`` is the edge leaving corner
        ``k`` in traversal order: ``(v0, v1)``, ``(v1, v2)``, ``(v2, v0)``.

    Examples
    --------
    >>> triangle_edges(torch.tensor([[0, 1, 2]])).tolist()
    [[[0, 1], [1, 2], [2, 0]]]
    """
    return torch.stack([cells, cells.roll(-1, dims=1)], dim=-1)


def extract_unique_edges(cells: torch.Tensor) -> tuple[torch.Tensor, torch.Tensor]:
    """Extract the unique undirected edges of a triangle mesh.

    Parameters
    ----------
    cells : torch.Tensor
        Triangle connectivity, shape (n_cells, 3).

    Returns
    -------
    unique_edges : torch.Tensor
        Shape (n_edges, 2), canonically sorted so that
        ``unique_edges[:, 0] < unique_edges[:, 1]``.
    inverse_indices : torch.Tensor
        Shape (n_cells * 3,). Reshape to (n_cells, 3) to get the edge id of
        each directed triangle edge.

    Examples
    --------
    >>> cells = torch.tensor([[0, 1, 2], [0, 2, 3]])
    >>> edges, inverse = extract_unique_edges(cells)
    >>> edges.tolist()
    [[0, 1], [0, 2], [0, 3], [1, 2], [2, 3]]
    """
    candidate_edges = torch.sort(triangle_edges(cells).reshape(-1, 2), dim=-1)[0]
    return torch.unique(candidate_edges, dim=0, return_inverse=True)
