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

"""Vectorized lookup of undirected edges inside a reference edge set.

Used by re-triangulation to find, for every triangle side, which fold or cut
edge bounds it.
"""

import torch


def find_edges_in_reference(
    reference_edges: torch.Tensor,
    query_edges: torch.Tensor,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Find indices of query edges within a reference edge set.

    Edge direction is ignored: both sets are canonicalized to
    ``[min_vertex, max_vertex]`` and matched through an integer key
    ``v0 * (max_vertex + 1) + v1`` with a sorted binary search.

    Parameters
    ----------
    reference_edges : torch.Tensor
        Reference edge set, shape (n_ref, 2).
    query_edges : torch.Tensor
        Edges to look up, shape (n_query, 2).

    Returns
    -------
    indices : torch.Tensor
        Shape (n_query,). Row in ``reference_edges`` of each query edge;
        undefined where ``matches`` is False.
    matches : torch.Tensor
        Shape (n_query,) bool.

    Examples
    --------
    >>> ref = torch.tensor([[0, 1], [1, 2], [2, 3]])
    >>> query = torch.tensor([[2, 1], [5, 6], [3, 2]])
    >>> indices, matches = find_edges_in_reference(ref, query)
    >>> matches.tolist()
    [True, False, True]
    >>> indices[matches].tolist()
    [1, 2]
    """
    device = reference_edges.device

    if len(reference_edges) == 0 or len(query_edges) == 0:
        return (
            torch.zeros(len(query_edges), dtype=torch.long, device=device),
            torch.zeros(len(query_edges), dtype=torch.bool, device=device),
        )

    sorted_reference = torch.sort(reference_edges, dim=-1)[0]
    sorted_query = torch.sort(query_edges, dim=-1)[0]

    key_base = max(reference_edges.max().item(), query_edges.max().item()) + 1
    reference_key = sorted_reference[:, 0] * key_base + sorted_reference[:, 1]
    query_key = sorted_query[:, 0] * key_base + sorted_query[:, 1]

    reference_key_sorted, sort_indices = torch.sort(reference_key)
    positions = torch.searchsorted(reference_key_sorted, query_key)
    positions = positions.clamp(max=len(reference_key_sorted) - 1)

    matches = reference_key_sorted[positions] == query_key
    return sort_indices[positions], matches
