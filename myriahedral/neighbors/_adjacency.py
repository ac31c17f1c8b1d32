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

"""Ragged one-to-many relations stored as offsets and indices.

The unfolding pipeline needs two such relations: the folds incident to each
face of the spanning tree, and the children of each fold in the fold tree.
"""

import torch
from tensordict import tensorclass


@tensorclass
class Adjacency:
    """Ragged adjacency list stored with offset-indices encoding.

    Attributes
    ----------
    offsets : torch.Tensor
        Shape (n_sources + 1,), int64. Source ``i`` owns
        ``indices[offsets[i]:offsets[i + 1]]``.
    indices : torch.Tensor
        Shape (total_neighbors,), int64.

    Examples
    --------
    >>> # Fold 0 has children [1, 2], fold 1 has none, fold 2 has [3]
    >>> adj = Adjacency(
    ...     offsets=torch.tensor([0, 2, 2, 3, 3]),
    ...     indices=torch.tensor([1, 2, 3]),
    ... )
    >>> adj.to_list()
    [[1, 2], [], [3], []]
    """

    offsets: torch.Tensor  # shape: (n_sources + 1,), dtype: int64
    indices: torch.Tensor  # shape: (total_neighbors,), dtype: int64

    def __post_init__(self):
        if not torch.compiler.is_compiling():
            if len(self.offsets) < 1:
                raise ValueError(
                    f"Offsets array must have length >= 1 (n_sources + 1), but got {len(self.offsets)=}."
                )
            if self.offsets[0].item() != 0:
                raise ValueError(
                    f"First offset must be 0, but got {self.offsets[0].item()=}."
                )
            last_offset = self.offsets[-1].item()
            indices_length = len(self.indices)
            if last_offset != indices_length:
                raise ValueError(
                    f"Last offset must equal length of indices, but got "
                    f"{last_offset=} != {indices_length=}."
                )

    def to_list(self) -> list[list[int]]:
        """Convert to a ragged list-of-lists, preserving per-source order."""
        offsets = self.offsets.tolist()
        indices = self.indices.tolist()
        return [indices[offsets[i] : offsets[i + 1]] for i in range(self.n_sources)]

    def neighbors(self, source: int) -> torch.Tensor:
        """Return the targets of a single source as a tensor view."""
        return self.indices[self.offsets[source] : self.offsets[source + 1]]

    @property
    def n_sources(self) -> int:
        """Number of source elements in the adjacency."""
        return len(self.offsets) - 1

    @property
    def n_total_neighbors(self) -> int:
        """Total number of (source, target) relations."""
        return len(self.indices)

    @property
    def counts(self) -> torch.Tensor:
        """Number of targets per source, shape (n_sources,).

        Examples
        --------
        >>> adj = Adjacency(
        ...     offsets=torch.tensor([0, 3, 3, 5]),
        ...     indices=torch.tensor([1, 2, 0, 4, 3]),
        ... )
        >>> adj.counts.tolist()
        [3, 0, 2]
        """
        return self.offsets[1:] - self.offsets[:-1]

    def expand_to_pairs(self) -> tuple[torch.Tensor, torch.Tensor]:
        """Expand to ``(source_indices, target_indices)``.

        Inverse of :func:`build_adjacency_from_pairs`.

        Examples
        --------
        >>> adj = Adjacency(
        ...     offsets=torch.tensor([0, 2, 4, 5]),
        ...     indices=torch.tensor([10, 11, 20, 21, 30]),
        ... )
        >>> sources, targets = adj.expand_to_pairs()
        >>> sources.tolist()
        [0, 0, 1, 1, 2]
        """
        device = self.offsets.device
        if self.n_total_neighbors == 0:
            return (
                torch.tensor([], dtype=torch.int64, device=device),
                self.indices,
            )

        # offsets[i] <= position < offsets[i+1] means position belongs to source i
        positions = torch.arange(
            self.n_total_neighbors, dtype=torch.int64, device=device
        )
        source_indices = torch.searchsorted(self.offsets, positions, right=True) - 1
        return source_indices, self.indices


def build_adjacency_from_pairs(
    source_indices: torch.Tensor,  # shape: (n_pairs,)
    target_indices: torch.Tensor,  # shape: (n_pairs,)
    n_sources: int,
) -> Adjacency:
    """Build offset-index adjacency from (source, target) pairs.

    Pairs are sorted by source, then by target, so each source's targets come
    out in ascending order.

    Parameters
    ----------
    source_indices : torch.Tensor
        Source indices, shape (n_pairs,).
    target_indices : torch.Tensor
        Target indices, shape (n_pairs,).
    n_sources : int
        Total number of sources (may exceed ``max(source_indices)``).

    Returns
    -------
    Adjacency

    Examples
    --------
    >>> sources = torch.tensor([0, 0, 1, 3])
    >>> targets = torch.tensor([2, 1, 3, 0])
    >>> build_adjacency_from_pairs(sources, targets, n_sources=4).to_list()
    [[1, 2], [3], [], [0]]
    """
    device = source_indices.device

    if len(source_indices) == 0:
        return Adjacency(
            offsets=torch.zeros(n_sources + 1, dtype=torch.int64, device=device),
            indices=torch.zeros(0, dtype=torch.int64, device=device),
        )

    ### Lexicographic sort by (source, target) using two stable argsorts
    sort_by_target = torch.argsort(target_indices, stable=True)
    sort_indices = sort_by_target[
        torch.argsort(source_indices[sort_by_target], stable=True)
    ]

    offsets = torch.zeros(n_sources + 1, dtype=torch.int64, device=device)
    offsets[1:] = torch.cumsum(
        torch.bincount(source_indices, minlength=n_sources), dim=0
    )

    return Adjacency(offsets=offsets, indices=target_indices[sort_indices].long())
