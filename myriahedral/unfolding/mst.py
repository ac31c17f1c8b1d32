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

"""Minimum spanning tree over the face-adjacency graph.

The tree edges become the folds of the myriahedron; every other edge is cut.
"""

import heapq
import logging

import torch

from myriahedral.neighbors._adjacency import build_adjacency_from_pairs
from myriahedral.unfolding._dual_graph import FaceEdges
from myriahedral.utilities._edge_lookup import find_edges_in_reference
from myriahedral.utilities._topology import TopologyError

logger = logging.getLogger(__name__)


def minimum_spanning_tree(
    dual: FaceEdges,
    n_faces: int,
    start_face: int = 0,
    tiers: torch.Tensor | None = None,
) -> torch.Tensor:
    """Grow a minimum spanning tree over faces with Prim's algorithm.

    At every step the cheapest dual edge leaving the current tree is added.
    Edges are ordered by ``(tier, weight, min face, max face, edge row)``,
    so the result depends only on the input, never on hashing order.

    Parameters
    ----------
    dual : FaceEdges
        Dual edges with ``weight`` set.
    n_faces : int
        Number of faces; every face must be reached.
    start_face : int
        Face the tree grows from.
    tiers : torch.Tensor, optional
        Shape (n_dual,) integer priority classes, see
        :func:`attachment_tiers`. An edge of a higher tier is only taken
        once no lower-tier edge leaves the tree, whatever its weight.
        Defaults to a single tier.

    Returns
    -------
    torch.Tensor
        Shape (n_faces - 1,), int64. Rows of ``dual`` in the order they were
        added to the tree.

    Raises
    ------
    TopologyError
        If the dual graph is disconnected, so some face can never be reached.

    Examples
    --------
    >>> tree = minimum_spanning_tree(dual, n_faces=16)  # doctest: +SKIP
    >>> len(tree)  # doctest: +SKIP
    15
    """
    if not 0 <= start_face < n_faces:
        raise ValueError(f"start_face must be in [0, {n_faces}), got {start_face=}")

    n_dual = dual.batch_size[0]
    rows = torch.arange(n_dual, device=dual.from_face.device)
    face_to_dual = build_adjacency_from_pairs(
        torch.cat([dual.from_face, dual.to_face]),
        torch.cat([rows, rows]),
        n_sources=n_faces,
    )

    ### Plain Python views for the heap loop
    offsets = face_to_dual.offsets.tolist()
    incident = face_to_dual.indices.tolist()
    from_face = dual.from_face.tolist()
    to_face = dual.to_face.tolist()
    weight = dual.weight.tolist()
    tier = [0] * n_dual if tiers is None else tiers.tolist()

    in_tree = [False] * n_faces
    tree: list[int] = []
    heap: list[tuple[int, float, int, int, int]] = []

    def visit(face: int) -> None:
        in_tree[face] = True
        for row in incident[offsets[face] : offsets[face + 1]]:
            other = to_face[row] if from_face[row] == face else from_face[row]
            if not in_tree[other]:
                f0, f1 = from_face[row], to_face[row]
                heapq.heappush(
                    heap, (tier[row], weight[row], min(f0, f1), max(f0, f1), row)
                )

    visit(start_face)
    while len(tree) < n_faces - 1:
        if not heap:
            n_reached = sum(in_tree)
            raise TopologyError(
                f"Face-adjacency graph is disconnected: the spanning tree from "
                f"face {start_face} reached {n_reached} of {n_faces} faces"
            )
        row = heapq.heappop(heap)[-1]
        f0, f1 = from_face[row], to_face[row]
        if in_tree[f0] and in_tree[f1]:
            continue
        tree.append(row)
        visit(f1 if in_tree[f0] else f0)

    logger.debug(f"Spanning tree over {n_faces} faces from {n_dual} dual edges")
    return torch.tensor(tree, dtype=torch.int64, device=dual.from_face.device)


def attachment_tiers(
    dual: FaceEdges, degenerate: torch.Tensor
) -> tuple[torch.Tensor, int]:
    """Spanning-tree priorities that keep degenerate faces at the fringe.

    A zero-area face has no reliable normal, so a fold through it cannot be
    flattened. Dual edges touching such a face get tier 1, which makes the
    spanning tree reach every other face first wherever the non-degenerate
    faces are connected among themselves. The returned start face is the
    lowest-index non-degenerate face with a non-degenerate neighbour; its
    edges get 2 added, so it stays a leaf unless it is a cut vertex.

    Parameters
    ----------
    dual : FaceEdges
        All dual edges.
    degenerate : torch.Tensor
        Shape (n_faces,) bool.

    Returns
    -------
    tiers : torch.Tensor
        Shape (n_dual,) int64 in ``{0, 1, 2, 3}``.
    start_face : int
        Face for :func:`minimum_spanning_tree` to grow from. 0 when every
        face is degenerate.
    """
    touches = degenerate[dual.from_face] | degenerate[dual.to_face]
    regular = torch.zeros_like(degenerate)
    regular[dual.from_face[~touches]] = True
    regular[dual.to_face[~touches]] = True

    candidates = torch.nonzero(regular).flatten()
    start_face = int(candidates[0]) if len(candidates) > 0 else 0
    at_start = (dual.from_face == start_face) | (dual.to_face == start_face)
    return touches.long() + 2 * at_start.long(), start_face


def spanning_tree_from_edges(dual: FaceEdges, fold_edges: torch.Tensor) -> torch.Tensor:
    """Select the dual edges whose mesh edge is listed as a fold.

    Used for hand-built fold patterns instead of :func:`minimum_spanning_tree`.
    Whether the selection actually spans the faces is checked when it is
    rooted by :func:`~myriahedral.unfolding.fold_tree.build_fold_tree`.

    Parameters
    ----------
    dual : FaceEdges
        All dual edges.
    fold_edges : torch.Tensor
        Shape (n, 2) vertex pairs, in either direction.

    Returns
    -------
    torch.Tensor
        Ascending rows of ``dual``.
    """
    _, matches = find_edges_in_reference(
        fold_edges, torch.stack([dual.vertex0, dual.vertex1], dim=-1)
    )
    return torch.nonzero(matches).flatten()


def split_folds_and_cuts(
    dual: FaceEdges,
    tree: torch.Tensor,
    n_edges: int,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Partition the surviving edges into folds and cuts.

    Parameters
    ----------
    dual : FaceEdges
        Dual edges, indexed by ``tree``.
    tree : torch.Tensor
        Rows of ``dual`` forming the spanning tree.
    n_edges : int
        Number of surviving mesh edges.

    Returns
    -------
    is_fold : torch.Tensor
        Shape (n_edges,) bool, True where the surviving edge is a fold.
    cut_rows : torch.Tensor
        Surviving-edge rows that are cuts, ascending. Boundary edges, which
        have no dual edge, are always cuts.
    """
    is_fold = torch.zeros(n_edges, dtype=torch.bool, device=tree.device)
    is_fold[dual.edge[tree]] = True
    return is_fold, torch.nonzero(~is_fold).flatten()
