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

"""Rooted fold tree built from the spanning tree.

The spanning tree is undirected. To unfold, each fold must know which of its
two faces is already placed (``from_face``) and which one it carries along
(``to_face``), and which fold placed its ``from_face``. A breadth-first walk
from a root fold assigns both.
"""

import logging
from collections import deque
from typing import NamedTuple

import torch

from myriahedral.neighbors._adjacency import Adjacency, build_adjacency_from_pairs
from myriahedral.unfolding._dual_graph import FaceEdges
from myriahedral.utilities._topology import TopologyError

logger = logging.getLogger(__name__)


class FoldTree(NamedTuple):
    """Folds oriented away from a fixed anchor face.

    Parameters
    ----------
    folds : FaceEdges
        One row per fold with ``parent`` and ``level`` filled and
        ``from_face -> to_face`` pointing away from the anchor.
    children : Adjacency
        Children of each fold, in fold indices.
    root : int
        Index of the root fold, or -1 when the mesh has a single face.
    anchor_face : int
        The face that never moves (the root's ``from_face``).
    order : torch.Tensor
        Fold indices in breadth-first order; ``folds.level[order]`` is
        non-decreasing.
    """

    folds: FaceEdges
    children: Adjacency
    root: int
    anchor_face: int
    order: torch.Tensor


def build_fold_tree(
    dual: FaceEdges,
    tree: torch.Tensor,
    n_faces: int,
    anchor_candidates: torch.Tensor | None = None,
) -> FoldTree:
    """Root and orient the spanning tree.

    The root is the fold incident to the lowest-index leaf face of the tree,
    oriented away from that leaf. With ``anchor_candidates`` the lowest leaf
    among the candidates is preferred; the overall lowest leaf is used only
    when no candidate is a leaf. From there every reached face claims its
    unclaimed folds, reversing any whose stored direction points back at it.

    Parameters
    ----------
    dual : FaceEdges
        All dual edges.
    tree : torch.Tensor
        Rows of ``dual`` forming a spanning tree over ``n_faces`` faces.
    n_faces : int
        Number of faces.
    anchor_candidates : torch.Tensor, optional
        Shape (n_faces,) bool, the faces allowed to stay fixed. Degenerate
        faces are left out so the net is laid in the plane of a real face.

    Returns
    -------
    FoldTree

    Raises
    ------
    TopologyError
        If the folds do not form a single tree over all faces.
    """
    folds = dual[tree].clone()
    n_folds = len(tree)
    device = tree.device

    if n_folds == 0:
        if n_faces != 1:
            raise TopologyError(f"No folds to connect {n_faces=} faces")
        return FoldTree(
            folds=folds,
            children=build_adjacency_from_pairs(
                torch.zeros(0, dtype=torch.int64, device=device),
                torch.zeros(0, dtype=torch.int64, device=device),
                n_sources=0,
            ),
            root=-1,
            anchor_face=0,
            order=torch.zeros(0, dtype=torch.int64, device=device),
        )
    if n_folds != n_faces - 1:
        raise TopologyError(
            f"A spanning tree over {n_faces} faces needs {n_faces - 1} folds, "
            f"got {n_folds=}"
        )

    rows = torch.arange(n_folds, device=device)
    face_to_fold = build_adjacency_from_pairs(
        torch.cat([folds.from_face, folds.to_face]),
        torch.cat([rows, rows]),
        n_sources=n_faces,
    )

    ### Anchor at the lowest-index leaf face
    leaves = torch.nonzero(face_to_fold.counts == 1).flatten()
    if len(leaves) == 0:
        raise TopologyError("Spanning tree has no leaf face")
    anchor_face = int(leaves[0])
    if anchor_candidates is not None:
        preferred = leaves[anchor_candidates[leaves]]
        if len(preferred) > 0:
            anchor_face = int(preferred[0])
        else:
            logger.debug(f"No candidate leaf face; anchoring at face {anchor_face}")
    root = int(face_to_fold.neighbors(anchor_face)[0])

    offsets = face_to_fold.offsets.tolist()
    incident = face_to_fold.indices.tolist()
    from_face = folds.from_face.tolist()
    to_face = folds.to_face.tolist()

    parent = [-1] * n_folds
    level = [0] * n_folds
    reverse = [False] * n_folds
    claimed = [False] * n_folds

    if from_face[root] != anchor_face:
        reverse[root] = True
        from_face[root], to_face[root] = to_face[root], from_face[root]
    claimed[root] = True

    order = [root]
    queue = deque([root])
    while queue:
        fold = queue.popleft()
        reached = to_face[fold]
        for child in incident[offsets[reached] : offsets[reached + 1]]:
            if claimed[child]:
                continue
            claimed[child] = True
            if from_face[child] != reached:
                reverse[child] = True
                from_face[child], to_face[child] = to_face[child], from_face[child]
            parent[child] = fold
            level[child] = level[fold] + 1
            order.append(child)
            queue.append(child)

    if len(order) != n_folds:
        raise TopologyError(
            f"Fold tree reached {len(order)} of {n_folds} folds from root {root}"
        )

    folds.swap(torch.tensor(reverse, dtype=torch.bool, device=device))
    folds.parent = torch.tensor(parent, dtype=torch.int64, device=device)
    folds.level = torch.tensor(level, dtype=torch.int64, device=device)

    child_rows = torch.nonzero(folds.parent >= 0).flatten()
    children = build_adjacency_from_pairs(
        folds.parent[child_rows], child_rows, n_sources=n_folds
    )
    _validate_fold_tree(folds, child_rows)

    logger.debug(
        f"Fold tree: root fold {root}, anchor face {anchor_face}, "
        f"depth {int(folds.level.max())}"
    )
    return FoldTree(
        folds=folds,
        children=children,
        root=root,
        anchor_face=anchor_face,
        order=torch.tensor(order, dtype=torch.int64, device=device),
    )


def _validate_fold_tree(folds: FaceEdges, child_rows: torch.Tensor) -> None:
    """Check the single-root and parent/child face continuity invariants."""
    n_roots = int((folds.parent == -1).sum())
    if n_roots != 1:
        raise TopologyError(f"Fold tree must have exactly one root, got {n_roots=}")
    parents = folds.parent[child_rows]
    broken = folds.from_face[child_rows] != folds.to_face[parents]
    if broken.any():
        raise TopologyError(
            f"{int(broken.sum())} folds do not start on their parent's face, "
            f"e.g. fold {int(child_rows[broken][0])}"
        )
