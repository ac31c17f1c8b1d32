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

r"""Continuous unfolding of a re-triangulated mesh along its fold tree.

Each fold hinges its ``to_face`` on the shared edge. Folding it flat takes a
rotation by the angle between the two face normals about that edge; at scale
``s`` the rotation angle is ``s`` times that. A face's final placement is the
composition of the rigid motions of every fold from the root down to it:

.. math::

    T_{face} = R_{root} \circ \dots \circ R_{parent} \circ R_{fold}

Rotations are composed level by level over the breadth-first fold order,
then applied to all vertices in one batched call. Positions are always
recomputed from the canonical (folded) snapshot, so repeated calls with the
same scale give the same result.
"""

import warnings
from typing import NamedTuple

import torch

from myriahedral.transformations.quaternion import (
    compose_rigid,
    identity_quaternion,
    quaternion_apply,
    quaternion_from_axis_angle,
)
from myriahedral.unfolding.fold_tree import FoldTree


class UnfoldPlan(NamedTuple):
    """Per-fold quantities that do not depend on the scale.

    Parameters
    ----------
    to_face : torch.Tensor
        Face carried by each fold, shape (n_folds,).
    parent : torch.Tensor
        Parent fold, -1 for the root, shape (n_folds,).
    axis : torch.Tensor
        Shared-edge direction ``p[vertex1] - p[vertex0]``, shape (n_folds, 3).
    pivot : torch.Tensor
        Shared-edge start ``p[vertex0]``, shape (n_folds, 3).
    angle : torch.Tensor
        Signed full-unfold angle ``theta * orientation``, shape (n_folds,).
    levels : list[torch.Tensor]
        Fold indices grouped by tree level, root level first.
    """

    to_face: torch.Tensor
    parent: torch.Tensor
    axis: torch.Tensor
    pivot: torch.Tensor
    angle: torch.Tensor
    levels: list[torch.Tensor]


def dihedral_angles(tree: FoldTree, normals: torch.Tensor) -> torch.Tensor:
    """Angle between the normals of the two faces of every fold.

    Parameters
    ----------
    tree : FoldTree
        Oriented fold tree.
    normals : torch.Tensor
        Canonical unit face normals, shape (n_faces, 3).

    Returns
    -------
    torch.Tensor
        ``acos(clamp(dot(N_from, N_to), -1, 1))``, shape (n_folds,), in
        ``[0, pi]``.
    """
    cos = (normals[tree.folds.from_face] * normals[tree.folds.to_face]).sum(dim=-1)
    return torch.acos(cos.clamp(-1.0, 1.0))


def resolve_orientations(
    tree: FoldTree,
    normals: torch.Tensor,
    points: torch.Tensor,
    theta: torch.Tensor,
    tolerance: float = 1e-6,
) -> torch.Tensor:
    """Choose the rotation sign that flattens each fold.

    The child normal is rotated by ``+theta`` and by ``-theta`` about the
    shared edge; the sign that brings it closer to the parent normal wins.
    The result is written to ``tree.folds.orientation`` and returned.

    Parameters
    ----------
    tree : FoldTree
        Oriented fold tree; its ``folds.orientation`` is updated in place.
    normals : torch.Tensor
        Canonical unit face normals, shape (n_faces, 3).
    points : torch.Tensor
        Canonical shared-vertex positions indexed by fold vertex ids.
    theta : torch.Tensor
        Unsigned fold angles from :func:`dihedral_angles`.
    tolerance : float
        Two signs whose results differ by less than this are undecidable.

    Returns
    -------
    torch.Tensor
        +1 / -1 per fold, int64.
    """
    folds = tree.folds
    axis = points[folds.vertex1] - points[folds.vertex0]
    parent_normal = normals[folds.from_face]
    child_normal = normals[folds.to_face]

    plus = quaternion_apply(quaternion_from_axis_angle(axis, theta), child_normal)
    minus = quaternion_apply(quaternion_from_axis_angle(axis, -theta), child_normal)
    dot_plus = (plus * parent_normal).sum(dim=-1)
    dot_minus = (minus * parent_normal).sum(dim=-1)

    orientation = torch.where(dot_plus >= dot_minus, 1, -1).to(torch.int64)

    ### Both signs equally good, yet neither flattens the pair
    undecided = ((dot_plus - dot_minus).abs() < tolerance) & (
        torch.maximum(dot_plus, dot_minus) < 1 - tolerance
    )
    if undecided.any():
        warnings.warn(
            f"Could not decide the unfold direction of {int(undecided.sum())} "
            f"fold(s), e.g. fold {int(torch.nonzero(undecided)[0])}; "
            f"using +1. These faces will not lie flat at scale 1.",
            stacklevel=2,
        )

    folds.orientation = orientation
    return orientation


def fold_levels(tree: FoldTree) -> list[torch.Tensor]:
    """Fold indices grouped by tree level, root level first."""
    level_of = tree.folds.level[tree.order]
    n_levels = int(level_of.max()) + 1 if len(tree.order) > 0 else 0
    return [tree.order[level_of == level] for level in range(n_levels)]


def hinge_normals(
    tree: FoldTree,
    normals: torch.Tensor,
    degenerate: torch.Tensor,
    levels: list[torch.Tensor] | None = None,
) -> torch.Tensor:
    """Normals to fold with, where degenerate faces borrow a neighbour's.

    A zero-area face (a graticule pole triangle) is a segment, and every fold
    into or out of it hinges on that segment's line. Giving it the normal of
    the face it hangs from makes the fold into it a no-op and the fold out of
    it rotate about a line shared by both real faces, so the pair lies flat.
    A degenerate anchor borrows the normal of the face the root fold carries.

    Parameters
    ----------
    tree : FoldTree
        Oriented fold tree.
    normals : torch.Tensor
        Canonical unit face normals, shape (n_faces, 3).
    degenerate : torch.Tensor
        Shape (n_faces,) bool.
    levels : list[torch.Tensor], optional
        Output of :func:`fold_levels`, computed when omitted.

    Returns
    -------
    torch.Tensor
        A copy of ``normals`` with degenerate rows replaced.
    """
    folds = tree.folds
    normals = normals.clone()
    if tree.root >= 0 and degenerate[tree.anchor_face]:
        normals[tree.anchor_face] = normals[folds.to_face[tree.root]]

    ### Level order, so chains of degenerate faces inherit transitively
    for batch in fold_levels(tree) if levels is None else levels:
        batch = batch[degenerate[folds.to_face[batch]]]
        normals[folds.to_face[batch]] = normals[folds.from_face[batch]]
    return normals


def plan_unfold(
    tree: FoldTree,
    normals: torch.Tensor,
    points: torch.Tensor,
    degenerate: torch.Tensor | None = None,
) -> UnfoldPlan:
    """Precompute everything :func:`unfold_points` needs besides the scale.

    Runs the orientation pre-pass once.

    Parameters
    ----------
    tree : FoldTree
        Oriented fold tree.
    normals : torch.Tensor
        Canonical unit face normals, shape (n_faces, 3).
    points : torch.Tensor
        Canonical shared-vertex positions, shape (n_points, 3).
    degenerate : torch.Tensor, optional
        Shape (n_faces,) bool. Marked faces fold with the normal given by
        :func:`hinge_normals` instead of their own.

    Returns
    -------
    UnfoldPlan
    """
    folds = tree.folds
    levels = fold_levels(tree)
    if degenerate is not None and degenerate.any():
        normals = hinge_normals(tree, normals, degenerate, levels)
    theta = dihedral_angles(tree, normals)
    orientation = resolve_orientations(tree, normals, points, theta)

    return UnfoldPlan(
        to_face=folds.to_face,
        parent=folds.parent,
        axis=points[folds.vertex1] - points[folds.vertex0],
        pivot=points[folds.vertex0],
        angle=theta * orientation.to(theta.dtype),
        levels=levels,
    )


def face_transforms(
    plan: UnfoldPlan,
    n_faces: int,
    scale: float,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Compose per-face rigid motions for a given scale.

    Parameters
    ----------
    plan : UnfoldPlan
        Output of :func:`plan_unfold`.
    n_faces : int
        Number of faces.
    scale : float
        Unfold amount in ``[0, 1]``.

    Returns
    -------
    rotation : torch.Tensor
        Unit quaternions, shape (n_faces, 4). The anchor face keeps identity.
    translation : torch.Tensor
        Shape (n_faces, 3).
    """
    dtype, device = plan.pivot.dtype, plan.pivot.device
    n_folds = len(plan.to_face)

    fold_rotation = identity_quaternion(n_folds, dtype=dtype, device=device)
    fold_translation = torch.zeros(n_folds, 3, dtype=dtype, device=device)
    local = quaternion_from_axis_angle(plan.axis, plan.angle * scale)

    ### Wavefront over tree levels; a level only reads the one above it
    for folds in plan.levels:
        parent = plan.parent[folds]
        has_parent = (parent >= 0).unsqueeze(-1)
        safe_parent = parent.clamp(min=0)
        parent_rotation = torch.where(
            has_parent,
            fold_rotation[safe_parent],
            identity_quaternion(len(folds), dtype=dtype, device=device),
        )
        parent_translation = torch.where(
            has_parent,
            fold_translation[safe_parent],
            torch.zeros_like(fold_translation[safe_parent]),
        )
        fold_rotation[folds], fold_translation[folds] = compose_rigid(
            parent_rotation, parent_translation, local[folds], plan.pivot[folds]
        )

    rotation = identity_quaternion(n_faces, dtype=dtype, device=device)
    translation = torch.zeros(n_faces, 3, dtype=dtype, device=device)
    rotation[plan.to_face] = fold_rotation
    translation[plan.to_face] = fold_translation
    return rotation, translation


def unfold_points(
    plan: UnfoldPlan,
    canonical_points: torch.Tensor,
    scale: float,
) -> torch.Tensor:
    """Positions of the re-triangulated vertices at a given unfold scale.

    Parameters
    ----------
    plan : UnfoldPlan
        Output of :func:`plan_unfold`.
    canonical_points : torch.Tensor
        Re-triangulated canonical positions, shape (3 * n_faces, 3); vertex
        ``3f + k`` belongs to face ``f``.
    scale : float
        0 keeps the folded sphere, 1 gives the flat net.

    Returns
    -------
    torch.Tensor
        Shape (3 * n_faces, 3).
    """
    n_faces = len(canonical_points) // 3
    rotation, translation = face_transforms(plan, n_faces, scale)
    rotation = rotation.repeat_interleave(3, dim=0)
    translation = translation.repeat_interleave(3, dim=0)
    return quaternion_apply(rotation, canonical_points) + translation
