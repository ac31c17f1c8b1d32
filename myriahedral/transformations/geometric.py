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

"""Whole-mesh rotations.

Rotating a mesh rigidly keeps its face normals valid (they rotate with it),
so the normal cache is carried over instead of being recomputed. Areas are
invariant and are kept as well. Centroids are rotated.
"""

from typing import TYPE_CHECKING, Literal

import torch
import torch.nn.functional as F

from myriahedral.utilities._cache import CACHE_KEY, get_cached, set_cached

if TYPE_CHECKING:
    from myriahedral.mesh import Mesh

_NAMED_AXES = {
    "x": (1.0, 0.0, 0.0),
    "y": (0.0, 1.0, 0.0),
    "z": (0.0, 0.0, 1.0),
}


def _build_rotation_matrix(
    angle: float | torch.Tensor,
    axis: torch.Tensor | list | tuple | Literal["x", "y", "z"],
    dtype: torch.dtype,
    device,
) -> torch.Tensor:
    """Build a 3x3 rotation matrix with Rodrigues' formula.

    Parameters
    ----------
    angle : float or torch.Tensor
        Rotation angle in radians.
    axis : torch.Tensor or list or tuple or {"x", "y", "z"}
        Rotation axis, shape (3,). Normalized internally.
    dtype : torch.dtype
        dtype of the returned matrix.
    device : device
        Target device for the output matrix.

    Returns
    -------
    torch.Tensor
        Shape (3, 3).
    """
    if isinstance(axis, str):
        if axis not in _NAMED_AXES:
            raise ValueError(f"axis must be one of 'x', 'y', 'z', got {axis=}")
        axis = _NAMED_AXES[axis]

    angle = torch.as_tensor(angle, dtype=dtype, device=device)
    axis = torch.as_tensor(axis, dtype=dtype, device=device)
    if axis.shape != (3,):
        raise ValueError(f"axis must have shape (3,), got {axis.shape=}")
    if axis.norm() < 1e-10:
        raise ValueError(f"Axis vector has near-zero length: {axis.norm()=}")

    c, s = torch.cos(angle), torch.sin(angle)
    u = F.normalize(axis, dim=0, eps=0.0)
    ux, uy, uz = u
    zero = torch.zeros((), dtype=dtype, device=device)

    # Skew-symmetric cross-product matrix [u]_x
    u_cross = torch.stack(
        [
            torch.stack([zero, -uz, uy]),
            torch.stack([uz, zero, -ux]),
            torch.stack([-uy, ux, zero]),
        ]
    )
    identity = torch.eye(3, dtype=dtype, device=device)
    return c * identity + s * u_cross + (1 - c) * u.outer(u)


def rotate_points(
    points: torch.Tensor,
    angle: float | torch.Tensor,
    axis: torch.Tensor | list | tuple | Literal["x", "y", "z"],
    center: torch.Tensor | list | tuple | None = None,
) -> torch.Tensor:
    """Rotate points about an axis through ``center`` (the origin by default).

    Parameters
    ----------
    points : torch.Tensor
        Shape (n_points, 3).
    angle : float or torch.Tensor
        Rotation angle in radians, right-handed about ``axis``.
    axis : torch.Tensor or list or tuple or {"x", "y", "z"}
        Rotation axis.
    center : torch.Tensor or list or tuple, optional
        Point on the rotation axis.

    Returns
    -------
    torch.Tensor
        Rotated points, same shape and dtype as ``points``.

    Examples
    --------
    >>> import math
    >>> p = rotate_points(torch.tensor([[1.0, 0.0, 0.0]]), math.pi / 2, "z")
    >>> torch.allclose(p, torch.tensor([[0.0, 1.0, 0.0]]), atol=1e-6)
    True
    """
    matrix = _build_rotation_matrix(angle, axis, points.dtype, points.device)
    if center is None:
        return points @ matrix.T
    center = torch.as_tensor(center, dtype=points.dtype, device=points.device)
    return (points - center) @ matrix.T + center


def rotate(
    mesh: "Mesh",
    angle: float | torch.Tensor,
    axis: torch.Tensor | list | tuple | Literal["x", "y", "z"],
    center: torch.Tensor | list | tuple | None = None,
) -> "Mesh":
    """Rotate a mesh rigidly, carrying over cached normals, areas and centroids.

    Parameters
    ----------
    mesh : Mesh
        Input mesh.
    angle : float or torch.Tensor
        Rotation angle in radians.
    axis : torch.Tensor or list or tuple or {"x", "y", "z"}
        Rotation axis.
    center : torch.Tensor or list or tuple, optional
        Point on the rotation axis.

    Returns
    -------
    Mesh
        New Mesh; point/cell/global data (other than caches) is shared.
    """
    from myriahedral.mesh import Mesh

    matrix = _build_rotation_matrix(angle, axis, mesh.points.dtype, mesh.points.device)
    if center is None:
        center_t = torch.zeros(3, dtype=mesh.points.dtype, device=mesh.points.device)
    else:
        center_t = torch.as_tensor(
            center, dtype=mesh.points.dtype, device=mesh.points.device
        )

    rotated = Mesh(
        points=(mesh.points - center_t) @ matrix.T + center_t,
        cells=mesh.cells,
        point_data=mesh.point_data.exclude(CACHE_KEY),
        cell_data=mesh.cell_data.exclude(CACHE_KEY),
        global_data=mesh.global_data,
    )

    normals = get_cached(mesh.cell_data, "normals")
    if normals is not None:
        set_cached(rotated.cell_data, "normals", normals @ matrix.T)
    areas = get_cached(mesh.cell_data, "areas")
    if areas is not None:
        set_cached(rotated.cell_data, "areas", areas)
    centroids = get_cached(mesh.cell_data, "centroids")
    if centroids is not None:
        set_cached(
            rotated.cell_data, "centroids", (centroids - center_t) @ matrix.T + center_t
        )

    return rotated
