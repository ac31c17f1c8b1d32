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

"""Equirectangular texture coordinates for myriahedra.

``u`` follows longitude around the y axis and ``v`` follows latitude:

- ``u = 0.5 + atan2(x, z) / (2 pi)``
- ``v = 0.5 - asin(y) / pi``

Where a triangle straddles the ``u = 0 / u = 1`` seam its corners would
interpolate across the whole texture. Because re-triangulated faces own their
vertices, each face can be corrected on its own.
"""

import torch
import torch.nn.functional as F

from myriahedral.transformations.geometric import rotate_points


def equirectangular_uv(points: torch.Tensor) -> torch.Tensor:
    """Map points (projected onto the unit sphere) to ``(u, v)`` in ``[0, 1]``.

    Parameters
    ----------
    points : torch.Tensor
        Shape (n_points, 3). Need not be unit length.

    Returns
    -------
    torch.Tensor
        Shape (n_points, 2).

    Examples
    --------
    >>> equirectangular_uv(torch.tensor([[0.0, 0.0, 1.0]])).tolist()
    [[0.5, 0.5]]
    """
    unit = F.normalize(points, dim=-1)
    x, y, z = unit.unbind(-1)
    u = 0.5 + torch.atan2(x, z) / (2 * torch.pi)
    v = 0.5 - torch.asin(y.clamp(-1.0, 1.0)) / torch.pi
    return torch.stack([u, v], dim=-1)


def correct_seams(uv: torch.Tensor, cells: torch.Tensor) -> torch.Tensor:
    """Unwrap texture coordinates of faces that cross the seam.

    For every face and each of ``u`` and ``v`` separately: if the three
    values span more than 0.5, 1.0 is added to the ones below 0.5.

    Parameters
    ----------
    uv : torch.Tensor
        Shape (n_points, 2).
    cells : torch.Tensor
        Shape (n_faces, 3). Faces must not share vertices.

    Returns
    -------
    torch.Tensor
        Corrected copy of ``uv``; values may exceed 1 (use a repeating
        texture wrap).
    """
    corners = uv[cells]  # (n_faces, 3, 2)
    span = corners.amax(dim=1) - corners.amin(dim=1)
    wraps = (span > 0.5).unsqueeze(1) & (corners < 0.5)
    corrected = uv.clone()
    corrected[cells] = corners + wraps.to(uv.dtype)
    return corrected


def calculate_uv(
    points: torch.Tensor,
    cells: torch.Tensor | None = None,
    offset_lon: float = 0.0,
    offset_lat: float = 0.0,
) -> torch.Tensor:
    """Texture coordinates of canonical (folded) positions.

    Parameters
    ----------
    points : torch.Tensor
        Canonical positions, shape (n_points, 3).
    cells : torch.Tensor, optional
        Face-owned cells of the re-triangulated mesh. When given, seams are
        corrected per face; when None, raw per-vertex coordinates are
        returned (shared-vertex meshes cannot be corrected per face).
    offset_lon : float
        Radians to rotate about the y axis before projecting.
    offset_lat : float
        Radians to rotate about the x axis, after the longitude offset.

    Returns
    -------
    torch.Tensor
        Shape (n_points, 2).
    """
    if offset_lon != 0.0:
        points = rotate_points(points, offset_lon, "y")
    if offset_lat != 0.0:
        points = rotate_points(points, offset_lat, "x")
    uv = equirectangular_uv(points)
    if cells is None:
        return uv
    return correct_seams(uv, cells)
