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

r"""Batched unit quaternions and rigid motions.

Quaternions are stored scalar-first, ``q = (w, x, y, z)``, as the last
dimension of a tensor so that any number of rotations can be built, composed
and applied in one call.

A rigid motion is a pair ``(q, t)`` acting as :math:`x \mapsto q x q^* + t`.
Unfolding composes one such motion per fold along the fold tree.
"""

import torch
import torch.nn.functional as F

from myriahedral.utilities._tolerances import safe_eps


def identity_quaternion(
    *shape: int,
    dtype: torch.dtype = torch.float32,
    device: torch.device | str = "cpu",
) -> torch.Tensor:
    """Return identity quaternions ``(1, 0, 0, 0)`` of shape ``(*shape, 4)``.

    Examples
    --------
    >>> identity_quaternion(2).tolist()
    [[1.0, 0.0, 0.0, 0.0], [1.0, 0.0, 0.0, 0.0]]
    """
    q = torch.zeros(*shape, 4, dtype=dtype, device=device)
    q[..., 0] = 1.0
    return q


def quaternion_from_axis_angle(
    axis: torch.Tensor,
    angle: torch.Tensor | float,
) -> torch.Tensor:
    """Build rotation quaternions from axes and angles.

    Parameters
    ----------
    axis : torch.Tensor
        Rotation axes, shape (..., 3). Need not be unit length; zero-length
        axes produce the identity rotation.
    angle : torch.Tensor or float
        Rotation angles in radians, broadcastable to ``axis.shape[:-1]``.

    Returns
    -------
    torch.Tensor
        Unit quaternions, shape (..., 4).

    Examples
    --------
    >>> import math
    >>> q = quaternion_from_axis_angle(torch.tensor([0.0, 0.0, 2.0]), math.pi)
    >>> torch.allclose(q, torch.tensor([0.0, 0.0, 0.0, 1.0]), atol=1e-7)
    True
    """
    eps = safe_eps(axis.dtype)
    angle = torch.as_tensor(angle, dtype=axis.dtype, device=axis.device)
    ### A zero-length axis has no direction; rotate by nothing
    angle = torch.where(axis.norm(dim=-1) > eps, angle, torch.zeros_like(angle))
    unit_axis = F.normalize(axis, dim=-1, eps=eps)
    half = angle / 2
    w = torch.cos(half).expand(axis.shape[:-1])
    xyz = unit_axis * torch.sin(half).unsqueeze(-1)
    return torch.cat([w.unsqueeze(-1), xyz], dim=-1)


def quaternion_multiply(a: torch.Tensor, b: torch.Tensor) -> torch.Tensor:
    """Hamilton product ``a * b`` (apply ``b`` first, then ``a``).

    Both inputs have shape (..., 4) and broadcast against each other.
    """
    aw, ax, ay, az = a.unbind(-1)
    bw, bx, by, bz = b.unbind(-1)
    return torch.stack(
        [
            aw * bw - ax * bx - ay * by - az * bz,
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
        ],
        dim=-1,
    )


def quaternion_apply(q: torch.Tensor, points: torch.Tensor) -> torch.Tensor:
    r"""Rotate points by unit quaternions.

    Uses the expanded form of :math:`q v q^*`:

    .. math::

        v' = v + 2w (u \times v) + 2 u \times (u \times v)

    where ``u`` is the vector part of ``q``. The identity quaternion returns
    ``points`` bit-for-bit.

    Parameters
    ----------
    q : torch.Tensor
        Unit quaternions, shape (..., 4).
    points : torch.Tensor
        Points, shape (..., 3), broadcastable against ``q[..., :3]``.

    Returns
    -------
    torch.Tensor
        Rotated points with the broadcast shape.

    Examples
    --------
    >>> import math
    >>> q = quaternion_from_axis_angle(torch.tensor([0.0, 1.0, 0.0]), math.pi / 2)
    >>> p = quaternion_apply(q, torch.tensor([1.0, 0.0, 0.0]))
    >>> torch.allclose(p, torch.tensor([0.0, 0.0, -1.0]), atol=1e-6)
    True
    """
    ### cross() needs both operands at the same shape, so a single quaternion
    ### is expanded over a batch of points (and vice versa)
    u, points = torch.broadcast_tensors(q[..., 1:], points)
    w = q[..., :1].expand(*points.shape[:-1], 1)
    uv = torch.linalg.cross(u, points)
    uuv = torch.linalg.cross(u, uv)
    return points + 2 * (w * uv + uuv)


def compose_rigid(
    parent_rotation: torch.Tensor,
    parent_translation: torch.Tensor,
    local_rotation: torch.Tensor,
    pivot: torch.Tensor,
) -> tuple[torch.Tensor, torch.Tensor]:
    r"""Compose a parent rigid motion with a rotation about a pivot point.

    The local motion is :math:`R(x) = q_l (x - p) q_l^* + p`. The result is
    the motion :math:`T_{parent} \circ R`:

    .. math::

        q = q_{parent} q_l, \qquad
        t = t_{parent} + q_{parent}\,p\,q_{parent}^* - q\,p\,q^*

    Parameters
    ----------
    parent_rotation : torch.Tensor
        Shape (n, 4).
    parent_translation : torch.Tensor
        Shape (n, 3).
    local_rotation : torch.Tensor
        Shape (n, 4).
    pivot : torch.Tensor
        Shape (n, 3), a point on the local rotation axis.

    Returns
    -------
    tuple[torch.Tensor, torch.Tensor]
        ``(rotation, translation)`` of the composed motion.
    """
    rotation = quaternion_multiply(parent_rotation, local_rotation)
    translation = (
        parent_translation
        + quaternion_apply(parent_rotation, pivot)
        - quaternion_apply(rotation, pivot)
    )
    return rotation, translation
