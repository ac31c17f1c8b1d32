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

"""Dtype-aware numerical tolerances for unfolding computations.

Two kinds of floors are needed when folding a sphere flat:

- :func:`safe_eps` guards divisions (normalizing face normals and rotation
  axes). It only has to catch exact or near-exact zeros.
- :func:`degenerate_tolerance` decides when a face normal is too short to be
  trusted. Graticule pole triangles have two coincident corners, so their
  cross product is zero up to rounding, which is far above ``safe_eps``.

==========  ==============  ========================
dtype       ``safe_eps``    ``degenerate_tolerance``
==========  ==============  ========================
float32     ~3.3e-10        ~1.2e-5
float64     ~1.2e-77        ~2.2e-14
==========  ==============  ========================
"""

import torch


def safe_eps(dtype: torch.dtype) -> float:
    """Return a dtype-aware floor for preventing division by zero.

    Parameters
    ----------
    dtype : torch.dtype
        The floating-point dtype (e.g. ``torch.float32``,
        ``torch.float64``).

    Returns
    -------
    float
        ``torch.finfo(dtype).tiny ** 0.25``, small enough to leave any real
        normal or axis untouched while ``1 / safe_eps ** 2`` stays finite.
    """
    return torch.finfo(dtype).tiny ** 0.25


def degenerate_tolerance(dtype: torch.dtype) -> float:
    """Return the length below which a face normal counts as degenerate.

    Parameters
    ----------
    dtype : torch.dtype
        The floating-point dtype of the geometry.

    Returns
    -------
    float
        ``100 * torch.finfo(dtype).eps``.
    """
    return 100.0 * torch.finfo(dtype).eps
