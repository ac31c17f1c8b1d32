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

"""Cache helpers for values derived from mesh geometry.

Derived quantities (face normals, centroids, areas) live in the mesh's
TensorDicts under the ``"_cache"`` key. Anything that moves points must
drop or transform them (see :meth:`Mesh.strip_caches`).
"""

import torch
from tensordict import TensorDict

CACHE_KEY = "_cache"


def get_cached(data: TensorDict, key: str) -> torch.Tensor | None:
    """Return ``data["_cache", key]`` or ``None`` when it was never stored.

    Examples
    --------
    >>> normals = get_cached(mesh.cell_data, "normals")  # doctest: +SKIP
    """
    return data.get((CACHE_KEY, key), None)


def set_cached(data: TensorDict, key: str, value: torch.Tensor) -> None:
    """Store ``value`` under ``data["_cache", key]``.

    The ``"_cache"`` sub-TensorDict is created with the parent's batch size
    on first use.
    """
    if CACHE_KEY not in data:
        data[CACHE_KEY] = TensorDict({}, batch_size=data.batch_size, device=data.device)
    data[(CACHE_KEY, key)] = value
