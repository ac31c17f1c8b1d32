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

"""String formatting for Mesh representations."""

import torch
from tensordict import TensorDict

from myriahedral.utilities._cache import CACHE_KEY

_DATA_FIELDS = ("point_data", "cell_data", "global_data")


def format_mesh_repr(mesh, exclude_cache: bool = True) -> str:
    """Format a Mesh as a header line followed by one line per data field.

    Parameters
    ----------
    mesh : Mesh
        The Mesh instance to format.
    exclude_cache : bool
        If True, entries under ``"_cache"`` are hidden.

    Returns
    -------
    str
        For example::

            Mesh(n_points=48, n_cells=16, dtype=torch.float64)
                point_data : {uv: (2,)}
                cell_data  : {original_cells: (3,)}
                global_data: {}
    """
    header = (
        f"{mesh.__class__.__name__}("
        f"n_points={mesh.n_points}, n_cells={mesh.n_cells}, "
        f"dtype={mesh.points.dtype}"
    )
    if mesh.points.device.type != "cpu":
        header += f", device={mesh.points.device}"
    header += ")"

    width = max(len(name) for name in _DATA_FIELDS)
    lines = [header]
    for name in _DATA_FIELDS:
        td = getattr(mesh, name)
        lines.append(
            f"    {name.ljust(width)}: {_format_tensordict(td, exclude_cache)}"
        )
    return "\n".join(lines)


def _format_tensordict(td: TensorDict, exclude_cache: bool) -> str:
    """Format a TensorDict as ``{key: trailing_shape, ...}`` sorted by key."""
    batch_dims = len(td.batch_size)
    items = []
    for key in sorted(td.keys()):
        if exclude_cache and key == CACHE_KEY:
            continue
        value = td[key]
        if isinstance(value, TensorDict):
            items.append(f"{key}: {_format_tensordict(value, exclude_cache)}")
        elif isinstance(value, torch.Tensor):
            items.append(f"{key}: {tuple(value.shape[batch_dims:])}")
        else:
            items.append(f"{key}: <{type(value).__name__}>")
    return "{" + ", ".join(items) + "}"
