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

r"""Configuration of a myriahedral projection.

A :class:`MyriahedronConfig` fixes everything that determines the topology
of a myriahedron (base geometry and subdivision depth) plus how its output is
presented. It can be built directly, from a plain dict, or from a Hydra /
OmegaConf config node.
"""

from dataclasses import dataclass, fields
from typing import Any

import torch

from myriahedral.primitives.graticule import FOLD_PATTERNS

GEOMETRIES = ("tetrahedron", "cube", "octahedron", "icosahedron", "graticule")

GRATICULE_TYPES = ("spanning_tree", *FOLD_PATTERNS)

_DTYPES = {
    "float32": torch.float32,
    "float64": torch.float64,
}


@dataclass
class MyriahedronConfig:
    r"""Parameters of a :class:`~myriahedral.myriahedron.Myriahedron`.

    Parameters
    ----------
    geometry : str
        Base geometry, one of ``"tetrahedron"``, ``"cube"``, ``"octahedron"``,
        ``"icosahedron"`` or ``"graticule"``.
    subdivisions : int
        Subdivision depth, >= 0. Each level multiplies the face count by 4.
    parallels : int
        Graticule rows (the graticule has ``2 * parallels`` columns). Only
        used when ``geometry == "graticule"``; must be >= 2.
    graticule_type : str
        How a graticule is cut open. ``"spanning_tree"`` picks folds like for
        the solids. The others are the hand-built patterns of
        :func:`~myriahedral.primitives.graticule.quad_links` and need
        ``subdivisions == 0``. Ignored for the solids.
    unfoldable : bool
        If True, duplicate vertices so the mesh can be unfolded. If False,
        the shared-vertex mesh is exposed and cannot be unfolded.
    normalize : bool
        Project subdivided vertices onto the unit sphere.
    uv_offset_lon, uv_offset_lat : float
        Texture rotation in radians about the y and x axes.
    dtype : torch.dtype or str
        Floating point dtype of the geometry. ``"float32"`` and
        ``"float64"`` are accepted as strings.
    device : str
        Compute device.

    Examples
    --------
    >>> cfg = MyriahedronConfig.from_dict({"geometry": "icosahedron", "subdivisions": 3})
    >>> cfg.dtype
    torch.float64
    """

    geometry: str = "icosahedron"
    subdivisions: int = 3
    parallels: int = 8
    graticule_type: str = "spanning_tree"
    unfoldable: bool = True
    normalize: bool = True
    uv_offset_lon: float = 0.0
    uv_offset_lat: float = 0.0
    dtype: torch.dtype | str = torch.float64
    device: str = "cpu"

    def __post_init__(self) -> None:
        if self.geometry not in GEOMETRIES:
            raise ValueError(
                f"geometry must be one of {GEOMETRIES}, got {self.geometry=}"
            )
        if self.subdivisions < 0:
            raise ValueError(
                f"subdivisions must be non-negative, got {self.subdivisions=}"
            )
        if self.geometry == "graticule" and self.parallels < 2:
            raise ValueError(f"parallels must be at least 2, got {self.parallels=}")
        if self.graticule_type not in GRATICULE_TYPES:
            raise ValueError(
                f"graticule_type must be one of {GRATICULE_TYPES}, "
                f"got {self.graticule_type=}"
            )
        if (
            self.geometry == "graticule"
            and self.graticule_type != "spanning_tree"
            and self.subdivisions != 0
        ):
            raise ValueError(
                f"The {self.graticule_type} fold pattern is defined on the plain "
                f"graticule only; it needs subdivisions=0, got {self.subdivisions=}"
            )
        if isinstance(self.dtype, str):
            if self.dtype not in _DTYPES:
                raise ValueError(
                    f"dtype must be one of {tuple(_DTYPES)}, got {self.dtype=}"
                )
            self.dtype = _DTYPES[self.dtype]
        if not self.dtype.is_floating_point:
            raise TypeError(f"dtype must be a floating point dtype, got {self.dtype=}")

    @classmethod
    def from_dict(cls, cfg: Any) -> "MyriahedronConfig":
        """Build a config from a mapping or an OmegaConf ``DictConfig``.

        Unknown keys raise ``TypeError`` so typos do not pass silently.
        """
        if type(cfg).__module__.startswith("omegaconf"):
            from omegaconf import OmegaConf

            cfg = OmegaConf.to_container(cfg, resolve=True)
        if not isinstance(cfg, dict):
            raise TypeError(f"Cannot build a config from {type(cfg)}")

        known = {f.name for f in fields(cls)}
        unknown = set(cfg) - known
        if unknown:
            raise TypeError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**cfg)

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form with the dtype as a string."""
        result = {f.name: getattr(self, f.name) for f in fields(self)}
        result["dtype"] = str(self.dtype).removeprefix("torch.")
        return result
