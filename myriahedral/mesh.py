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

from typing import TYPE_CHECKING, Any, Literal, Self

import torch
import torch.nn.functional as F
from tensordict import TensorDict, tensorclass

from myriahedral.transformations.geometric import rotate
from myriahedral.utilities._cache import CACHE_KEY, get_cached, set_cached
from myriahedral.utilities._tolerances import degenerate_tolerance
from myriahedral.utilities.mesh_repr import format_mesh_repr


@tensorclass(tensor_only=True)
class Mesh:
    r"""A triangulated surface in 3D space.

    The ``Mesh`` holds the geometry every stage of the myriahedral pipeline
    passes around: base solids, subdivided spheres, graticules and the
    unfolded, re-triangulated output.

    Attributes
    ----------
    points : torch.Tensor
        Vertex coordinates, shape (n_points, 3), floating point.
    cells : torch.Tensor
        Triangle connectivity, shape (n_cells, 3), integer. Each row lists
        three vertex indices. The winding order defines the outward normal.
    point_data : TensorDict
        Per-vertex data with batch size (n_points,), e.g. ``"uv"``.
    cell_data : TensorDict
        Per-triangle data with batch size (n_cells,).
    global_data : TensorDict
        Mesh-level data with batch size (). Base solids that ship an explicit
        edge list store it under ``"edges"``, shape (n_edges, 2).

    Notes
    -----
    Derived quantities (centroids, areas, normals) are computed lazily and
    cached under ``"_cache"`` in ``cell_data``. Any method returning a mesh
    with moved points must drop or transform those caches.

    Examples
    --------
    >>> points = torch.tensor([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    >>> mesh = Mesh(points=points, cells=torch.tensor([[0, 1, 2]]))
    >>> mesh.cell_normals.tolist()
    [[0.0, 0.0, 1.0]]
    """

    points: torch.Tensor  # shape: (n_points, 3)
    cells: torch.Tensor  # shape: (n_cells, 3)
    point_data: TensorDict
    cell_data: TensorDict
    global_data: TensorDict

    def __init__(
        self,
        points: torch.Tensor,
        cells: torch.Tensor,
        point_data: TensorDict | dict[str, torch.Tensor] | None = None,
        cell_data: TensorDict | dict[str, torch.Tensor] | None = None,
        global_data: TensorDict | dict[str, torch.Tensor] | None = None,
    ) -> None:
        ### Assign tensorclass fields
        self.points = points
        self.cells = cells

        if isinstance(point_data, TensorDict):
            point_data.batch_size = torch.Size([self.n_points])
        else:
            point_data = TensorDict(
                {} if point_data is None else dict(point_data),
                batch_size=torch.Size([self.n_points]),
                device=self.points.device,
            )
        self.point_data = point_data

        if isinstance(cell_data, TensorDict):
            cell_data.batch_size = torch.Size([self.n_cells])
        else:
            cell_data = TensorDict(
                {} if cell_data is None else dict(cell_data),
                batch_size=torch.Size([self.n_cells]),
                device=self.cells.device,
            )
        self.cell_data = cell_data

        if isinstance(global_data, TensorDict):
            global_data.batch_size = torch.Size([])
        else:
            global_data = TensorDict(
                {} if global_data is None else dict(global_data),
                batch_size=torch.Size([]),
                device=self.points.device,
            )
        self.global_data = global_data

        ### Validate shapes and dtypes
        if not torch.compiler.is_compiling():
            if self.points.ndim != 2 or self.points.shape[-1] != 3:
                raise ValueError(
                    f"`points` must have shape (n_points, 3), but got {self.points.shape=}."
                )
            if self.cells.ndim != 2 or self.cells.shape[-1] != 3:
                raise ValueError(
                    f"`cells` must have shape (n_cells, 3), but got {self.cells.shape=}."
                )
            if torch.is_floating_point(self.cells):
                raise TypeError(
                    f"`cells` must have an int-like dtype, but got {self.cells.dtype=}."
                )
            if self.points.device != self.cells.device:
                raise ValueError(
                    f"`points` and `cells` must be on the same device, "
                    f"but got {self.points.device=} and {self.cells.device=}."
                )

    if TYPE_CHECKING:
        # Type stub for the `to` method dynamically added by @tensorclass.
        def to(self, *args: Any, **kwargs: Any) -> Self:
            """Move the mesh and all attached data to a device and/or dtype."""
            ...

        def clone(self) -> Self:
            """Return a shallow clone of this Mesh."""
            ...

    @property
    def n_points(self) -> int:
        return self.points.shape[0]

    @property
    def n_cells(self) -> int:
        return self.cells.shape[0]

    @property
    def n_spatial_dims(self) -> int:
        return self.points.shape[-1]

    @property
    def n_manifold_dims(self) -> int:
        return self.cells.shape[-1] - 1

    @property
    def cell_centroids(self) -> torch.Tensor:
        """Arithmetic mean of each triangle's vertices, shape (n_cells, 3).

        Cached in ``cell_data["_cache"]["centroids"]``.
        """
        cached = get_cached(self.cell_data, "centroids")
        if cached is None:
            cached = self.points[self.cells].mean(dim=1)
            set_cached(self.cell_data, "centroids", cached)
        return cached

    @property
    def cell_areas(self) -> torch.Tensor:
        """Triangle areas, shape (n_cells,).

        Cached in ``cell_data["_cache"]["areas"]``.
        """
        cached = get_cached(self.cell_data, "areas")
        if cached is None:
            cached = self._raw_cell_normals().norm(dim=-1) / 2
            set_cached(self.cell_data, "areas", cached)
        return cached

    @property
    def degenerate_cells(self) -> torch.Tensor:
        """Cells too small to define a plane, shape (n_cells,) bool.

        These are the cells whose normal falls back to the centroid direction
        in :attr:`cell_normals`.
        """
        return 2 * self.cell_areas < degenerate_tolerance(self.points.dtype)

    @property
    def cell_normals(self) -> torch.Tensor:
        """Unit outward normals from the right-hand rule on each triangle.

        For a triangle ``(a, b, c)`` the normal is the normalized
        ``(b - a) x (c - a)``. Degenerate triangles, whose cross product is
        shorter than :func:`degenerate_tolerance`, have no defined plane; for
        those the normalized centroid is used instead, which is the outward
        direction for any surface enclosing the origin. A triangle whose
        centroid is also at the origin gets a zero normal.

        Cached in ``cell_data["_cache"]["normals"]``.

        Returns
        -------
        torch.Tensor
            Shape (n_cells, 3).
        """
        cached = get_cached(self.cell_data, "normals")
        if cached is None:
            raw = self._raw_cell_normals()
            length = raw.norm(dim=-1, keepdim=True)
            degenerate = length < degenerate_tolerance(self.points.dtype)
            cached = torch.where(
                degenerate,
                F.normalize(self.cell_centroids, dim=-1),
                F.normalize(raw, dim=-1),
            )
            set_cached(self.cell_data, "normals", cached)
        return cached

    def _raw_cell_normals(self) -> torch.Tensor:
        """Unnormalized ``(b - a) x (c - a)`` per triangle."""
        corners = self.points[self.cells]
        return torch.linalg.cross(
            corners[:, 1] - corners[:, 0], corners[:, 2] - corners[:, 0]
        )

    def rotate(
        self,
        angle: float,
        axis: torch.Tensor | list | tuple | Literal["x", "y", "z"],
        center: torch.Tensor | list | tuple | None = None,
    ) -> "Mesh":
        """Rotate the mesh about an axis by a specified angle.

        Convenience wrapper for :func:`myriahedral.transformations.geometric.rotate`.

        Parameters
        ----------
        angle : float
            Rotation angle in radians.
        axis : torch.Tensor or list or tuple or {"x", "y", "z"}
            Rotation axis vector.
        center : torch.Tensor or list or tuple, optional
            Center point for rotation.

        Returns
        -------
        Mesh
            New Mesh with rotated geometry.
        """
        return rotate(self, angle, axis, center)

    def strip_caches(self) -> "Mesh":
        """Return a new mesh with all cached values removed."""
        return Mesh(
            points=self.points,
            cells=self.cells,
            point_data=self.point_data.exclude(CACHE_KEY),
            cell_data=self.cell_data.exclude(CACHE_KEY),
            global_data=self.global_data.exclude(CACHE_KEY),
        )


### Override the tensorclass __repr__ with custom formatting
# Must be done after class definition because @tensorclass overrides __repr__
def _mesh_repr(self) -> str:
    return format_mesh_repr(self, exclude_cache=False)


Mesh.__repr__ = _mesh_repr  # type: ignore
