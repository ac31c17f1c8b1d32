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

"""Myriahedral projections of the sphere.

A myriahedron is a sphere-approximating polyhedron with very many faces that
can be cut open and unfolded onto the plane. Building one runs the whole
pipeline once:

1. subdivide a base polyhedron (or graticule) into a dense triangle mesh,
2. pick folds as a minimum spanning tree of the face-adjacency graph (or,
   for a graticule, from a fixed fold pattern); all other edges are cuts
   and zero-area faces are attached last,
3. root the folds into a fold tree anchored at one face,
4. duplicate vertices so that every face owns its corners,
5. precompute the fold rotations.

Afterwards :meth:`Myriahedron.unfold` moves the vertices anywhere between the
sphere (scale 0) and the flat net (scale 1).
"""

import logging

import torch
from tensordict import TensorDict

from myriahedral.config import MyriahedronConfig
from myriahedral.mesh import Mesh
from myriahedral.primitives import graticule
from myriahedral.primitives.solids import SOLIDS
from myriahedral.subdivision import subdivide_recursive
from myriahedral.unfolding._dual_graph import FaceEdges
from myriahedral.unfolding.fold_tree import FoldTree, build_fold_tree
from myriahedral.unfolding.mst import (
    attachment_tiers,
    minimum_spanning_tree,
    spanning_tree_from_edges,
    split_folds_and_cuts,
)
from myriahedral.unfolding.retriangulate import RetriangulatedFaces, retriangulate
from myriahedral.unfolding.unfold import UnfoldPlan, plan_unfold, unfold_points
from myriahedral.unfolding.uv import calculate_uv

logger = logging.getLogger(__name__)


def load_base(config: MyriahedronConfig) -> Mesh:
    """Load the base geometry selected by ``config.geometry``."""
    if config.geometry == "graticule":
        return graticule.load(
            parallels=config.parallels, dtype=config.dtype, device=config.device
        )
    return SOLIDS[config.geometry].load(dtype=config.dtype, device=config.device)


class Myriahedron:
    """An unfoldable, subdivided sphere.

    Parameters
    ----------
    config : MyriahedronConfig, optional
        Full configuration. Mutually exclusive with keyword overrides.
    **kwargs
        Fields of :class:`MyriahedronConfig`, used when ``config`` is None.

    Attributes
    ----------
    config : MyriahedronConfig
    mesh : Mesh
        Shared-vertex subdivided mesh (canonical geometry).
    edges : TensorDict
        Surviving edges of the subdivision.
    fold_tree : FoldTree
    faces : RetriangulatedFaces or None
        Per-face bookkeeping; None when not unfoldable.
    points : torch.Tensor
        Current vertex positions.
    cells : torch.Tensor
        Current triangle list.
    uv : torch.Tensor
        Per-vertex texture coordinates, shape (n_points, 2).
    scale : float
        Last unfold scale.

    Raises
    ------
    TopologyError
        If the subdivided mesh cannot be unfolded (e.g. its face-adjacency
        graph is disconnected).

    Examples
    --------
    >>> m = Myriahedron(geometry="tetrahedron", subdivisions=1)
    >>> m.n_faces, len(m.folds)
    (16, 15)
    >>> flat = m.unfold(1.0)
    >>> data = m.get_mesh_data()
    >>> tuple(data["vertices"].shape)
    (144,)
    """

    def __init__(self, config: MyriahedronConfig | None = None, **kwargs) -> None:
        if config is None:
            config = MyriahedronConfig(**kwargs)
        elif kwargs:
            raise TypeError(
                f"Pass either a config or keyword overrides, not both; got {sorted(kwargs)}"
            )
        self.config = config

        ### Subdivide
        base = load_base(config)
        self.mesh, self.edges = subdivide_recursive(
            base, depth=config.subdivisions, normalize=config.normalize
        )

        ### Folds and cuts
        self.dual = FaceEdges.from_edges(self.edges)
        degenerate = self.mesh.degenerate_cells
        tree_rows = self._spanning_tree(degenerate)
        self.is_fold, self.cut_rows = split_folds_and_cuts(
            self.dual, tree_rows, len(self.edges)
        )
        self.fold_tree: FoldTree = build_fold_tree(
            self.dual, tree_rows, self.mesh.n_cells, anchor_candidates=~degenerate
        )

        ### Face-owned geometry
        self.faces: RetriangulatedFaces | None = None
        self._plan: UnfoldPlan | None = None
        if config.unfoldable:
            unfolded, self.faces = retriangulate(
                self.mesh, self.edges, self.fold_tree.folds.edge, self.cut_rows
            )
            self._plan = plan_unfold(
                self.fold_tree, self.faces.normals, self.mesh.points, degenerate
            )
            self._canonical = unfolded.points
            self.cells = unfolded.cells
        else:
            self._canonical = self.mesh.points
            self.cells = self.mesh.cells

        self.points = self._canonical.clone()
        self.scale = 0.0
        self.uv = self.calculate_uv()

        logger.info(
            f"Built {config.geometry} myriahedron at depth {config.subdivisions}: "
            f"{self.n_faces} faces, {len(self.points)} vertices, "
            f"{len(self.folds)} folds, {len(self.cut_rows)} cuts"
        )

    def _spanning_tree(self, degenerate: torch.Tensor) -> torch.Tensor:
        """Dual rows that become folds, from a fold pattern or the MST."""
        config = self.config
        if config.geometry == "graticule" and config.graticule_type != "spanning_tree":
            pattern = graticule.fold_edges(
                config.parallels, config.graticule_type, device=config.device
            )
            return spanning_tree_from_edges(self.dual, pattern)
        if not degenerate.any():
            return minimum_spanning_tree(self.dual, self.mesh.n_cells)
        tiers, start_face = attachment_tiers(self.dual, degenerate)
        logger.debug(
            f"{int(degenerate.sum())} degenerate faces; growing the spanning "
            f"tree from face {start_face}"
        )
        return minimum_spanning_tree(
            self.dual, self.mesh.n_cells, start_face=start_face, tiers=tiers
        )

    @property
    def n_faces(self) -> int:
        return self.mesh.n_cells

    @property
    def folds(self) -> torch.Tensor:
        """Folds as ``(from_face, to_face)`` pairs, shape (n_folds, 2)."""
        return self.fold_tree.folds.pairs()

    @property
    def cuts(self) -> torch.Tensor:
        """Cut edges as shared-mesh vertex pairs, shape (n_cuts, 2)."""
        return self.edges["vertices"][self.cut_rows]

    @property
    def root(self) -> int:
        """Index of the root fold, -1 for a single-face mesh."""
        return self.fold_tree.root

    @property
    def anchor_face(self) -> int:
        """The face that stays in place while unfolding."""
        return self.fold_tree.anchor_face

    def unfold(self, scale: float) -> torch.Tensor:
        """Move the vertices to the given unfold state.

        Parameters
        ----------
        scale : float
            0 is the folded sphere, 1 the flat net. Positions only depend on
            ``scale``, never on earlier calls.

        Returns
        -------
        torch.Tensor
            Current vertex positions, shape (3 * n_faces, 3).

        Raises
        ------
        ValueError
            If ``scale`` is outside ``[0, 1]``.
        RuntimeError
            If the myriahedron was built with ``unfoldable=False``.
        """
        if not 0.0 <= scale <= 1.0:
            raise ValueError(f"scale must be in [0, 1], got {scale=}")
        if self._plan is None:
            raise RuntimeError(
                "This myriahedron was built with unfoldable=False and shares "
                "vertices between faces; it cannot be unfolded"
            )
        self.points = unfold_points(self._plan, self._canonical, scale)
        self.scale = float(scale)
        return self.points

    def calculate_uv(
        self,
        offset_lon: float | None = None,
        offset_lat: float | None = None,
    ) -> torch.Tensor:
        """Compute texture coordinates from the canonical (folded) geometry.

        Parameters
        ----------
        offset_lon, offset_lat : float, optional
            Texture rotation in radians; defaults come from the config.

        Returns
        -------
        torch.Tensor
            Shape (n_points, 2), also stored as :attr:`uv`.
        """
        if offset_lon is None:
            offset_lon = self.config.uv_offset_lon
        if offset_lat is None:
            offset_lat = self.config.uv_offset_lat
        self.uv = calculate_uv(
            self._canonical,
            self.cells if self.config.unfoldable else None,
            offset_lon=offset_lon,
            offset_lat=offset_lat,
        )
        return self.uv

    def to_mesh(self) -> Mesh:
        """Current state as a :class:`Mesh` with UVs and cached face normals."""
        cell_data = {}
        if self.faces is not None:
            cell_data["original_cells"] = self.faces.original_vertices
        mesh = Mesh(
            points=self.points,
            cells=self.cells,
            point_data={"uv": self.uv},
            cell_data=cell_data,
        )
        mesh.cell_normals  # populate the cache
        return mesh

    def face_normals(self) -> torch.Tensor:
        """Unit normals of the faces in their current position."""
        return Mesh(points=self.points, cells=self.cells).cell_normals

    def get_mesh_data(self) -> TensorDict:
        """Flat buffers for a renderer.

        Returns
        -------
        TensorDict
            Batch size ``[]`` with ``"vertices"`` (3 * n_points,), ``"index"``
            (3 * n_faces,), ``"uv"`` (2 * n_points,), ``"folds"`` (n_folds, 2)
            face pairs and ``"cuts"`` (n_cuts, 2) vertex pairs.
        """
        return TensorDict(
            {
                "vertices": self.points.reshape(-1),
                "index": self.cells.reshape(-1),
                "uv": self.uv.reshape(-1),
                "folds": self.folds,
                "cuts": self.cuts,
            },
            batch_size=torch.Size([]),
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(geometry={self.config.geometry!r}, "
            f"subdivisions={self.config.subdivisions}, n_faces={self.n_faces}, "
            f"n_folds={len(self.folds)}, n_cuts={len(self.cut_rows)}, "
            f"scale={self.scale})"
        )
