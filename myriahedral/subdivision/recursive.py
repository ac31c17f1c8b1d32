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

"""Recursive 1-to-4 triangle subdivision with shared, weighted edges.

Every triangle is split into four by its edge midpoints. Midpoints are shared
between neighbouring triangles through the :class:`EdgeTable`, so the result
is an indexed mesh with no duplicated vertices. Each edge carries a center
weight ``wc`` that records how deep in the subdivision it was created; the
spanning tree later prefers to fold along deep edges and cut along shallow
ones, which keeps the cuts on the base polyhedron's edges.

Weights
-------
- Base edges: ``w0 = w1 = 0``, ``wc = 1``.
- Interior edges created while splitting a level-``L`` triangle (``L`` counts
  from 1 for the base faces): ``w0 = w1 = L``, ``wc = L + 1``.
- Splitting edge ``e`` at vertex ``m`` creates ``(e.vertex0, m)`` with weights
  ``(e.w0, e.wc, (e.w0 + e.wc) / 2)`` and ``(m, e.vertex1)`` with weights
  ``(e.wc, e.w1, (e.wc + e.w1) / 2)``.
"""

import logging
from typing import NamedTuple

import torch
import torch.nn.functional as F
from tensordict import TensorDict

from myriahedral.mesh import Mesh
from myriahedral.subdivision._edges import EdgeTable
from myriahedral.utilities._topology import (
    TopologyError,
    extract_unique_edges,
    triangle_edges,
)

logger = logging.getLogger(__name__)


class SubdivisionResult(NamedTuple):
    """Output of :func:`subdivide_recursive`.

    Parameters
    ----------
    mesh : Mesh
        Subdivided indexed mesh with ``n_base_cells * 4**depth`` triangles.
    edges : TensorDict
        Surviving (never split) edges, see :meth:`EdgeTable.surviving`.
    """

    mesh: Mesh
    edges: TensorDict


def build_edge_table(base: Mesh) -> EdgeTable:
    """Seed an edge table from a base mesh.

    ``base.global_data["edges"]`` is used when present, in its stored order.
    Otherwise edges are taken from the faces in traversal order, keeping the
    first direction seen.
    """
    table = EdgeTable()
    if "edges" in base.global_data.keys():
        for v0, v1 in base.global_data["edges"].tolist():
            table.insert(v0, v1, level=0)
        return table

    ### First occurrence of each undirected edge in traversal order
    directed = triangle_edges(base.cells).reshape(-1, 2)
    unique_edges, inverse = extract_unique_edges(base.cells)
    first_seen = torch.full(
        (len(unique_edges),), len(directed), dtype=torch.long, device=directed.device
    ).scatter_reduce(
        0,
        inverse,
        torch.arange(len(directed), device=directed.device),
        reduce="amin",
    )
    for v0, v1 in directed[first_seen.sort().values].tolist():
        table.insert(v0, v1, level=0)
    return table


def subdivide_recursive(
    base: Mesh,
    depth: int,
    normalize: bool = True,
) -> SubdivisionResult:
    """Subdivide every base triangle ``depth`` times.

    Triangles are visited depth-first with an explicit stack. A triangle
    ``(v0, v1, v2)`` below the target depth has its three edges split (edges
    already split by a neighbour are reused), gets three interior edges, and
    is replaced by the children ``(v0, m01, m20)``, ``(m01, v1, m12)``,
    ``(m12, m20, m01)`` and ``(m20, m12, v2)`` in that order. At the target
    depth the triangle is emitted and registered on its three edges.

    Parameters
    ----------
    base : Mesh
        Base polyhedron. Its winding order is inherited by every child.
    depth : int
        Number of subdivision levels, >= 0.
    normalize : bool
        If True, project all vertices onto the unit sphere afterwards.

    Returns
    -------
    SubdivisionResult
        The subdivided mesh and its surviving edges. Every surviving edge
        between two emitted triangles has both face slots filled.

    Raises
    ------
    ValueError
        If ``depth`` is negative.
    TopologyError
        If a face uses an edge missing from an explicit edge list, or an edge
        ends up shared by more than two faces.

    Examples
    --------
    >>> from myriahedral.primitives.solids import tetrahedron
    >>> result = subdivide_recursive(tetrahedron.load(), depth=1)
    >>> result.mesh.n_cells, result.mesh.n_points, len(result.edges)
    (16, 10, 24)
    """
    if depth < 0:
        raise ValueError(f"depth must be non-negative, got {depth=}")

    table = build_edge_table(base)
    points: list[list[float]] = base.points.tolist()
    cells: list[tuple[int, int, int]] = []

    def split(edge_id: int) -> int:
        center = table.center[edge_id]
        if center != -1:
            return center
        a, b = table.vertex0[edge_id], table.vertex1[edge_id]
        pa, pb = points[a], points[b]
        center = len(points)
        points.append([pa[k] + (pb[k] - pa[k]) / 2 for k in range(3)])
        table.center[edge_id] = center

        w0, w1, wc = table.w0[edge_id], table.w1[edge_id], table.wc[edge_id]
        if table.find(a, center) is None:
            half = table.insert(a, center, level=0)
            table.set_weights(half, w0, wc, (w0 + wc) / 2)
        if table.find(center, b) is None:
            half = table.insert(center, b, level=0)
            table.set_weights(half, wc, w1, (wc + w1) / 2)
        return center

    def edge_of(a: int, b: int) -> int:
        edge_id = table.find(a, b)
        if edge_id is None:
            raise TopologyError(
                f"Edge ({a}, {b}) of a base face is missing from the edge list"
            )
        return edge_id

    ### Depth-first traversal; children are pushed in reverse visiting order
    stop_level = depth + 1
    stack = [(1, *cell) for cell in reversed(base.cells.tolist())]
    while stack:
        level, v0, v1, v2 = stack.pop()

        if level == stop_level:
            face = len(cells)
            cells.append((v0, v1, v2))
            table.assign_face(v0, v1, face)
            table.assign_face(v1, v2, face)
            table.assign_face(v2, v0, face)
            continue

        m01 = split(edge_of(v0, v1))
        m12 = split(edge_of(v1, v2))
        m20 = split(edge_of(v2, v0))

        table.insert(m01, m20, level)
        table.insert(m01, m12, level)
        table.insert(m20, m12, level)

        stack.extend(
            [
                (level + 1, m20, m12, v2),
                (level + 1, m12, m20, m01),
                (level + 1, m01, v1, m12),
                (level + 1, v0, m01, m20),
            ]
        )

    points_t = torch.tensor(points, dtype=base.points.dtype, device=base.points.device)
    if normalize:
        points_t = F.normalize(points_t, dim=-1)

    mesh = Mesh(
        points=points_t,
        cells=torch.tensor(cells, dtype=torch.int64, device=base.points.device),
    )
    edges = table.surviving(device=base.points.device)
    logger.debug(
        f"Subdivided {base.n_cells} base cells to depth {depth}: "
        f"{mesh.n_points} points, {mesh.n_cells} cells, "
        f"{len(edges)} of {len(table)} edges surviving"
    )
    return SubdivisionResult(mesh=mesh, edges=edges)
