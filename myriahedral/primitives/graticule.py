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

"""Latitude/longitude graticule on the unit sphere.

``parallels`` rows of quads by ``2 * parallels`` columns, each quad split into
two triangles. The vertex grid is ``(parallels + 1) x (2 * parallels + 1)``:
the seam column is duplicated and every pole vertex is its own index, so the
seam and the poles are open boundaries of the surface.

:func:`fold_edges` gives fixed ways of cutting the graticule open, named
after the map projections whose nets they resemble.

Dimensional: 2D manifold in 3D space (has boundary, degenerate pole cells).
"""

import torch

from myriahedral.mesh import Mesh


def spherical(t: torch.Tensor, u: torch.Tensor) -> torch.Tensor:
    """Map longitude fraction ``t`` and colatitude fraction ``u`` to the sphere.

    Parameters
    ----------
    t : torch.Tensor
        Fraction of a full turn around the y axis, in ``[0, 1]``.
    u : torch.Tensor
        Fraction of a half turn from the north pole ``(0, 1, 0)``, in ``[0, 1]``.

    Returns
    -------
    torch.Tensor
        Shape ``(*t.shape, 3)``: ``(sin u cos t, cos u, sin u sin t)`` after
        scaling ``t`` by ``2 pi`` and ``u`` by ``pi``.
    """
    t = t * (2 * torch.pi)
    u = u * torch.pi
    return torch.stack(
        [torch.sin(u) * torch.cos(t), torch.cos(u), torch.sin(u) * torch.sin(t)],
        dim=-1,
    )


def load(
    parallels: int = 8,
    dtype: torch.dtype = torch.float64,
    device: torch.device | str = "cpu",
) -> Mesh:
    """Create a graticule sphere.

    Quad ``(i, j)`` with corners ``p0 = (i, j)``, ``p1 = (i, j + 1)``,
    ``p2 = (i + 1, j + 1)``, ``p3 = (i + 1, j)`` becomes triangles
    ``(p0, p1, p2)`` and ``(p0, p2, p3)`` at cell indices
    ``2 * (i * cols + j)`` and ``2 * (i * cols + j) + 1``.

    Parameters
    ----------
    parallels : int
        Number of quad rows; there are twice as many columns. Must be >= 2.
    dtype : torch.dtype
        Floating point dtype of the points.
    device : torch.device or str
        Compute device ('cpu' or 'cuda').

    Returns
    -------
    Mesh
        ``(parallels + 1) * (2 * parallels + 1)`` points and
        ``4 * parallels**2`` outward-wound triangles. The first triangle of
        every top-row quad and the second of every bottom-row quad have two
        corners on a pole and zero area.

    Examples
    --------
    >>> mesh = load(parallels=4)
    >>> mesh.n_points, mesh.n_cells
    (45, 64)
    """
    if parallels < 2:
        raise ValueError(f"parallels must be at least 2, got {parallels=}")

    rows = parallels
    cols = 2 * parallels
    vertex_per_row = cols + 1

    ### Vertex grid, including the duplicated seam column
    i_grid, j_grid = torch.meshgrid(
        torch.arange(rows + 1, device=device),
        torch.arange(cols + 1, device=device),
        indexing="ij",
    )
    points = spherical(
        j_grid.to(dtype) / cols,
        i_grid.to(dtype) / rows,
    ).reshape(-1, 3)

    ### Two triangles per quad, interleaved so quad q owns cells 2q and 2q+1
    ii, jj = torch.meshgrid(
        torch.arange(rows, device=device),
        torch.arange(cols, device=device),
        indexing="ij",
    )
    ii = ii.reshape(-1)
    jj = jj.reshape(-1)
    p0 = ii * vertex_per_row + jj
    p1 = p0 + 1
    p2 = p1 + vertex_per_row
    p3 = p0 + vertex_per_row

    tri0 = torch.stack([p0, p1, p2], dim=1)
    tri1 = torch.stack([p0, p2, p3], dim=1)
    cells = torch.stack([tri0, tri1], dim=1).reshape(-1, 3)

    return Mesh(points=points, cells=cells)


### Hand-built fold patterns over the quads of the graticule
FOLD_PATTERNS = (
    "cylindrical",
    "conical",
    "azimuthal",
    "azimuthal_two_hemispheres",
    "polyconical",
)


def _row_path(row: int, cols: int) -> list[tuple[int, int, int, int]]:
    return [(row, j, row, j + 1) for j in range(cols - 1)]


def _column_links(row: int, cols: int) -> list[tuple[int, int, int, int]]:
    return [(row, j, row + 1, j) for j in range(cols)]


def quad_links(parallels: int, pattern: str) -> list[tuple[int, int, int, int]]:
    """Pairs of neighbouring quads ``(i0, j0, i1, j1)`` joined by a pattern.

    The links form a spanning tree over the ``parallels x 2 * parallels``
    quads. A horizontal link joins quads of the same row, a vertical link
    joins quads of the same column.

    - ``cylindrical``: the middle row ``parallels // 2`` is joined end to end,
      and every column hangs from it, like the unrolled mantle of a cylinder.
    - ``conical``: the same comb hanging from row ``parallels // 3``.
    - ``azimuthal``: the same comb hanging from the north polar row.
    - ``azimuthal_two_hemispheres``: each hemisphere is a comb hanging from its
      polar row; the two are joined by one link across the equator in the
      first column.
    - ``polyconical``: every row is joined end to end, and the rows hang from
      the central meridian column ``parallels``.
    """
    rows, cols = parallels, 2 * parallels
    if pattern in ("cylindrical", "conical", "azimuthal"):
        spine = {"cylindrical": rows // 2, "conical": rows // 3, "azimuthal": 0}[
            pattern
        ]
        links = _row_path(spine, cols)
        for i in range(rows - 1):
            links += _column_links(i, cols)
        return links
    if pattern == "azimuthal_two_hemispheres":
        equator = rows // 2
        links = _row_path(0, cols) + _row_path(rows - 1, cols)
        for i in range(rows - 1):
            if i != equator - 1:
                links += _column_links(i, cols)
        links.append((equator - 1, 0, equator, 0))
        return links
    if pattern == "polyconical":
        links = [(i, parallels, i + 1, parallels) for i in range(rows - 1)]
        for i in range(rows):
            links += _row_path(i, cols)
        return links
    raise ValueError(f"pattern must be one of {FOLD_PATTERNS}, got {pattern=}")


def fold_edges(
    parallels: int,
    pattern: str,
    device: torch.device | str = "cpu",
) -> torch.Tensor:
    """Grid edges that are folds under a hand-built pattern.

    Every quad diagonal is a fold, so each quad (or, at the poles, each real
    triangle with its zero-area twin) moves as one piece. A horizontal quad
    link folds the grid edge between the two quads, and so does a vertical
    one. In a polar row the neighbouring real triangles only meet through
    the zero-area triangle between them; since that triangle is a segment on
    the line they share, folding across both of its edges joins them. All
    other edges are cuts.

    Parameters
    ----------
    parallels : int
        Graticule rows, as passed to :func:`load`.
    pattern : str
        One of :data:`FOLD_PATTERNS`, see :func:`quad_links`.
    device : torch.device or str
        Compute device.

    Returns
    -------
    torch.Tensor
        Shape (4 * parallels**2 - 1, 2) vertex pairs, one per face of
        :func:`load` but one, so the folds form a spanning tree.

    Examples
    --------
    >>> fold_edges(4, "azimuthal").shape
    torch.Size([63, 2])
    """
    rows, cols = parallels, 2 * parallels

    def vertex(i: int, j: int) -> int:
        return i * (cols + 1) + j

    edges = [
        (vertex(i, j), vertex(i + 1, j + 1)) for i in range(rows) for j in range(cols)
    ]
    for i0, j0, i1, j1 in quad_links(parallels, pattern):
        if i0 == i1:
            ### Shared meridian segment right of quad (i0, j0)
            edges.append((vertex(i0, j0 + 1), vertex(i0 + 1, j0 + 1)))
        else:
            ### Shared parallel segment below quad (i0, j0)
            edges.append((vertex(i1, j0), vertex(i1, j0 + 1)))
    return torch.tensor(edges, dtype=torch.int64, device=device)
