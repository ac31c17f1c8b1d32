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

"""Tests for recursive subdivision and the edge table."""

import logging

import pytest
import torch
import torch.nn.functional as F

from myriahedral import Mesh, TopologyError
from myriahedral.primitives.solids import (
    SOLIDS,
    cube,
    icosahedron,
    octahedron,
    tetrahedron,
)
from myriahedral.subdivision import EdgeTable, subdivide_recursive
from myriahedral.subdivision.recursive import build_edge_table
from myriahedral.utilities._topology import triangle_edges


class TestEdgeTable:
    def test_lookup_is_symmetric(self):
        table = EdgeTable()
        edge_id = table.insert(3, 1, level=0)
        assert table.find(1, 3) == edge_id
        assert (1, 3) in table
        assert (1, 2) not in table
        assert table.vertex0[edge_id] == 3

    def test_weights_from_level(self):
        table = EdgeTable()
        edge_id = table.insert(0, 1, level=2)
        assert (table.w0[edge_id], table.w1[edge_id], table.wc[edge_id]) == (
            2.0,
            2.0,
            3.0,
        )

    def test_duplicate_insert_is_ignored(self, caplog):
        table = EdgeTable()
        first = table.insert(0, 1, level=0)
        with caplog.at_level(logging.DEBUG, logger="myriahedral.subdivision._edges"):
            second = table.insert(1, 0, level=5)
        assert first == second
        assert len(table) == 1
        assert table.wc[first] == 1.0
        assert "already present" in caplog.text

    def test_face_slots_follow_direction(self):
        table = EdgeTable()
        edge_id = table.insert(0, 1, level=0)
        table.assign_face(1, 0, face=7)
        table.assign_face(0, 1, face=4)
        assert table.faces[edge_id] == [4, 7]

    def test_face_slot_fallback(self):
        table = EdgeTable()
        edge_id = table.insert(0, 1, level=0)
        table.assign_face(0, 1, face=2)
        table.assign_face(0, 1, face=3)
        assert table.faces[edge_id] == [2, 3]

    def test_third_face_raises(self):
        table = EdgeTable()
        table.insert(0, 1, level=0)
        table.assign_face(0, 1, face=0)
        table.assign_face(1, 0, face=1)
        with pytest.raises(TopologyError, match="more than two faces"):
            table.assign_face(0, 1, face=2)

    def test_missing_edge_raises(self):
        with pytest.raises(TopologyError):
            EdgeTable().assign_face(0, 1, face=0)

    def test_surviving_skips_split_edges(self):
        table = EdgeTable()
        table.insert(0, 1, level=0)
        table.insert(1, 2, level=0)
        table.center[0] = 5
        surviving = table.surviving()
        assert surviving["edge_id"].tolist() == [1]
        assert surviving["vertices"].tolist() == [[1, 2]]
        assert surviving["faces"].tolist() == [[-1, -1]]

    def test_seeded_from_faces_in_traversal_order(self):
        base = Mesh(
            points=torch.randn(4, 3, dtype=torch.float64),
            cells=torch.tensor([[0, 1, 2], [2, 1, 3], [3, 0, 2]]),
        )
        table = build_edge_table(base)
        ### Each edge keeps the direction of the first face that walks it
        assert list(zip(table.vertex0, table.vertex1)) == [
            (0, 1), (1, 2), (2, 0), (1, 3), (3, 2), (3, 0),
        ]

    def test_explicit_edge_list_wins(self):
        table = build_edge_table(tetrahedron.load())
        edges = tetrahedron.load().global_data["edges"].tolist()
        assert [[a, b] for a, b in zip(table.vertex0, table.vertex1)] == edges


class TestSubdivideRecursive:
    @pytest.mark.parametrize("name", list(SOLIDS))
    @pytest.mark.parametrize("depth", [0, 1, 2])
    def test_counts(self, name, depth):
        base = SOLIDS[name].load()
        result = subdivide_recursive(base, depth)
        mesh, edges = result
        assert mesh.n_cells == base.n_cells * 4**depth
        ### Closed surfaces: every edge has two faces and Euler gives V - E + F = 2
        assert mesh.n_points - len(edges) + mesh.n_cells == 2
        assert 2 * len(edges) == 3 * mesh.n_cells
        assert (edges["faces"] >= 0).all()

    def test_tetrahedron_depth_one(self):
        mesh, edges = subdivide_recursive(tetrahedron.load(), 1)
        assert (mesh.n_cells, mesh.n_points, len(edges)) == (16, 10, 24)

    def test_depth_zero_keeps_base(self):
        base = icosahedron.load()
        mesh, edges = subdivide_recursive(base, 0, normalize=False)
        assert torch.equal(mesh.cells, base.cells)
        torch.testing.assert_close(mesh.points, base.points)
        assert set(edges["wc"].tolist()) == {1.0}
        assert set(edges["w0"].tolist()) == {0.0}

    def test_depth_zero_projects_base_to_unit_sphere(self):
        ### The icosahedron ships with circumradius 0.5
        base = icosahedron.load()
        mesh, _ = subdivide_recursive(base, 0)
        torch.testing.assert_close(mesh.points, F.normalize(base.points, dim=-1))
        torch.testing.assert_close(
            mesh.points.norm(dim=-1), torch.ones(mesh.n_points, dtype=mesh.points.dtype)
        )

    @pytest.mark.parametrize(
        "depth, expected",
        [(1, {0.5, 2.0}), (2, {0.25, 0.75, 1.5, 3.0})],
    )
    def test_center_weights(self, depth, expected):
        _, edges = subdivide_recursive(tetrahedron.load(), depth)
        assert set(edges["wc"].tolist()) == expected

    def test_base_edges_are_shallowest(self):
        ### Halves of base edges carry the smallest weights at every depth
        base = tetrahedron.load()
        mesh, edges = subdivide_recursive(base, 2, normalize=False)
        shallow = edges["wc"] < 1.0
        assert int(shallow.sum()) == 6 * 4
        a = mesh.points[edges["vertices"][shallow, 0]]
        b = mesh.points[edges["vertices"][shallow, 1]]
        ### Both ends of a shallow edge lie on the same base edge segment
        base_dirs = []
        for v0, v1 in base.global_data["edges"].tolist():
            base_dirs.append((base.points[v0], base.points[v1]))
        for pa, pb in zip(a, b):
            on_some_edge = False
            for p0, p1 in base_dirs:
                d = p1 - p0
                ca = torch.linalg.cross(pa - p0, d).norm()
                cb = torch.linalg.cross(pb - p0, d).norm()
                if ca < 1e-12 and cb < 1e-12:
                    on_some_edge = True
            assert on_some_edge

    def test_slot_zero_traverses_forward(self):
        mesh, edges = subdivide_recursive(icosahedron.load(), 2)
        directed = triangle_edges(mesh.cells)  # (n_cells, 3, 2)
        for (v0, v1), (f0, f1) in zip(
            edges["vertices"].tolist(), edges["faces"].tolist()
        ):
            assert [v0, v1] in directed[f0].tolist()
            assert [v1, v0] in directed[f1].tolist()

    def test_normalize(self):
        mesh, _ = subdivide_recursive(cube.load(), 2)
        torch.testing.assert_close(
            mesh.points.norm(dim=-1), torch.ones(mesh.n_points, dtype=torch.float64)
        )
        raw, _ = subdivide_recursive(cube.load(), 2, normalize=False)
        assert not torch.allclose(
            raw.points.norm(dim=-1), torch.ones(raw.n_points, dtype=torch.float64)
        )

    def test_winding_is_inherited(self):
        mesh, _ = subdivide_recursive(octahedron.load(), 2)
        outward = (mesh.cell_normals * mesh.cell_centroids).sum(dim=-1)
        assert (outward > 0).all()

    def test_no_duplicate_points(self):
        mesh, _ = subdivide_recursive(icosahedron.load(), 2)
        assert len(torch.unique(mesh.points.round(decimals=9), dim=0)) == mesh.n_points

    def test_dtype_preserved(self):
        mesh, _ = subdivide_recursive(tetrahedron.load(dtype=torch.float32), 1)
        assert mesh.points.dtype == torch.float32

    def test_negative_depth(self):
        with pytest.raises(ValueError, match="depth"):
            subdivide_recursive(tetrahedron.load(), -1)

    def test_incomplete_edge_list(self):
        base = tetrahedron.load()
        broken = Mesh(
            points=base.points,
            cells=base.cells,
            global_data={"edges": base.global_data["edges"][:5]},
        )
        with pytest.raises(TopologyError):
            subdivide_recursive(broken, 1)

    def test_non_manifold_edge(self):
        points = torch.randn(5, 3, dtype=torch.float64)
        cells = torch.tensor([[0, 1, 2], [1, 0, 3], [0, 1, 4]])
        with pytest.raises(TopologyError, match="more than two faces"):
            subdivide_recursive(Mesh(points=points, cells=cells), 0)
