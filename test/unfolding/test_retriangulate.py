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

"""Tests for vertex duplication."""

import pytest
import torch

from myriahedral import TopologyError
from myriahedral.primitives.solids import tetrahedron
from myriahedral.subdivision import subdivide_recursive
from myriahedral.unfolding import (
    FaceEdges,
    build_fold_tree,
    minimum_spanning_tree,
    retriangulate,
    split_folds_and_cuts,
)


@pytest.fixture(scope="module")
def pieces():
    mesh, edges = subdivide_recursive(tetrahedron.load(), 1)
    dual = FaceEdges.from_edges(edges)
    tree = minimum_spanning_tree(dual, mesh.n_cells)
    _, cut_rows = split_folds_and_cuts(dual, tree, len(edges))
    fold_tree = build_fold_tree(dual, tree, mesh.n_cells)
    return mesh, edges, fold_tree.folds.edge, cut_rows


class TestRetriangulate:
    def test_faces_own_their_vertices(self, pieces):
        mesh, edges, fold_rows, cut_rows = pieces
        unfolded, faces = retriangulate(mesh, edges, fold_rows, cut_rows)
        assert unfolded.n_points == 3 * mesh.n_cells
        assert torch.equal(unfolded.cells.reshape(-1), torch.arange(48))
        assert torch.equal(faces.vertices, unfolded.cells)
        torch.testing.assert_close(
            unfolded.points, mesh.points[mesh.cells].reshape(-1, 3)
        )

    def test_original_cells(self, pieces):
        mesh, edges, fold_rows, cut_rows = pieces
        unfolded, faces = retriangulate(mesh, edges, fold_rows, cut_rows)
        assert torch.equal(unfolded.cell_data["original_cells"], mesh.cells)
        assert torch.equal(faces.original_vertices, mesh.cells)

    def test_bounding_edges(self, pieces):
        mesh, edges, fold_rows, cut_rows = pieces
        _, faces = retriangulate(mesh, edges, fold_rows, cut_rows)
        sides = torch.stack([mesh.cells, mesh.cells.roll(-1, dims=1)], dim=-1)
        found = edges["vertices"][faces.edges]
        assert torch.equal(found.sort(dim=-1)[0], sides.sort(dim=-1)[0])
        ### Each closed-surface edge bounds exactly two faces
        counts = torch.bincount(faces.edges.reshape(-1), minlength=len(edges))
        assert (counts == 2).all()

    def test_normals_match_shared_mesh(self, pieces):
        mesh, edges, fold_rows, cut_rows = pieces
        _, faces = retriangulate(mesh, edges, fold_rows, cut_rows)
        torch.testing.assert_close(faces.normals, mesh.cell_normals)

    def test_missing_edge(self, pieces):
        mesh, edges, fold_rows, cut_rows = pieces
        with pytest.raises(TopologyError, match="bounded by 2"):
            retriangulate(mesh, edges, fold_rows, cut_rows[1:])
