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

"""End-to-end tests for building and unfolding myriahedra."""

import logging
import warnings

import pytest
import torch

from myriahedral import Myriahedron, MyriahedronConfig
from myriahedral.primitives.graticule import FOLD_PATTERNS, fold_edges


class TestTetrahedron:
    def test_counts(self, tetrahedron_myriahedron):
        m = tetrahedron_myriahedron
        assert m.n_faces == 16
        assert m.folds.shape == (15, 2)
        assert m.cuts.shape == (9, 2)
        assert m.points.shape == (48, 3)
        assert m.uv.shape == (48, 2)

    def test_mesh_data(self, tetrahedron_myriahedron):
        data = tetrahedron_myriahedron.get_mesh_data()
        assert data["vertices"].shape == (144,)
        assert data["index"].shape == (48,)
        assert data["uv"].shape == (96,)
        assert data["folds"].shape == (15, 2)
        assert data["cuts"].shape == (9, 2)
        assert int(data["index"].max()) == 47

    def test_folds_and_cuts_partition_edges(self, tetrahedron_myriahedron):
        m = tetrahedron_myriahedron
        assert len(m.folds) + len(m.cut_rows) == len(m.edges)
        assert int(m.is_fold.sum()) == len(m.folds)

    def test_repr(self, tetrahedron_myriahedron):
        text = repr(tetrahedron_myriahedron)
        assert text.startswith("Myriahedron(geometry='tetrahedron', subdivisions=1")
        assert "n_folds=15" in text

    def test_logs_build(self, caplog):
        with caplog.at_level(logging.INFO, logger="myriahedral.myriahedron"):
            Myriahedron(geometry="tetrahedron", subdivisions=0)
        assert "Built tetrahedron myriahedron at depth 0" in caplog.text


class TestIcosahedron:
    @pytest.mark.slow
    def test_depth_three(self, count_components, fold_cosines):
        m = Myriahedron(geometry="icosahedron", subdivisions=3)
        assert m.n_faces == 1280
        assert len(m.folds) == 1279
        assert int((m.fold_tree.folds.parent == -1).sum()) == 1
        assert count_components(m.n_faces, m.folds) == 1
        m.unfold(1.0)
        assert (fold_cosines(m) >= 1 - 1e-4).all()

    def test_to_mesh(self, icosahedron_myriahedron):
        m = icosahedron_myriahedron
        m.unfold(0.0)
        mesh = m.to_mesh()
        assert mesh.n_points == 3 * m.n_faces
        assert torch.equal(mesh.point_data["uv"], m.uv)
        assert torch.equal(mesh.cell_data["original_cells"], m.mesh.cells)
        assert ("_cache", "normals") in mesh.cell_data.keys(include_nested=True)

    def test_uv_offsets(self, icosahedron_myriahedron):
        m = icosahedron_myriahedron
        base = m.calculate_uv().clone()
        shifted = m.calculate_uv(offset_lon=0.3)
        assert not torch.allclose(base, shifted)
        m.calculate_uv()
        torch.testing.assert_close(m.uv, base)


@pytest.mark.parametrize("geometry", ["tetrahedron", "cube", "octahedron"])
def test_small_solids_unfold_flat(geometry, fold_cosines, count_components):
    m = Myriahedron(geometry=geometry, subdivisions=2)
    assert len(m.folds) == m.n_faces - 1
    assert count_components(m.n_faces, m.folds) == 1
    m.unfold(1.0)
    assert (fold_cosines(m) >= 1 - 1e-4).all()


def plane_deviation(m: Myriahedron) -> tuple[torch.Tensor, torch.Tensor]:
    """Offsets and normal cosines of the real faces against the first real face."""
    regular = ~m.mesh.degenerate_cells
    normals = m.face_normals()
    reference = int(torch.nonzero(regular)[0])
    normal = normals[reference]
    corners = m.points.reshape(-1, 3, 3)
    offsets = (corners[regular] - corners[reference, 0]) @ normal
    return offsets, normals[regular] @ normal


def grid_fold_pairs(m: Myriahedron) -> set[tuple[int, int]]:
    return {tuple(sorted(pair)) for pair in m.edges["vertices"][m.is_fold].tolist()}


class TestGraticule:
    def test_build(self):
        m = Myriahedron(geometry="graticule", parallels=4, subdivisions=0)
        assert m.n_faces == 64
        assert len(m.folds) == 63
        assert m.points.shape == (192, 3)

    def test_unfold_is_finite(self):
        m = Myriahedron(geometry="graticule", parallels=4, subdivisions=1)
        assert m.n_faces == 256
        points = m.unfold(1.0)
        assert torch.isfinite(points).all()
        assert torch.isfinite(m.uv).all()

    @pytest.mark.parametrize("parallels, depth", [(2, 0), (4, 0), (5, 0), (4, 1)])
    def test_flat_at_scale_one(self, parallels, depth):
        with warnings.catch_warnings():
            warnings.filterwarnings("error", message="Could not decide")
            m = Myriahedron(
                geometry="graticule", parallels=parallels, subdivisions=depth
            )
        assert not m.mesh.degenerate_cells[m.anchor_face]
        m.unfold(1.0)
        offsets, cosines = plane_deviation(m)
        assert offsets.abs().max() < 1e-6
        assert cosines.min() > 1 - 1e-6

    def test_zero_area_faces_hang_off_the_net(self):
        m = Myriahedron(geometry="graticule", parallels=4, subdivisions=1)
        degenerate = m.mesh.degenerate_cells
        folds = m.fold_tree.folds
        assert not (degenerate[folds.from_face] & ~degenerate[folds.to_face]).any()

    @pytest.mark.parametrize("parallels", [2, 4, 5])
    @pytest.mark.parametrize("pattern", FOLD_PATTERNS)
    def test_fold_pattern_flat_at_scale_one(self, pattern, parallels):
        with warnings.catch_warnings():
            warnings.filterwarnings("error", message="Could not decide")
            m = Myriahedron(
                geometry="graticule",
                parallels=parallels,
                subdivisions=0,
                graticule_type=pattern,
            )
        assert len(m.folds) == 4 * parallels**2 - 1
        assert grid_fold_pairs(m) == {
            tuple(sorted(pair)) for pair in fold_edges(parallels, pattern).tolist()
        }
        m.unfold(1.0)
        offsets, cosines = plane_deviation(m)
        assert offsets.abs().max() < 1e-6
        assert cosines.min() > 1 - 1e-6

    def test_two_hemispheres_meet_at_one_quad(self):
        parallels, cols = 4, 8
        m = Myriahedron(
            geometry="graticule",
            parallels=parallels,
            subdivisions=0,
            graticule_type="azimuthal_two_hemispheres",
        )
        folds = grid_fold_pairs(m)
        equator = 2 * (cols + 1)
        assert [(equator + j, equator + j + 1) in folds for j in range(cols)] == [
            True
        ] + [False] * (cols - 1)

    def test_cylindrical_cuts_meridians_off_the_middle_row(self):
        parallels, cols = 4, 8
        m = Myriahedron(
            geometry="graticule",
            parallels=parallels,
            subdivisions=0,
            graticule_type="cylindrical",
        )
        folds = grid_fold_pairs(m)

        def meridian(i, j):
            return (i * (cols + 1) + j, (i + 1) * (cols + 1) + j)

        for i in range(parallels):
            joined = [meridian(i, j) in folds for j in range(1, cols)]
            assert all(joined) if i == parallels // 2 else not any(joined)

    def test_polyconical_hangs_rows_from_central_meridian(self):
        parallels, cols = 4, 8
        m = Myriahedron(
            geometry="graticule",
            parallels=parallels,
            subdivisions=0,
            graticule_type="polyconical",
        )
        folds = grid_fold_pairs(m)
        for i in range(1, parallels):
            row = i * (cols + 1)
            joined = [(row + j, row + j + 1) in folds for j in range(cols)]
            assert joined == [j == parallels for j in range(cols)]


class TestConstruction:
    def test_config_object(self):
        config = MyriahedronConfig(geometry="octahedron", subdivisions=1)
        m = Myriahedron(config)
        assert m.config is config
        assert m.n_faces == 32

    def test_config_and_kwargs(self):
        with pytest.raises(TypeError, match="not both"):
            Myriahedron(MyriahedronConfig(), subdivisions=1)

    def test_float32(self):
        m = Myriahedron(geometry="tetrahedron", subdivisions=1, dtype="float32")
        assert m.unfold(1.0).dtype == torch.float32

    def test_shared_vertices(self):
        m = Myriahedron(geometry="cube", subdivisions=1, unfoldable=False)
        assert m.faces is None
        assert m.points.shape == m.mesh.points.shape
        assert torch.equal(m.cells, m.mesh.cells)
        torch.testing.assert_close(m.uv, m.calculate_uv())

    @pytest.mark.cuda
    def test_cuda(self):
        m = Myriahedron(geometry="tetrahedron", subdivisions=1, device="cuda")
        assert m.unfold(1.0).device.type == "cuda"
