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

"""Tests for equirectangular texture coordinates."""

import math

import pytest
import torch

from myriahedral import Myriahedron
from myriahedral.unfolding import calculate_uv, correct_seams, equirectangular_uv


def around_pole(corners: torch.Tensor) -> torch.Tensor:
    """Faces with a corner on the y axis or with the axis through their interior."""
    on_axis = (corners[..., 0].abs() < 1e-9) & (corners[..., 2].abs() < 1e-9)
    longitude = torch.atan2(corners[..., 0], corners[..., 2])
    step = longitude.roll(-1, dims=-1) - longitude
    step = torch.remainder(step + math.pi, 2 * math.pi) - math.pi
    return on_axis.any(dim=-1) | (step.sum(dim=-1).abs() > math.pi)


class TestEquirectangular:
    @pytest.mark.parametrize(
        "point, expected",
        [
            ([0.0, 0.0, 1.0], [0.5, 0.5]),
            ([1.0, 0.0, 0.0], [0.75, 0.5]),
            ([-1.0, 0.0, 0.0], [0.25, 0.5]),
            ([0.0, 1.0, 0.0], [0.5, 0.0]),
            ([0.0, -1.0, 0.0], [0.5, 1.0]),
            ([0.0, 0.0, -1.0], [1.0, 0.5]),
        ],
    )
    def test_reference_points(self, point, expected):
        uv = equirectangular_uv(torch.tensor([point], dtype=torch.float64))
        assert uv[0].tolist() == pytest.approx(expected)

    def test_scale_invariant(self):
        points = torch.randn(10, 3, dtype=torch.float64)
        torch.testing.assert_close(
            equirectangular_uv(points), equirectangular_uv(3.0 * points)
        )


class TestSeams:
    def test_wrapping_face_is_unwrapped(self):
        uv = torch.tensor([[0.9, 0.4], [0.05, 0.45], [0.95, 0.5]])
        corrected = correct_seams(uv, torch.tensor([[0, 1, 2]]))
        torch.testing.assert_close(corrected[:, 0], torch.tensor([0.9, 1.05, 0.95]))
        torch.testing.assert_close(corrected[:, 1], uv[:, 1])

    def test_other_faces_untouched(self):
        uv = torch.tensor(
            [[0.9, 0.4], [0.05, 0.45], [0.95, 0.5], [0.1, 0.1], [0.2, 0.1], [0.15, 0.2]]
        )
        corrected = correct_seams(uv, torch.tensor([[0, 1, 2], [3, 4, 5]]))
        torch.testing.assert_close(corrected[3:], uv[3:])
        assert not torch.equal(corrected, uv)

    @pytest.mark.parametrize("depth", [0, 1, 2])
    @pytest.mark.parametrize(
        "geometry", ["tetrahedron", "cube", "octahedron", "icosahedron"]
    )
    def test_myriahedron_faces_span_at_most_half(self, geometry, depth):
        m = Myriahedron(geometry=geometry, subdivisions=depth)
        corners = m.uv[m.cells]
        span = corners.amax(dim=1) - corners.amin(dim=1)
        ### Longitude wraps around a pole, so those faces have no bounded span
        regular = ~around_pole(m._canonical[m.cells])
        assert (span[regular] <= 0.5).all()


class TestCalculateUV:
    def test_without_cells_is_raw(self):
        points = torch.randn(12, 3, dtype=torch.float64)
        torch.testing.assert_close(calculate_uv(points), equirectangular_uv(points))

    def test_longitude_offset(self):
        point = torch.tensor([[0.0, 0.0, 1.0]], dtype=torch.float64)
        uv = calculate_uv(point, offset_lon=math.pi / 2)
        assert uv[0].tolist() == pytest.approx([0.75, 0.5])

    def test_latitude_offset(self):
        point = torch.tensor([[0.0, 0.0, 1.0]], dtype=torch.float64)
        uv = calculate_uv(point, offset_lat=math.pi / 2)
        assert uv[0, 1].item() == pytest.approx(1.0)
