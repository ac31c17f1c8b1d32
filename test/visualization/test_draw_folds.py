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

"""Tests for the fold-tree debug plot."""

import pytest

matplotlib = pytest.importorskip("matplotlib")
matplotlib.use("Agg")

from myriahedral.visualization.draw_folds import (  # noqa: E402
    draw_fold_tree,
    fold_segments,
    plt,
)


class TestDrawFolds:
    def test_segments_stay_inside_texture(self, icosahedron_myriahedron):
        segments = fold_segments(icosahedron_myriahedron)
        assert segments.shape[1:] == (2, 2)
        assert 0 < len(segments) <= len(icosahedron_myriahedron.folds)
        assert (abs(segments[:, 0, 0] - segments[:, 1, 0]) <= 0.5).all()

    def test_draw(self, icosahedron_myriahedron):
        ax = draw_fold_tree(icosahedron_myriahedron)
        assert len(ax.collections) == 2
        assert "319 folds" in ax.get_title()
        plt.close(ax.figure)

    def test_draw_into_existing_axes(self, tetrahedron_myriahedron):
        fig, ax = plt.subplots()
        assert draw_fold_tree(tetrahedron_myriahedron, ax=ax) is ax
        plt.close(fig)
