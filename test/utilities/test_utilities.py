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

"""Tests for tolerances, cache helpers, topology helpers and edge lookup."""

import pytest
import torch
from tensordict import TensorDict

from myriahedral.utilities._cache import CACHE_KEY, get_cached, set_cached
from myriahedral.utilities._edge_lookup import find_edges_in_reference
from myriahedral.utilities._tolerances import degenerate_tolerance, safe_eps
from myriahedral.utilities._topology import (
    TopologyError,
    extract_unique_edges,
    triangle_edges,
)


class TestTolerances:
    @pytest.mark.parametrize("dtype", [torch.float32, torch.float64])
    def test_safe_eps_is_positive_and_tiny(self, dtype):
        eps = safe_eps(dtype)
        assert 0 < eps < 1e-9
        assert 1.0 / eps**2 < float("inf")

    @pytest.mark.parametrize("dtype", [torch.float32, torch.float64])
    def test_degenerate_tolerance_above_rounding(self, dtype):
        assert degenerate_tolerance(dtype) == pytest.approx(
            100 * torch.finfo(dtype).eps
        )
        assert degenerate_tolerance(dtype) > safe_eps(dtype)


class TestCache:
    def test_get_missing_returns_none(self):
        td = TensorDict({}, batch_size=[3])
        assert get_cached(td, "normals") is None

    def test_set_then_get(self):
        td = TensorDict({}, batch_size=[3])
        value = torch.ones(3, 3)
        set_cached(td, "normals", value)
        assert CACHE_KEY in td.keys()
        assert td[CACHE_KEY].batch_size == torch.Size([3])
        torch.testing.assert_close(get_cached(td, "normals"), value)


class TestTopology:
    def test_topology_error_is_value_error(self):
        assert issubclass(TopologyError, ValueError)

    def test_triangle_edges_order(self):
        edges = triangle_edges(torch.tensor([[0, 1, 2], [3, 4, 5]]))
        assert edges.shape == (2, 3, 2)
        assert edges[1].tolist() == [[3, 4], [4, 5], [5, 3]]

    def test_extract_unique_edges(self):
        cells = torch.tensor([[0, 1, 2], [0, 2, 3]])
        edges, inverse = extract_unique_edges(cells)
        assert edges.tolist() == [[0, 1], [0, 2], [0, 3], [1, 2], [2, 3]]
        ### The shared side (2, 0) / (0, 2) maps to the same unique edge
        inverse = inverse.reshape(2, 3)
        assert inverse[0, 2] == inverse[1, 0]


class TestEdgeLookup:
    def test_direction_is_ignored(self):
        ref = torch.tensor([[0, 1], [1, 2], [2, 3]])
        query = torch.tensor([[2, 1], [5, 6], [3, 2], [0, 1]])
        indices, matches = find_edges_in_reference(ref, query)
        assert matches.tolist() == [True, False, True, True]
        assert indices[matches].tolist() == [1, 2, 0]

    def test_empty_reference(self):
        indices, matches = find_edges_in_reference(
            torch.zeros(0, 2, dtype=torch.int64), torch.tensor([[0, 1]])
        )
        assert matches.tolist() == [False]
        assert indices.shape == (1,)
