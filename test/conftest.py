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

"""Pytest configuration and shared fixtures for myriahedral tests.

All fixtures defined here are automatically available to all test files
without explicit imports.
"""

import pytest
import torch

### Pytest Hooks ###


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "cuda: mark test as requiring CUDA (skipped if unavailable)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow-running (for optional exclusion)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip tests marked with 'cuda' if CUDA is not available."""
    if torch.cuda.is_available():
        return

    skip_cuda = pytest.mark.skip(reason="CUDA not available")
    for item in items:
        if "cuda" in item.keywords:
            item.add_marker(skip_cuda)


### Device Management ###


def get_available_devices() -> list[str]:
    """Return 'cpu' and, when available, 'cuda'."""
    devices = ["cpu"]
    if torch.cuda.is_available():
        devices.append("cuda")
    return devices


@pytest.fixture(params=get_available_devices())
def device(request):
    """Parametrize a test over every available device."""
    return request.param


### Helpers ###


def _fold_cosines(myriahedron) -> torch.Tensor:
    """Cosine between the current normals of the two faces of every fold."""
    normals = myriahedron.face_normals()
    folds = myriahedron.folds
    return (normals[folds[:, 0]] * normals[folds[:, 1]]).sum(dim=-1)


def _count_components(n_nodes: int, pairs: torch.Tensor) -> int:
    """Number of connected components of an undirected graph (union-find)."""
    parent = list(range(n_nodes))

    def find(x: int) -> int:
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    for a, b in pairs.tolist():
        parent[find(a)] = find(b)
    return len({find(x) for x in range(n_nodes)})


@pytest.fixture
def fold_cosines():
    return _fold_cosines


@pytest.fixture
def count_components():
    return _count_components


### Myriahedra (built once per session) ###


@pytest.fixture(scope="session")
def tetrahedron_myriahedron():
    from myriahedral import Myriahedron

    return Myriahedron(geometry="tetrahedron", subdivisions=1)


@pytest.fixture(scope="session")
def icosahedron_myriahedron():
    from myriahedral import Myriahedron

    return Myriahedron(geometry="icosahedron", subdivisions=2)
