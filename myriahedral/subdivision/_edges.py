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

"""Undirected edge arena used while subdividing.

Edges are appended to flat per-field lists and never removed, so an edge id
stays valid for the lifetime of the table. A symmetric lookup maps the
canonical key ``(min(v0, v1), max(v0, v1))`` to the edge id.
"""

import logging

import torch
from tensordict import TensorDict

from myriahedral.utilities._topology import TopologyError

logger = logging.getLogger(__name__)


class EdgeTable:
    """Arena of undirected edges with subdivision weights and face slots.

    Each edge keeps the vertex order it was created with. Face slot 0 holds
    the face that traverses the edge ``vertex0 -> vertex1``; slot 1 holds the
    face traversing it the other way.

    Attributes
    ----------
    vertex0, vertex1 : list[int]
        Endpoints in creation order.
    center : list[int]
        Midpoint vertex once the edge is split, -1 otherwise.
    faces : list[list[int]]
        Two face slots per edge, -1 when absent.
    w0, w1, wc : list[float]
        Endpoint weights and center weight.

    Examples
    --------
    >>> table = EdgeTable()
    >>> table.insert(2, 0, level=0)
    0
    >>> table.find(0, 2), table.wc[0]
    (0, 1.0)
    """

    def __init__(self) -> None:
        self.vertex0: list[int] = []
        self.vertex1: list[int] = []
        self.center: list[int] = []
        self.faces: list[list[int]] = []
        self.w0: list[float] = []
        self.w1: list[float] = []
        self.wc: list[float] = []
        self._lookup: dict[tuple[int, int], int] = {}

    def __len__(self) -> int:
        return len(self.vertex0)

    def __contains__(self, pair: tuple[int, int]) -> bool:
        return self.find(*pair) is not None

    @staticmethod
    def _key(v0: int, v1: int) -> tuple[int, int]:
        return (v0, v1) if v0 < v1 else (v1, v0)

    def find(self, v0: int, v1: int) -> int | None:
        """Return the id of edge ``{v0, v1}`` in either direction, or None."""
        return self._lookup.get(self._key(v0, v1))

    def insert(self, v0: int, v1: int, level: int | float) -> int:
        """Insert edge ``v0 -> v1`` with weights ``(level, level, level + 1)``.

        Inserting an edge that already exists (in either direction) leaves
        the table unchanged and returns the existing id.
        """
        key = self._key(v0, v1)
        existing = self._lookup.get(key)
        if existing is not None:
            logger.debug(f"Edge {key} already present as edge {existing}; ignored")
            return existing

        edge_id = len(self.vertex0)
        self.vertex0.append(v0)
        self.vertex1.append(v1)
        self.center.append(-1)
        self.faces.append([-1, -1])
        self.w0.append(float(level))
        self.w1.append(float(level))
        self.wc.append(float(level + 1))
        self._lookup[key] = edge_id
        return edge_id

    def set_weights(self, edge_id: int, w0: float, w1: float, wc: float) -> None:
        self.w0[edge_id] = w0
        self.w1[edge_id] = w1
        self.wc[edge_id] = wc

    def assign_face(self, v0: int, v1: int, face: int) -> int:
        """Record that ``face`` traverses the edge ``v0 -> v1``.

        The slot follows the traversal direction. If that slot is already
        taken the other one is used, which keeps inconsistently wound input
        usable.

        Raises
        ------
        TopologyError
            If the edge does not exist or already has two faces.
        """
        edge_id = self.find(v0, v1)
        if edge_id is None:
            raise TopologyError(
                f"Face {face} uses edge ({v0}, {v1}), which is not in the edge table"
            )
        slots = self.faces[edge_id]
        slot = 0 if self.vertex0[edge_id] == v0 else 1
        if slots[slot] != -1:
            slot = 1 - slot
        if slots[slot] != -1:
            raise TopologyError(
                f"Edge ({v0}, {v1}) is shared by more than two faces: "
                f"{slots[0]}, {slots[1]} and {face}"
            )
        slots[slot] = face
        return edge_id

    def surviving(self, device: torch.device | str = "cpu") -> TensorDict:
        """Collect the edges that were never split.

        Returns
        -------
        TensorDict
            Batch size (n_surviving,) with entries ``"edge_id"`` (arena id),
            ``"vertices"`` (n, 2), ``"faces"`` (n, 2), ``"w0"``, ``"w1"`` and
            ``"wc"``, in arena order.
        """
        keep = [i for i, c in enumerate(self.center) if c == -1]
        return TensorDict(
            {
                "edge_id": torch.tensor(keep, dtype=torch.int64),
                "vertices": torch.tensor(
                    [[self.vertex0[i], self.vertex1[i]] for i in keep],
                    dtype=torch.int64,
                ).reshape(-1, 2),
                "faces": torch.tensor(
                    [self.faces[i] for i in keep], dtype=torch.int64
                ).reshape(-1, 2),
                "w0": torch.tensor([self.w0[i] for i in keep], dtype=torch.float64),
                "w1": torch.tensor([self.w1[i] for i in keep], dtype=torch.float64),
                "wc": torch.tensor([self.wc[i] for i in keep], dtype=torch.float64),
            },
            batch_size=torch.Size([len(keep)]),
        ).to(device)
