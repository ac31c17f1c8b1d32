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

"""Face-adjacency (dual) graph of a subdivided mesh.

Every surviving edge shared by two faces becomes one dual edge, a potential
fold. Dual edges live in a single :class:`FaceEdges` arena; the spanning tree,
the fold tree and the unfold engine all refer to them by arena row.
"""

import torch
from tensordict import TensorDict, tensorclass


@tensorclass
class FaceEdges:
    """Arena of dual edges (face pairs joined by a mesh edge).

    Attributes
    ----------
    edge : torch.Tensor
        Row of the underlying edge in the surviving-edge TensorDict, int64.
    from_face, to_face : torch.Tensor
        The two faces joined by the edge, int64. ``from_face`` traverses
        ``vertex0 -> vertex1``.
    vertex0, vertex1 : torch.Tensor
        Endpoints of the shared edge, int64.
    weight : torch.Tensor
        Spanning-tree weight (lower is preferred), float64.
    parent : torch.Tensor
        Parent dual edge in the fold tree, -1 for the root or for edges that
        are not folds, int64.
    level : torch.Tensor
        Depth in the fold tree (root is 0), int64.
    orientation : torch.Tensor
        Sign (+1 / -1) of the unfold rotation, int64.

    Examples
    --------
    >>> dual = FaceEdges.from_edges(edges)  # doctest: +SKIP
    >>> dual.swap(dual.from_face > dual.to_face)  # doctest: +SKIP
    """

    edge: torch.Tensor
    from_face: torch.Tensor
    to_face: torch.Tensor
    vertex0: torch.Tensor
    vertex1: torch.Tensor
    weight: torch.Tensor
    parent: torch.Tensor
    level: torch.Tensor
    orientation: torch.Tensor

    @classmethod
    def from_edges(cls, edges: TensorDict) -> "FaceEdges":
        """Build the dual graph from surviving edges.

        Edges with a missing face (open boundaries, degenerate input) and
        edges whose two slots hold the same face are left out.

        Parameters
        ----------
        edges : TensorDict
            Surviving edges with ``"vertices"`` (n, 2), ``"faces"`` (n, 2)
            and ``"wc"`` (n,).

        Returns
        -------
        FaceEdges
            One row per admissible edge, in surviving-edge order, weighted
            ``-wc`` so that edges created deeper in the subdivision win.
        """
        faces = edges["faces"]
        admissible = (faces >= 0).all(dim=-1) & (faces[:, 0] != faces[:, 1])
        rows = torch.nonzero(admissible).flatten()
        n = len(rows)
        device = faces.device

        return cls(
            edge=rows,
            from_face=faces[rows, 0],
            to_face=faces[rows, 1],
            vertex0=edges["vertices"][rows, 0],
            vertex1=edges["vertices"][rows, 1],
            weight=-edges["wc"][rows],
            parent=torch.full((n,), -1, dtype=torch.int64, device=device),
            level=torch.zeros(n, dtype=torch.int64, device=device),
            orientation=torch.ones(n, dtype=torch.int64, device=device),
            batch_size=torch.Size([n]),
        )

    def swap(self, mask: torch.Tensor | None = None) -> None:
        """Reverse dual edges in place, swapping vertex and face order together.

        Parameters
        ----------
        mask : torch.Tensor, optional
            Boolean (n,) selecting which rows to reverse. All rows if None.
        """
        if mask is None:
            mask = torch.ones_like(self.from_face, dtype=torch.bool)
        self.from_face, self.to_face = (
            torch.where(mask, self.to_face, self.from_face),
            torch.where(mask, self.from_face, self.to_face),
        )
        self.vertex0, self.vertex1 = (
            torch.where(mask, self.vertex1, self.vertex0),
            torch.where(mask, self.vertex0, self.vertex1),
        )

    def pairs(self) -> torch.Tensor:
        """Return ``(from_face, to_face)`` as an (n, 2) tensor."""
        return torch.stack([self.from_face, self.to_face], dim=-1)
