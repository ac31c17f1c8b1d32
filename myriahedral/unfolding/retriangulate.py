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

"""Vertex duplication so that every face owns its three vertices.

After this step no vertex is shared between faces, so faces can move
independently during unfolding and the cuts can open up.
"""

import torch
from tensordict import TensorDict, tensorclass

from myriahedral.mesh import Mesh
from myriahedral.utilities._edge_lookup import find_edges_in_reference
from myriahedral.utilities._topology import TopologyError, triangle_edges


@tensorclass
class RetriangulatedFaces:
    """Per-face bookkeeping after vertex duplication.

    Attributes
    ----------
    vertices : torch.Tensor
        Shape (n_faces, 3). The face's own vertices, ``3f, 3f + 1, 3f + 2``.
    edges : torch.Tensor
        Shape (n_faces, 3). Surviving-edge row bounding each side
        ``(v0, v1)``, ``(v1, v2)``, ``(v2, v0)``.
    original_vertices : torch.Tensor
        Shape (n_faces, 3). Vertex ids in the shared (pre-duplication) mesh.
    normals : torch.Tensor
        Shape (n_faces, 3). Canonical (folded) unit normals.
    """

    vertices: torch.Tensor
    edges: torch.Tensor
    original_vertices: torch.Tensor
    normals: torch.Tensor


def retriangulate(
    mesh: Mesh,
    edges: TensorDict,
    fold_rows: torch.Tensor,
    cut_rows: torch.Tensor,
) -> tuple[Mesh, RetriangulatedFaces]:
    """Duplicate vertices so that each face owns three fresh ones.

    Parameters
    ----------
    mesh : Mesh
        Shared-vertex mesh from subdivision.
    edges : TensorDict
        Surviving edges with ``"vertices"`` (n, 2).
    fold_rows, cut_rows : torch.Tensor
        Surviving-edge rows that are folds and cuts.

    Returns
    -------
    mesh : Mesh
        ``3 * n_faces`` points; ``cells`` is ``arange(3 * n_faces)`` reshaped
        to (n_faces, 3). ``cell_data["original_cells"]`` holds the shared
        vertex ids and the canonical normals are cached.
    faces : RetriangulatedFaces

    Raises
    ------
    TopologyError
        If a face is not bounded by exactly three fold or cut edges.
    """
    n_faces = mesh.n_cells
    device = mesh.cells.device

    ### Bounding edges of every face, looked up among folds and cuts
    boundary_rows = torch.cat([fold_rows, cut_rows])
    sides = triangle_edges(mesh.cells).reshape(-1, 2)
    positions, matches = find_edges_in_reference(
        edges["vertices"][boundary_rows], sides
    )
    matches = matches.reshape(n_faces, 3)
    n_bounding = matches.sum(dim=-1)
    if (n_bounding != 3).any():
        bad = int(torch.nonzero(n_bounding != 3)[0])
        raise TopologyError(
            f"Face {bad} is bounded by {int(n_bounding[bad])} fold/cut edges, expected 3"
        )
    face_edges = boundary_rows[positions].reshape(n_faces, 3)

    ### Fresh vertices 3f, 3f+1, 3f+2; face ids are unchanged
    new_cells = torch.arange(3 * n_faces, dtype=torch.int64, device=device).reshape(
        n_faces, 3
    )
    unfolded = Mesh(
        points=mesh.points[mesh.cells].reshape(-1, 3),
        cells=new_cells,
        cell_data={"original_cells": mesh.cells},
    )

    faces = RetriangulatedFaces(
        vertices=new_cells,
        edges=face_edges,
        original_vertices=mesh.cells,
        normals=unfolded.cell_normals,
        batch_size=torch.Size([n_faces]),
    )
    return unfolded, faces
