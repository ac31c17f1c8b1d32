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

"""Folds, cuts and the unfolding of a subdivided sphere.

The stages run in order: dual graph, spanning tree, fold tree,
re-triangulation, unfold planning. :class:`myriahedral.Myriahedron` drives
them; the functions here are usable on their own for custom meshes.
"""

from myriahedral.unfolding._dual_graph import FaceEdges
from myriahedral.unfolding.fold_tree import FoldTree, build_fold_tree
from myriahedral.unfolding.mst import (
    attachment_tiers,
    minimum_spanning_tree,
    spanning_tree_from_edges,
    split_folds_and_cuts,
)
from myriahedral.unfolding.retriangulate import RetriangulatedFaces, retriangulate
from myriahedral.unfolding.unfold import (
    UnfoldPlan,
    face_transforms,
    plan_unfold,
    unfold_points,
)
from myriahedral.unfolding.uv import calculate_uv, correct_seams, equirectangular_uv
