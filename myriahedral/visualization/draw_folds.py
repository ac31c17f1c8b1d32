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

"""Matplotlib debug drawing of a fold tree in equirectangular space."""

import importlib
from typing import TYPE_CHECKING

import numpy as np
import torch

from myriahedral.unfolding.uv import equirectangular_uv

if TYPE_CHECKING:
    from myriahedral.myriahedron import Myriahedron

# Dynamic imports for optional matplotlib dependency
plt = importlib.import_module("matplotlib.pyplot")
LineCollection = importlib.import_module("matplotlib.collections").LineCollection


def fold_segments(myriahedron: "Myriahedron") -> np.ndarray:
    """Fold-tree segments between face centroids in ``(u, v)`` space.

    Segments whose endpoints are more than half the texture apart in ``u``
    wrap across the seam and are dropped.

    Returns
    -------
    np.ndarray
        Shape (n_segments, 2, 2).
    """
    centroid_uv = equirectangular_uv(myriahedron.mesh.cell_centroids)
    folds = myriahedron.folds
    segments = torch.stack(
        [centroid_uv[folds[:, 0]], centroid_uv[folds[:, 1]]], dim=1
    )
    segments = segments.detach().cpu().numpy()
    wraps = np.abs(segments[:, 0, 0] - segments[:, 1, 0]) > 0.5
    return segments[~wraps]


def draw_fold_tree(
    myriahedron: "Myriahedron",
    ax=None,
    show: bool = False,
    color: str = "tab:blue",
    linewidth: float = 0.8,
):
    """Plot the fold tree over the equirectangular texture square.

    Each fold is a segment between the centroids of the two faces it joins.
    The anchor face is marked in red.

    Parameters
    ----------
    myriahedron : Myriahedron
        Built myriahedron.
    ax : matplotlib.axes.Axes, optional
        Axes to draw into. A new figure is created if None.
    show : bool
        Whether to call ``plt.show()``.
    color : str
        Segment color.
    linewidth : float
        Segment width.

    Returns
    -------
    matplotlib.axes.Axes
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(10, 5))

    ax.add_collection(
        LineCollection(fold_segments(myriahedron), colors=color, linewidths=linewidth)
    )

    anchor_uv = equirectangular_uv(
        myriahedron.mesh.cell_centroids[myriahedron.anchor_face].unsqueeze(0)
    )[0]
    ax.scatter([float(anchor_uv[0])], [float(anchor_uv[1])], c="tab:red", s=20, zorder=2)

    ax.set_xlim(0.0, 1.0)
    ax.set_ylim(1.0, 0.0)  # v grows southwards
    ax.set_xlabel("u")
    ax.set_ylabel("v")
    ax.set_aspect("equal", adjustable="box")
    ax.set_title(
        f"{myriahedron.config.geometry}, depth {myriahedron.config.subdivisions}: "
        f"{len(myriahedron.folds)} folds"
    )

    if show:
        plt.show()
    return ax
