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

"""
Unfolding a Myriahedron with Hydra
==================================

Builds a myriahedron from the ``myriahedron`` section of the config, steps it
from the folded sphere to the flat net, and saves the final mesh buffers.

Run this example:

    python unfold_sphere.py

    # Override values from command line
    python unfold_sphere.py myriahedron.geometry=octahedron myriahedron.subdivisions=4

    # Graticule base with 12 parallels
    python unfold_sphere.py myriahedron.geometry=graticule myriahedron.parallels=12 \\
        myriahedron.subdivisions=0

Configuration Files
-------------------
- conf/unfold_sphere.yaml
"""

import logging
from pathlib import Path

import hydra
import torch
from omegaconf import DictConfig, OmegaConf

from myriahedral import Myriahedron, MyriahedronConfig

logger = logging.getLogger(__name__)


@hydra.main(version_base=None, config_path="./conf", config_name="unfold_sphere")
def main(cfg: DictConfig) -> None:
    logger.info(f"Resolved configuration:\n{OmegaConf.to_yaml(cfg)}")

    myriahedron = Myriahedron(MyriahedronConfig.from_dict(cfg.myriahedron))
    logger.info(repr(myriahedron))

    ### Sweep from sphere to net, tracking how flat the net gets
    for scale in torch.linspace(0.0, 1.0, cfg.unfold.steps).tolist():
        myriahedron.unfold(scale)
        normals = myriahedron.face_normals()
        folds = myriahedron.folds
        cos = (normals[folds[:, 0]] * normals[folds[:, 1]]).sum(dim=-1)
        logger.info(f"scale={scale:.2f}  min fold cosine={cos.min().item():.6f}")

    output = Path(cfg.output.path)
    torch.save(myriahedron.get_mesh_data().to_dict(), output)
    logger.info(f"Saved mesh buffers to {output.resolve()}")

    if cfg.output.plot:
        from myriahedral.visualization.draw_folds import draw_fold_tree

        ax = draw_fold_tree(myriahedron)
        ax.get_figure().savefig(output.with_suffix(".png"), dpi=150)


if __name__ == "__main__":
    main()
