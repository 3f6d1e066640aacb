#  Copyright (c) 2019 École Polytechnique
#
#  This Source Code Form is subject to the terms of the Mozilla Public License, v. 2.0.
#  If a copy of the MPL was not distributed with this file, you can obtain one at http://mozilla.org/MPL/2.0
#
#  Authors:
#        Luciano Di Palma <luciano.di-palma@polytechnique.edu>
#        Enhui Huang <enhui.huang@polytechnique.edu>
#
#  Description:
#  convexvol estimates the volume of high-dimensional convex bodies (H- and V-polytopes, zonotopes and spectrahedra)
#  by Markov Chain Monte Carlo sampling. Random walks (hit-and-run, ball walk, billiard walk and Hamiltonian Monte Carlo
#  with reflections) query a boundary oracle of the body in order to generate approximately uniform (or Boltzmann)
#  samples, which are then combined by a multiphase telescoping estimator into a single volume estimate. An optional
#  rounding step maps the body towards isotropic position before sampling in order to reduce the mixing time.
from __future__ import annotations

from typing import Optional, TYPE_CHECKING

import numpy as np

from .base import RandomWalk, WalkState, reflective_path
from ..utils import assert_positive, assert_positive_integer, random_direction

if TYPE_CHECKING:
    from ..bodies import ConvexBody


class BilliardWalk(RandomWalk):
    """
    The billiard walk follows a straight trajectory of random length from the current point, in a uniformly random
    direction, reflecting it on the boundary of the body every time it is hit. It mixes faster than hit-and-run for
    uniform sampling, at the cost of more expensive oracle queries (boundary normals are needed).

    Reference: https://arxiv.org/abs/1404.3563
    """

    def __init__(self, trajectory_length: Optional[float] = None, max_reflections: Optional[int] = None, **kwargs):
        """
        :param trajectory_length: mean trajectory length L; the length of each trajectory follows an Exp(1 / L) law.
        If None, L = 6 sqrt(d) r, where r is the radius of the body's inscribed ball.
        :param max_reflections: trajectories needing more reflections are discarded. Defaults to 100 d.
        """
        super().__init__(**kwargs)

        assert_positive(trajectory_length, 'trajectory_length', allow_none=True)
        assert_positive_integer(max_reflections, 'max_reflections', allow_none=True)

        self.trajectory_length = trajectory_length
        self.max_reflections = max_reflections

    def __repr__(self):
        return "BilliardWalk(trajectory_length={}, max_reflections={})".format(self.trajectory_length, self.max_reflections)

    def _initialize(self, body: ConvexBody, state: WalkState) -> None:
        if self.trajectory_length is not None:
            state.trajectory_length = self.trajectory_length
        else:
            _, radius = body.inner_ball()
            state.trajectory_length = 6 * np.sqrt(body.dim) * radius

        state.max_reflections = self.max_reflections if self.max_reflections is not None else 100 * body.dim

    def step(self, body: ConvexBody, state: WalkState) -> None:
        length = state.rng.exponential(state.trajectory_length)
        v = random_direction(state.dim, state.rng)

        path = reflective_path(state.oracle, state.point, v, length, state.max_reflections)

        if path is None:
            state.rejections += 1
            return

        state.point, state.direction = path
