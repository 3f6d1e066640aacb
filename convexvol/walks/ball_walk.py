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

from .base import RandomWalk, WalkState
from ..utils import assert_positive, uniform_ball

if TYPE_CHECKING:
    from ..bodies import ConvexBody


class BallWalk(RandomWalk):
    """
    At each step, a point is proposed uniformly in the ball B(x, delta). The walk moves there if the proposal lies inside
    the body, and stays at x otherwise. Only membership queries are needed.
    """

    def __init__(self, delta: Optional[float] = None, **kwargs):
        """
        :param delta: radius of the proposal ball. If None, it is set to 4 r / sqrt(d), where r is the radius of the
        body's inscribed ball.
        """
        super().__init__(**kwargs)

        assert_positive(delta, 'delta', allow_none=True)
        self.delta = delta

    def __repr__(self):
        return "BallWalk(delta={})".format(self.delta)

    def _initialize(self, body: ConvexBody, state: WalkState) -> None:
        if self.delta is not None:
            state.delta = self.delta
        else:
            _, radius = body.inner_ball()
            state.delta = 4 * radius / np.sqrt(body.dim)

    def step(self, body: ConvexBody, state: WalkState) -> None:
        move = uniform_ball(state.dim, state.rng, state.delta)
        proposal = state.point + move

        if not body.is_inside(proposal):
            state.rejections += 1
            return

        state.point, state.direction = proposal, move / np.linalg.norm(move)
