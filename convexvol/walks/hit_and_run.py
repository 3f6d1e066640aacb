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
"""
Hit-and-run walks: at each step, a line through the current point is chosen and the next point is drawn uniformly from
the chord cut by the body over this line. The stationary distribution is the uniform distribution over the body, or
the restriction of a spherical Gaussian to the body for the Gaussian variant.

Reference: https://link.springer.com/content/pdf/10.1007%2Fs101070050099.pdf
"""
from __future__ import annotations

from typing import Optional, TYPE_CHECKING

import numpy as np
from scipy.stats import truncnorm

from .base import RandomWalk, WalkState
from ..utils import assert_non_negative, random_direction

if TYPE_CHECKING:
    from ..bodies import ConvexBody


class CoordinateHitAndRun(RandomWalk):
    """
    Hit-and-run over the coordinate directions. Each step only needs the column of the current coordinate, which makes
    it the cheapest walk for H-polytopes.
    """

    def __init__(self, cycle: bool = True, **kwargs):
        """
        :param cycle: if True, coordinates are visited in order; otherwise, a random coordinate is picked at each step
        """
        super().__init__(**kwargs)
        self.cycle = cycle

    def step(self, body: ConvexBody, state: WalkState) -> None:
        i = state.coordinate if self.cycle else state.rng.randint(state.dim)

        t1, t2 = state.oracle.coordinate_chord(state.point, i)
        t = state.rng.uniform(t1, t2)

        point = state.point.copy()
        point[i] += t
        state.oracle.advance(point, t)

        direction = np.zeros(state.dim)
        direction[i] = 1.0

        state.point, state.direction = point, direction
        state.coordinate = (i + 1) % state.dim


class RandomDirectionHitAndRun(RandomWalk):
    """
    Hit-and-run over directions uniformly distributed over the unit sphere.
    """

    def step(self, body: ConvexBody, state: WalkState) -> None:
        v = random_direction(state.dim, state.rng)

        t1, t2 = state.oracle.chord(state.point, v)
        t = state.rng.uniform(t1, t2)

        point = state.point + t * v
        state.oracle.advance(point, t)

        state.point, state.direction = point, v


class GaussianHitAndRun(RandomWalk):
    """
    Hit-and-run for the density exp(-a ||x - c||^2) restricted to the body. Along a unit direction v, the density is
    a normal law of variance 1 / 2a centered at the projection of c over the line, so the next point is drawn from this
    normal law truncated to the chord. For a = 0, the walk reduces to random-direction hit-and-run.
    """

    def __init__(self, a: float, center: Optional[np.ndarray] = None, **kwargs):
        """
        :param a: exponent of the Gaussian density
        :param center: Gaussian center c. Defaults to the body's interior point.
        """
        super().__init__(**kwargs)

        assert_non_negative(a, 'a')

        self.a = a
        self.center = None if center is None else np.array(center, dtype=np.float64)

    def __repr__(self):
        return "GaussianHitAndRun(a={})".format(self.a)

    def _initialize(self, body: ConvexBody, state: WalkState) -> None:
        if self.center is None:
            state.center = body.interior_point()
        elif len(self.center) != body.dim:
            raise ValueError("Center has size {}, but body has dimension {}".format(len(self.center), body.dim))
        else:
            state.center = self.center

    def step(self, body: ConvexBody, state: WalkState) -> None:
        v = random_direction(state.dim, state.rng)
        t1, t2 = state.oracle.chord(state.point, v)

        if self.a == 0:
            t = state.rng.uniform(t1, t2)
        else:
            mu = v.dot(state.center - state.point)
            sigma = 1.0 / np.sqrt(2 * self.a)
            t = truncnorm.rvs((t1 - mu) / sigma, (t2 - mu) / sigma, loc=mu, scale=sigma, random_state=state.rng)
            t = float(np.clip(t, t1, t2))

        point = state.point + t * v
        state.oracle.advance(point, t)

        state.point, state.direction = point, v
