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

from .base import ConvexBody, as_vector, axis_inner_ball
from ..oracles import IntersectionOracle, EllipsoidOracle
from ..utils import assert_positive

if TYPE_CHECKING:
    from ..utils import InnerBall, Seed


class BallIntersection(ConvexBody):
    """
    Intersection of a convex body with the ball B(center, radius). These are the intermediate bodies of the multiphase
    volume estimator, so the ball is expected to be centered at an interior point of the body.
    """

    def __init__(self, body: ConvexBody, center, radius: float, inner_radius: Optional[float] = None):
        """
        :param body: the convex body
        :param center: ball center
        :param radius: ball radius
        :param inner_radius: radius of a ball around 'center' known to be inside 'body', if any
        """
        assert_positive(radius, 'radius')
        assert_positive(inner_radius, 'inner_radius', allow_none=True)

        self.body = body
        self.center = as_vector(center, 'center', size=body.dim)
        self.radius = float(radius)
        self._inner_radius = inner_radius

    def __repr__(self):
        return "BallIntersection(body={}, radius={})".format(self.body, self.radius)

    @property
    def dim(self) -> int:
        return self.body.dim

    def is_inside(self, X: np.ndarray, tol: float = 0.0):
        X = np.asarray(X, dtype=np.float64)
        in_ball = np.linalg.norm(X - self.center, axis=-1) <= self.radius + tol
        return np.logical_and(in_ball, self.body.is_inside(X, tol))

    def is_well_inside(self, x: np.ndarray, margin: float = 1e-10) -> bool:
        return np.linalg.norm(x - self.center) < self.radius - margin and self.body.is_well_inside(x, margin)

    def boundary_oracle(self) -> IntersectionOracle:
        ball_oracle = EllipsoidOracle(self.center, np.eye(self.dim) / self.radius ** 2)
        return IntersectionOracle(self.body.boundary_oracle(), ball_oracle)

    def inner_ball(self) -> InnerBall:
        if self._inner_radius is not None:
            return self.center.copy(), min(self._inner_radius, self.radius)

        center, radius = self.body.inner_ball()
        if np.linalg.norm(center - self.center) + radius <= self.radius:
            return center, radius

        return axis_inner_ball(self, self.center)

    def outer_radius(self, center: np.ndarray, seed: Seed = None) -> float:
        return min(
            float(np.linalg.norm(center - self.center) + self.radius),
            self.body.outer_radius(center, seed)
        )
