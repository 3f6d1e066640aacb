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

from math import pi
from typing import TYPE_CHECKING

import numpy as np
from scipy.special import gammaln

from .base import ConvexBody, as_matrix, as_vector
from ..errors import MalformedBodyError
from ..oracles import EllipsoidOracle
from ..utils import assert_positive

if TYPE_CHECKING:
    from ..rounding import AffineMap
    from ..utils import InnerBall, Seed


def unit_ball_volume(dim: int) -> float:
    """ Volume of the d-dimensional unit ball: pi^(d/2) / Gamma(d/2 + 1) """
    return float(np.exp(0.5 * dim * np.log(pi) - gammaln(0.5 * dim + 1)))


class Ellipsoid(ConvexBody):
    """
    Ellipsoid of equation (x - c)^T E^-1 (x - c) <= 1, where E is a positive definite matrix. This is the only convex
    body whose volume is known in closed-form, which makes it the anchor of the multiphase volume estimator.
    """

    def __init__(self, center, matrix):
        self.center = as_vector(center, 'center')
        self.matrix = as_matrix(matrix, 'matrix')

        if self.matrix.shape != (self.dim, self.dim):
            raise MalformedBodyError("Expected matrix of shape ({0}, {0}), got {1}".format(self.dim, self.matrix.shape))

        if not np.allclose(self.matrix, self.matrix.T):
            raise MalformedBodyError("Ellipsoid matrix must be symmetric.")

        self.eigenvalues = np.linalg.eigvalsh(self.matrix)
        if self.eigenvalues[0] <= 0:
            raise MalformedBodyError("Ellipsoid matrix must be positive definite.")

        self.inverse = np.linalg.inv(self.matrix)

    def __repr__(self):
        return "Ellipsoid(center={}, axes={})".format(self.center, np.sqrt(self.eigenvalues))

    @property
    def dim(self) -> int:
        return len(self.center)

    @property
    def volume(self) -> float:
        return unit_ball_volume(self.dim) * float(np.sqrt(np.prod(self.eigenvalues)))

    def is_inside(self, X: np.ndarray, tol: float = 0.0):
        Y = np.asarray(X, dtype=np.float64) - self.center
        return np.einsum('...i,ij,...j->...', Y, self.inverse, Y) <= 1 + tol

    def is_well_inside(self, x: np.ndarray, margin: float = 1e-10) -> bool:
        y = x - self.center
        return bool(np.sqrt(y.dot(self.inverse.dot(y))) < 1 - margin / np.sqrt(self.eigenvalues[-1]))

    def boundary_oracle(self) -> EllipsoidOracle:
        return EllipsoidOracle(self.center, self.inverse)

    def inner_ball(self) -> InnerBall:
        return self.center.copy(), float(np.sqrt(self.eigenvalues[0]))

    def outer_radius(self, center: np.ndarray, seed: Seed = None) -> float:
        return float(np.linalg.norm(center - self.center) + np.sqrt(self.eigenvalues[-1]))

    def transform(self, amap: AffineMap) -> Ellipsoid:
        L = amap.linear
        return Ellipsoid(amap(self.center), L.dot(self.matrix).dot(L.T))


class Ball(Ellipsoid):
    def __init__(self, center, radius: float):
        assert_positive(radius, 'radius')

        center = as_vector(center, 'center')
        super().__init__(center, radius * radius * np.eye(len(center)))
        self.radius = float(radius)

    def __repr__(self):
        return "Ball(center={}, radius={})".format(self.center, self.radius)

    @property
    def volume(self) -> float:
        return unit_ball_volume(self.dim) * self.radius ** self.dim

    def inner_ball(self) -> InnerBall:
        return self.center.copy(), self.radius

    def outer_radius(self, center: np.ndarray, seed: Seed = None) -> float:
        return float(np.linalg.norm(center - self.center) + self.radius)
