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

import warnings
from typing import Optional, TYPE_CHECKING

import numpy as np

from .base import ConvexBody, as_matrix, as_vector, as_points, axis_inner_ball
from ..oracles import HullOracle
from ..oracles.hull import hull_contains

if TYPE_CHECKING:
    from ..rounding import AffineMap
    from ..utils import InnerBall, Seed


class Zonotope(ConvexBody):
    """
    Minkowski sum of segments:

            Z = c + [-g_1, g_1] + ... + [-g_k, g_k] = {c + G^T lambda : -1 <= lambda_i <= 1}

    where the generators g_i are the rows of G.
    """

    def __init__(self, generators, center=None):
        """
        :param generators: matrix of generators, one per row
        :param center: center of symmetry. Defaults to the origin.
        """
        self.G = as_matrix(generators, 'generators')
        self.center = np.zeros(self.dim) if center is None else as_vector(center, 'center', size=self.dim)

        if np.linalg.matrix_rank(self.G) < self.dim:
            warnings.warn("Zonotope generators do not span the space: got {} generators in dimension {}".format(*self.G.shape))

        self._inner_ball = None  # type: Optional[InnerBall]

    def __repr__(self):
        return "Zonotope(k={}, d={})".format(*self.G.shape)

    @property
    def dim(self) -> int:
        return self.G.shape[1]

    @property
    def n_generators(self) -> int:
        return self.G.shape[0]

    def is_inside(self, X: np.ndarray, tol: float = 0.0):
        X = np.asarray(X, dtype=np.float64)
        inside = np.array([hull_contains(self.G, x, center=self.center, simplex=False, tol=tol) for x in as_points(X)])
        return inside[0] if X.ndim == 1 else inside

    def boundary_oracle(self) -> HullOracle:
        return HullOracle(self.G, self.center, simplex=False)

    def inner_ball(self) -> InnerBall:
        if self._inner_ball is None:
            self._inner_ball = axis_inner_ball(self, self.center.copy())
        center, radius = self._inner_ball
        return center.copy(), radius

    def outer_radius(self, center: np.ndarray, seed: Seed = None) -> float:
        half_widths = np.abs(self.G).sum(axis=0)
        return float(np.linalg.norm(np.abs(self.center - center) + half_widths))

    def transform(self, amap: AffineMap) -> Zonotope:
        return Zonotope(self.G.dot(amap.linear.T), amap(self.center))
