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

from .base import ConvexBody, as_matrix, as_points, axis_inner_ball
from ..errors import MalformedBodyError
from ..oracles import HullOracle
from ..oracles.hull import hull_contains

if TYPE_CHECKING:
    from ..rounding import AffineMap
    from ..utils import InnerBall, Seed


class VPolytope(ConvexBody):
    """
    Convex hull of a finite set of points. The points do not need to be vertices (interior points are allowed), but
    they must affinely span the whole space.
    """

    def __init__(self, V):
        """
        :param V: matrix of points, one per row
        """
        self.V = as_matrix(V, 'V')

        n, dim = self.V.shape
        if n <= dim or np.linalg.matrix_rank(self.V[1:] - self.V[0]) < dim:
            raise MalformedBodyError("V-polytope is not full-dimensional: {} points in dimension {}.".format(n, dim))

        self._inner_ball = None  # type: Optional[InnerBall]

    def __repr__(self):
        return "VPolytope(n={}, d={})".format(*self.V.shape)

    @property
    def dim(self) -> int:
        return self.V.shape[1]

    @property
    def vertices(self) -> np.ndarray:
        return self.V

    def is_inside(self, X: np.ndarray, tol: float = 0.0):
        X = np.asarray(X, dtype=np.float64)
        inside = np.array([hull_contains(self.V, x, tol=tol) for x in as_points(X)])
        return inside[0] if X.ndim == 1 else inside

    def boundary_oracle(self) -> HullOracle:
        return HullOracle(self.V, simplex=True)

    def inner_ball(self) -> InnerBall:
        if self._inner_ball is None:
            self._inner_ball = axis_inner_ball(self, self.V.mean(axis=0))
        center, radius = self._inner_ball
        return center.copy(), radius

    def outer_radius(self, center: np.ndarray, seed: Seed = None) -> float:
        return float(np.linalg.norm(self.V - center, axis=1).max())

    def transform(self, amap: AffineMap) -> VPolytope:
        return VPolytope(amap(self.V))
