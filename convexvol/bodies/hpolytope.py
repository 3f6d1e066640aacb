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
import scipy.optimize

from .base import ConvexBody, as_matrix, as_vector
from ..errors import MalformedBodyError, InfeasibleSeedError
from ..oracles import HalfspaceOracle

if TYPE_CHECKING:
    from ..rounding import AffineMap
    from ..utils import InnerBall, Seed


class HPolytope(ConvexBody):
    """
    This class represents the polytope defined by a set of linear inequalities:

                    A x <= b

    Each row of A must be non-null. The polytope is expected to be bounded and to have non-empty interior.
    """

    def __init__(self, A, b):
        """
        :param A: constraints matrix, of shape (m, d)
        :param b: right-hand side vector, of size m
        """
        self.A = as_matrix(A, 'A')
        self.b = as_vector(b, 'b', size=self.A.shape[0])

        self._row_norms = np.linalg.norm(self.A, axis=1)
        if np.any(self._row_norms == 0):
            raise MalformedBodyError("Found null rows in constraints matrix: {}".format(np.flatnonzero(self._row_norms == 0)))

        self._inner_ball = None  # type: Optional[InnerBall]

    def __repr__(self):
        return "HPolytope(m={}, d={})".format(*self.A.shape)

    @property
    def dim(self) -> int:
        return self.A.shape[1]

    @property
    def n_constraints(self) -> int:
        return self.A.shape[0]

    def is_inside(self, X: np.ndarray, tol: float = 0.0):
        """
        :param X: data point (also works for a matrix of points)
        :param tol: constraints are relaxed to A x <= b + tol
        :return: whether X satisfies the polytope equations
        """
        X = np.asarray(X, dtype=np.float64)
        return np.all(X.dot(self.A.T) <= self.b + tol, axis=-1)

    def is_well_inside(self, x: np.ndarray, margin: float = 1e-10) -> bool:
        slack = self.b - self.A.dot(x)
        return bool(np.all(slack > margin * self._row_norms))

    def boundary_oracle(self) -> HalfspaceOracle:
        return HalfspaceOracle(self.A, self.b)

    def inner_ball(self) -> InnerBall:
        if self._inner_ball is None:
            self._inner_ball = self.__compute_chebyshev_ball()
        center, radius = self._inner_ball
        return center.copy(), radius

    def __compute_chebyshev_ball(self) -> InnerBall:
        """
        Computes the largest inscribed ball by solving the Linear Programming problem:

            maximize r,  s.t.  a_i^T x + r ||a_i|| <= b_i,  r >= 0
        """
        m, dim = self.A.shape

        res = scipy.optimize.linprog(
            c=np.array([0.0] * dim + [-1.0]),
            A_ub=np.hstack([self.A, self._row_norms.reshape(-1, 1)]),
            b_ub=self.b,
            bounds=[(None, None)] * dim + [(0, None)],
            method='highs'
        )

        # HiGHS may report unbounded problems as "infeasible or unbounded"
        if res.status == 3 or (res.status == 2 and self.__is_feasible()):
            raise MalformedBodyError("Polytope is unbounded.")

        if not res.success or res.x[-1] <= 0:
            raise InfeasibleSeedError("Polytope has empty interior. Linear programming status: {}".format(res.message))

        return res.x[:-1], float(res.x[-1])

    def __is_feasible(self) -> bool:
        res = scipy.optimize.linprog(np.zeros(self.dim), A_ub=self.A, b_ub=self.b, bounds=[(None, None)] * self.dim, method='highs')
        return res.status == 0

    def outer_radius(self, center: np.ndarray, seed: Seed = None) -> float:
        """
        Computes the radius of the ball centered at 'center' containing the bounding box of the polytope.
        """
        low, high = self.bounding_box()
        corner = np.maximum(np.abs(low - center), np.abs(high - center))
        return float(np.linalg.norm(corner))

    def bounding_box(self):
        """
        :return: vectors 'low' and 'high' such that the polytope is contained in the box [low, high]. Raises an error
        if the polytope is unbounded.
        """
        dim = self.dim
        low, high = np.empty(dim), np.empty(dim)

        for i in range(dim):
            c = np.zeros(dim)
            c[i] = 1.0

            for sign, out in [(1, low), (-1, high)]:
                res = scipy.optimize.linprog(sign * c, A_ub=self.A, b_ub=self.b, bounds=[(None, None)] * dim, method='highs')

                if res.status == 3:
                    raise MalformedBodyError("Polytope is unbounded along coordinate {}.".format(i))
                if not res.success:
                    raise InfeasibleSeedError("Polytope is empty. Linear programming status: {}".format(res.message))

                out[i] = res.x[i]

        return low, high

    def transform(self, amap: AffineMap) -> HPolytope:
        """
        If y = L x + s, then A x <= b  <=>  (A L^-1) y <= b + (A L^-1) s
        """
        A = np.linalg.solve(amap.linear.T, self.A.T).T
        return HPolytope(A, self.b + A.dot(amap.shift))
