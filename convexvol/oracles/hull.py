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
Boundary oracles for bodies described as images of simple polytopes: the convex hull of a point set (V-polytopes) and
the linear image of a cube (zonotopes). Every query reduces to the linear program

        max / min  t    s.t.    P^T lambda - t v = x - c,    lambda in Lambda

where Lambda is the standard simplex (V-polytopes) or the cube [-1, 1]^k (zonotopes). At the optimum, the dual variables
of the position constraints define a supporting hyperplane of the body through the boundary point, which gives us the
outward normal required by reflection-based walks.
"""
from __future__ import annotations

from typing import Tuple, Optional

import numpy as np
import scipy.optimize

from .base import BoundaryOracle, Hit, validate_chord, validate_hit
from ..errors import DegenerateDirectionError


class HullOracle(BoundaryOracle):
    def __init__(self, points: np.ndarray, center: Optional[np.ndarray] = None, simplex: bool = True):
        """
        :param points: generating points (one per row): vertices for V-polytopes, generators for zonotopes
        :param center: translation vector c. Zero if None.
        :param simplex: if True, lambda lives in the standard simplex; otherwise, in the cube [-1, 1]^k
        """
        self.points = points
        self.center = np.zeros(points.shape[1]) if center is None else center
        self.simplex = simplex

        n, dim = points.shape
        self._A_eq = np.zeros((dim + 1, n + 1)) if simplex else np.zeros((dim, n + 1))
        self._A_eq[:dim, :n] = points.T
        if simplex:
            self._A_eq[dim, :n] = 1.0

        self._bounds = [(0, None) if simplex else (-1, 1)] * n + [(None, None)]

    def chord(self, x: np.ndarray, v: np.ndarray) -> Tuple[float, float]:
        t_plus, _ = self.__solve(x, v, maximize=True)
        t_minus, _ = self.__solve(x, v, maximize=False)
        return validate_chord(t_minus, t_plus)

    def hit(self, x: np.ndarray, v: np.ndarray) -> Hit:
        t, dual = self.__solve(x, v, maximize=True)

        normal = dual[:len(x)]
        if normal.dot(v) < 0:
            normal = -normal

        return validate_hit(t, normal)

    def __solve(self, x: np.ndarray, v: np.ndarray, maximize: bool) -> Tuple[float, np.ndarray]:
        dim = len(x)
        n = self.points.shape[0]

        A_eq = self._A_eq.copy()
        A_eq[:dim, n] = -v

        b_eq = np.zeros(A_eq.shape[0])
        b_eq[:dim] = x - self.center
        if self.simplex:
            b_eq[dim] = 1.0

        c = np.zeros(n + 1)
        c[n] = -1.0 if maximize else 1.0

        res = scipy.optimize.linprog(c, A_eq=A_eq, b_eq=b_eq, bounds=self._bounds, method='highs')

        if res.status == 2:
            raise DegenerateDirectionError("Current point is not inside the body.")

        if not res.success:
            raise DegenerateDirectionError("Ray query failed: {}".format(res.message))

        return res.x[n], np.asarray(res.eqlin.marginals)


def hull_contains(points: np.ndarray, x: np.ndarray, center: Optional[np.ndarray] = None, simplex: bool = True, tol: float = 0.0) -> bool:
    """
    Checks whether x = c + P^T lambda for some lambda in the simplex (or in the cube [-1 - tol, 1 + tol]^k).
    """
    n, dim = points.shape
    rhs = x if center is None else x - center

    if simplex:
        A_eq = np.vstack([points.T, np.ones((1, n))])
        b_eq = np.append(rhs, 1.0)
        bounds = [(-tol, None)] * n
    else:
        A_eq, b_eq = points.T, rhs
        bounds = [(-1 - tol, 1 + tol)] * n

    res = scipy.optimize.linprog(np.zeros(n), A_eq=A_eq, b_eq=b_eq, bounds=bounds, method='highs')
    return res.status == 0
