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

from typing import Tuple

import numpy as np

from .base import BoundaryOracle, Hit, validate_chord, validate_hit
from ..errors import DegenerateDirectionError


def solve_second_degree_equation(a: float, b: float, c: float) -> Tuple[float, float]:
    """ Solves the equation a x^2 + 2bx + c = 0 """
    delta = b * b - a * c

    if a <= 0 or delta <= 0:
        raise DegenerateDirectionError("Line does not cross the ellipsoid.")

    sq_delta = np.sqrt(delta)
    return (-b - sq_delta) / a, (-b + sq_delta) / a


class EllipsoidOracle(BoundaryOracle):
    """
    Boundary oracle of the ellipsoid {x : (x - c)^T Q (x - c) <= 1}, where Q is the inverse of the shape matrix.
    """

    def __init__(self, center: np.ndarray, inverse_matrix: np.ndarray):
        self.center = center
        self.Q = inverse_matrix

    def chord(self, x: np.ndarray, v: np.ndarray) -> Tuple[float, float]:
        return validate_chord(*self.__roots(x, v))

    def hit(self, x: np.ndarray, v: np.ndarray) -> Hit:
        _, t = self.__roots(x, v)
        normal = self.Q.dot(x + t * v - self.center)
        return validate_hit(t, normal)

    def __roots(self, x: np.ndarray, v: np.ndarray) -> Tuple[float, float]:
        y = x - self.center
        Qv = self.Q.dot(v)
        return solve_second_degree_equation(v.dot(Qv), y.dot(Qv), y.dot(self.Q.dot(y)) - 1)
