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


class HalfspaceOracle(BoundaryOracle):
    """
    Boundary oracle of the polytope {x : A x <= b}. The slack vector 'b - A x' of the current point and the vector
    'A v' of the last queried direction are cached, so a hit-and-run step costs a single matrix-vector product
    (or none, for coordinate directions).
    """

    def __init__(self, A: np.ndarray, b: np.ndarray, refresh_every: int = 100):
        self.A = A
        self.b = b
        self.refresh_every = refresh_every

        self._row_norms = np.linalg.norm(A, axis=1)
        self.reset()

    def reset(self) -> None:
        self._point = None
        self._slack = None
        self._Av = None
        self._moves = 0

    def chord(self, x: np.ndarray, v: np.ndarray) -> Tuple[float, float]:
        self.__update_point(x)
        self._Av = self.A.dot(v)
        return self.__chord_extremes()

    def coordinate_chord(self, x: np.ndarray, i: int) -> Tuple[float, float]:
        self.__update_point(x)
        self._Av = self.A[:, i]
        return self.__chord_extremes()

    def hit(self, x: np.ndarray, v: np.ndarray) -> Hit:
        self.__update_point(x)
        self._Av = self.A.dot(v)

        idx = np.flatnonzero(self._Av > 0)
        if len(idx) == 0:
            raise DegenerateDirectionError("Ray never leaves the polytope.")

        extremes = self._slack[idx] / self._Av[idx]
        k = np.argmin(extremes)  # argmin returns the first occurrence, i.e. the lowest constraint index
        return validate_hit(extremes[k], self.A[idx[k]])

    def advance(self, x_new: np.ndarray, t: float) -> None:
        self._moves += 1

        if self._moves % self.refresh_every == 0:
            self._point = None
            self.__update_point(x_new)
            return

        self._slack = self._slack - t * self._Av
        self._point = x_new.copy()

    def __update_point(self, x: np.ndarray) -> None:
        if self._point is not None and np.array_equal(x, self._point):
            return

        self._point = x.copy()
        self._slack = self.b - self.A.dot(x)

    def __chord_extremes(self) -> Tuple[float, float]:
        den = self._Av

        upper = den > 0
        t_plus = (self._slack[upper] / den[upper]).min() if upper.any() else np.inf

        lower = den < 0
        t_minus = (self._slack[lower] / den[lower]).max() if lower.any() else -np.inf

        return validate_chord(t_minus, t_plus)
