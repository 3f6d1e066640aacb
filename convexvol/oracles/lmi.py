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
from typing import Tuple, TYPE_CHECKING

import numpy as np
import scipy.linalg

from .base import BoundaryOracle, Hit, validate_chord, validate_hit
from ..errors import DegenerateDirectionError, IllConditionedWarning

if TYPE_CHECKING:
    from ..bodies.spectrahedron import LMI


class LMIOracle(BoundaryOracle):
    """
    Boundary oracle of the spectrahedron {x : M(x) = A_0 + x_1 A_1 + ... + x_d A_d >= 0}.

    Along the line x + t v we have M(x + t v) = M(x) + t B, with B = v_1 A_1 + ... + v_d A_d. Since M(x) is positive
    definite for interior points, the roots of det(M(x) + t B) can be computed through the symmetric-definite
    generalized eigenvalue problem

                B u = mu M(x) u,        t = -1 / mu

    which is much better behaved than root-finding over the determinant. The value M(x) at the current point is cached
    and updated as M(x) + t B whenever the walk moves along the last queried line.
    """

    def __init__(self, lmi: LMI, refresh_every: int = 50):
        self.lmi = lmi
        self.refresh_every = refresh_every
        self.reset()

    def reset(self) -> None:
        self._point = None
        self._M = None
        self._B = None
        self._moves = 0

    def chord(self, x: np.ndarray, v: np.ndarray) -> Tuple[float, float]:
        mu, _ = self.__solve_pencil(x, v)

        neg, pos = mu[mu < 0], mu[mu > 0]
        t_plus = (-1.0 / neg).min() if len(neg) > 0 else np.inf
        t_minus = (-1.0 / pos).max() if len(pos) > 0 else -np.inf

        return validate_chord(t_minus, t_plus)

    def hit(self, x: np.ndarray, v: np.ndarray) -> Hit:
        mu, U = self.__solve_pencil(x, v)

        # eigenvalues are sorted in ascending order, so the closest positive root comes from the smallest eigenvalue
        if mu[0] >= 0:
            raise DegenerateDirectionError("Ray never leaves the spectrahedron.")

        # u spans the kernel of M(x + t v). The gradient of the smallest eigenvalue of M(.) is (u^T A_i u)_i, and it
        # points inwards
        u = U[:, 0]
        normal = -np.einsum('i,kij,j->k', u, self.lmi.coefficients, u)

        return validate_hit(-1.0 / mu[0], normal)

    def advance(self, x_new: np.ndarray, t: float) -> None:
        self._moves += 1

        if self._moves % self.refresh_every == 0:
            self._point = None
            self.__update_point(x_new)
            return

        self._M = self._M + t * self._B
        self._point = x_new.copy()

    def __update_point(self, x: np.ndarray) -> None:
        if self._point is not None and np.array_equal(x, self._point):
            return

        self._point = x.copy()
        self._M = self.lmi.evaluate(x)

    def __solve_pencil(self, x: np.ndarray, v: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        self.__update_point(x)
        self._B = self.lmi.direction_matrix(v)

        try:
            return scipy.linalg.eigh(self._B, self._M)
        except (np.linalg.LinAlgError, ValueError) as e:
            warnings.warn("Generalized eigenvalue problem failed, resampling direction: {}".format(e), IllConditionedWarning)
            self.reset()
            raise DegenerateDirectionError("Ill-conditioned matrix pencil.") from e
