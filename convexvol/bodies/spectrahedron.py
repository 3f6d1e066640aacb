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

from typing import Optional, Sequence, Union, TYPE_CHECKING

import numpy as np

from .base import ConvexBody, as_vector, as_points, axis_inner_ball, central_point, sampled_outer_radius
from ..errors import MalformedBodyError, InfeasibleSeedError
from ..oracles import LMIOracle

if TYPE_CHECKING:
    from ..rounding import AffineMap
    from ..utils import InnerBall, Seed


class LMI:
    """
    Linear matrix pencil M(x) = A_0 + x_1 A_1 + ... + x_d A_d, where all A_i are symmetric matrices of the same size.
    """

    def __init__(self, matrices: Sequence[np.ndarray]):
        """
        :param matrices: list [A_0, A_1, ..., A_d] of symmetric k x k matrices
        """
        try:
            mats = [np.atleast_2d(np.asarray(m, dtype=np.float64)) for m in matrices]
        except (TypeError, ValueError) as e:
            raise MalformedBodyError("Could not read LMI matrices: {}".format(e)) from e

        if len(mats) < 2:
            raise MalformedBodyError("LMI needs at least two matrices (A_0 and A_1), got {}".format(len(mats)))

        k = mats[0].shape[0]
        for i, m in enumerate(mats):
            if m.ndim != 2 or m.shape != (k, k):
                raise MalformedBodyError("Expected LMI matrix A_{} of shape ({}, {}), got {}".format(i, k, k, m.shape))
            if not np.all(np.isfinite(m)):
                raise MalformedBodyError("LMI matrix A_{} has non-finite entries.".format(i))
            if not np.allclose(m, m.T):
                raise MalformedBodyError("LMI matrix A_{} is not symmetric.".format(i))

        self.A0 = 0.5 * (mats[0] + mats[0].T)
        self.coefficients = np.array([0.5 * (m + m.T) for m in mats[1:]])  # shape (d, k, k)

    def __repr__(self):
        return "LMI(d={}, k={})".format(self.dim, self.size)

    @property
    def dim(self) -> int:
        return self.coefficients.shape[0]

    @property
    def size(self) -> int:
        return self.A0.shape[0]

    @property
    def matrices(self):
        return [self.A0] + list(self.coefficients)

    def evaluate(self, x: np.ndarray) -> np.ndarray:
        """
        :return: A_0 + x_1 A_1 + ... + x_d A_d
        """
        return self.A0 + np.tensordot(x, self.coefficients, axes=1)

    def direction_matrix(self, v: np.ndarray) -> np.ndarray:
        """
        :return: v_1 A_1 + ... + v_d A_d
        """
        return np.tensordot(v, self.coefficients, axes=1)

    def min_eigenvalue(self, x: np.ndarray) -> float:
        return float(np.linalg.eigvalsh(self.evaluate(x))[0])

    def is_positive_definite(self, x: np.ndarray) -> bool:
        try:
            np.linalg.cholesky(self.evaluate(x))
            return True
        except np.linalg.LinAlgError:
            return False

    def transform(self, amap: AffineMap) -> LMI:
        """
        Pencil N such that N(y) = M(x) for y = L x + s, i.e. x = L^-1 y + w with w = -L^-1 s
        """
        L_inv = np.linalg.inv(amap.linear)
        w = -L_inv.dot(amap.shift)

        A0 = self.evaluate(w)
        coefficients = np.tensordot(L_inv.T, self.coefficients, axes=1)  # new A_j = sum_i (L^-1)_ij A_i
        return LMI([A0] + list(coefficients))


class Spectrahedron(ConvexBody):
    """
    Spectrahedron defined by a linear matrix inequality:

            {x : A_0 + x_1 A_1 + ... + x_d A_d is positive semi-definite}

    The boundary is made of the points where the matrix becomes singular.
    """

    def __init__(self, lmi: Union[LMI, Sequence[np.ndarray]], interior_point: Optional[np.ndarray] = None):
        """
        :param lmi: a LMI object, or the list of matrices [A_0, A_1, ..., A_d]
        :param interior_point: a strictly feasible point. Defaults to the origin, i.e. A_0 is expected to be positive definite.
        """
        self.lmi = lmi if isinstance(lmi, LMI) else LMI(lmi)

        x0 = np.zeros(self.dim) if interior_point is None else as_vector(interior_point, 'interior_point', size=self.dim)
        if not self.lmi.is_positive_definite(x0):
            raise InfeasibleSeedError("Point {} is not strictly inside the spectrahedron.".format(x0))

        self._seed_point = x0
        self._inner_ball = None  # type: Optional[InnerBall]

    def __repr__(self):
        return "Spectrahedron(d={}, k={})".format(self.dim, self.lmi.size)

    @property
    def dim(self) -> int:
        return self.lmi.dim

    def is_inside(self, X: np.ndarray, tol: float = 0.0):
        X = np.asarray(X, dtype=np.float64)
        inside = np.array([self.lmi.min_eigenvalue(x) >= -tol for x in as_points(X)])
        return inside[0] if X.ndim == 1 else inside

    def is_well_inside(self, x: np.ndarray, margin: float = 1e-10) -> bool:
        return self.lmi.min_eigenvalue(x) > margin

    def boundary_oracle(self) -> LMIOracle:
        return LMIOracle(self.lmi)

    def inner_ball(self) -> InnerBall:
        if self._inner_ball is None:
            self._inner_ball = axis_inner_ball(self, central_point(self, self._seed_point))
        center, radius = self._inner_ball
        return center.copy(), radius

    def outer_radius(self, center: np.ndarray, seed: Seed = None) -> float:
        return sampled_outer_radius(self, center, seed)

    def transform(self, amap: AffineMap) -> Spectrahedron:
        return Spectrahedron(self.lmi.transform(amap), amap(self._seed_point))
