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

import logging
from typing import Optional

import numpy as np
from sklearn.covariance import empirical_covariance

from .transform import AffineMap
from ..utils import assert_positive, assert_positive_integer

logger = logging.getLogger(__name__)


class RoundingEllipsoid:
    """
    Ellipsoid {x : (x - c)^T E^-1 (x - c) <= 1} approximating the shape of a convex body.
    """

    def __init__(self, center: np.ndarray, matrix: np.ndarray):
        self.center = np.asarray(center, dtype=np.float64)
        self.matrix = 0.5 * (matrix + matrix.T)

        self.eigenvalues, self.eigenvectors = np.linalg.eigh(self.matrix)
        if self.eigenvalues[0] <= 0:
            raise ValueError("Rounding ellipsoid is degenerate: smallest eigenvalue is {}".format(self.eigenvalues[0]))

    @property
    def dim(self) -> int:
        return len(self.center)

    @property
    def axes(self) -> np.ndarray:
        """
        :return: semi-axes lengths, in increasing order
        """
        return np.sqrt(self.eigenvalues)

    @property
    def axis_ratio(self) -> float:
        axes = self.axes
        return float(axes[-1] / axes[0])

    def to_unit_ball(self) -> AffineMap:
        """
        :return: the affine map y = E^{-1/2} (x - c), sending this ellipsoid onto the unit ball
        """
        P = self.eigenvectors
        L = (P / self.axes.reshape(1, -1)).dot(P.T)
        return AffineMap(L, -L.dot(self.center))


def minimum_volume_ellipsoid(points: np.ndarray, tol: float = 1e-3, max_iter: Optional[int] = 1000) -> RoundingEllipsoid:
    """
    Computes an approximation of the Minimum Volume Enclosing Ellipsoid of a point set through Khachiyan's algorithm.

    :param points: matrix of points, one per row
    :param tol: stop when the change in the weights vector is smaller than this value
    :param max_iter: maximum number of iterations. If None, run until convergence.
    """
    assert_positive(tol, 'tol')
    assert_positive_integer(max_iter, 'max_iter', allow_none=True)

    n, dim = points.shape
    if n <= dim:
        raise ValueError("At least {} points are necessary, got {}".format(dim + 1, n))

    Q = np.hstack([points, np.ones((n, 1))])
    u = np.full(n, 1.0 / n)

    iters, error = 0, np.inf
    while error > tol:
        if max_iter is not None and iters >= max_iter:
            logger.info("Khachiyan's algorithm did not converge after %d iterations (error = %g)", iters, error)
            break

        X = Q.T.dot(Q * u.reshape(-1, 1))
        M = np.einsum('ij,ji->i', Q, np.linalg.solve(X, Q.T))

        j = np.argmax(M)
        step = (M[j] - dim - 1) / ((dim + 1) * (M[j] - 1))

        new_u = (1 - step) * u
        new_u[j] += step

        error = np.linalg.norm(new_u - u)
        u = new_u
        iters += 1

    center = u.dot(points)
    scatter = (points * u.reshape(-1, 1)).T.dot(points) - np.outer(center, center)
    return RoundingEllipsoid(center, dim * scatter)


def covariance_ellipsoid(points: np.ndarray) -> RoundingEllipsoid:
    """
    Ellipsoid given by the empirical mean and covariance of the points. Since a uniform distribution over an ellipsoid E
    has covariance E / (d + 2), the covariance matrix is scaled up accordingly.
    """
    n, dim = points.shape
    if n <= dim:
        raise ValueError("At least {} points are necessary, got {}".format(dim + 1, n))

    return RoundingEllipsoid(points.mean(axis=0), (dim + 2) * empirical_covariance(points))
