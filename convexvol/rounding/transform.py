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

from typing import TYPE_CHECKING

import numpy as np
from scipy.stats import special_ortho_group

from ..errors import MalformedBodyError
from ..utils import get_random_state, assert_positive_integer

if TYPE_CHECKING:
    from ..utils import Seed


class AffineMap:
    """
    Invertible affine map y = L x + s of the euclidean space.
    """

    def __init__(self, linear: np.ndarray, shift: np.ndarray):
        self.linear = np.atleast_2d(np.asarray(linear, dtype=np.float64))
        self.shift = np.asarray(shift, dtype=np.float64).ravel()

        dim = self.linear.shape[0]
        if self.linear.shape != (dim, dim) or self.shift.shape != (dim,):
            raise MalformedBodyError("Incompatible affine map shapes: linear {}, shift {}".format(self.linear.shape, self.shift.shape))

    def __repr__(self):
        return "AffineMap(dim={}, det={})".format(self.dim, self.determinant)

    @classmethod
    def identity(cls, dim: int) -> AffineMap:
        assert_positive_integer(dim, 'dim')
        return cls(np.eye(dim), np.zeros(dim))

    @property
    def dim(self) -> int:
        return self.linear.shape[0]

    @property
    def determinant(self) -> float:
        return float(np.linalg.det(self.linear))

    def __call__(self, X: np.ndarray) -> np.ndarray:
        """
        Applies the map to a point, or to each row of a matrix of points
        """
        return np.asarray(X, dtype=np.float64).dot(self.linear.T) + self.shift

    def inverse(self) -> AffineMap:
        """ x = L^-1 y - L^-1 s """
        L_inv = np.linalg.inv(self.linear)
        return AffineMap(L_inv, -L_inv.dot(self.shift))

    def compose(self, other: AffineMap) -> AffineMap:
        """
        :return: the map x -> self(other(x))
        """
        return AffineMap(self.linear.dot(other.linear), self.linear.dot(other.shift) + self.shift)


def random_rotation(dim: int, seed: Seed = None) -> AffineMap:
    """
    :return: a uniformly random rotation (orthogonal, determinant one) around the origin
    """
    assert_positive_integer(dim, 'dim')

    if dim == 1:
        return AffineMap.identity(1)

    Q = special_ortho_group.rvs(dim, random_state=get_random_state(seed))
    return AffineMap(Q, np.zeros(dim))
