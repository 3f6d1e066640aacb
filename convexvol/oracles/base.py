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

from typing import NamedTuple, Tuple

import numpy as np

from ..errors import DegenerateDirectionError


class Hit(NamedTuple):
    """
    Forward intersection of a ray 'x + t v' (t > 0) with the boundary of a convex body.
    """
    t: float
    normal: np.ndarray  # unit outward normal at x + t v


class BoundaryOracle:
    """
    Answers ray queries over a convex body. An oracle may cache working data about the current point of a random walk
    (e.g. 'A x' for polytopes, or the LMI value for spectrahedra), so each walk owns its own oracle instance.
    """

    def chord(self, x: np.ndarray, v: np.ndarray) -> Tuple[float, float]:
        """
        Computes the intersection of the line {x + t v} with the convex body.

        :param x: a point inside the body
        :param v: line direction. Does not need to be normalized.
        :return: t_minus < 0 < t_plus such that 'x + t v' is on the boundary for both values
        """
        raise NotImplementedError

    def coordinate_chord(self, x: np.ndarray, i: int) -> Tuple[float, float]:
        """
        Same as chord(), for the direction of the i-th canonical vector.
        """
        v = np.zeros_like(x)
        v[i] = 1.0
        return self.chord(x, v)

    def hit(self, x: np.ndarray, v: np.ndarray) -> Hit:
        """
        Computes the first intersection of the ray {x + t v, t > 0} with the boundary, plus the outward normal there.
        """
        raise NotImplementedError

    def advance(self, x_new: np.ndarray, t: float) -> None:
        """
        Notifies the oracle that the current point moved to 'x_new = x + t v', where 'v' is the last queried direction.
        """
        pass

    def reset(self) -> None:
        """
        Drops any cached quantity.
        """
        pass


def validate_chord(t_minus: float, t_plus: float) -> Tuple[float, float]:
    if not (np.isfinite(t_minus) and np.isfinite(t_plus)) or t_minus >= 0 or t_plus <= 0:
        raise DegenerateDirectionError("Line does not cross the boundary on both sides: ({}, {})".format(t_minus, t_plus))
    return float(t_minus), float(t_plus)


def validate_hit(t: float, normal: np.ndarray) -> Hit:
    if not np.isfinite(t) or t <= 0:
        raise DegenerateDirectionError("Ray does not cross the boundary: t = {}".format(t))

    norm = np.linalg.norm(normal)
    if not np.isfinite(norm) or norm == 0:
        raise DegenerateDirectionError("Could not compute boundary normal.")

    return Hit(float(t), normal / norm)


def reflect(v: np.ndarray, normal: np.ndarray) -> np.ndarray:
    """
    Elastic reflection of 'v' over the hyperplane orthogonal to the unit vector 'normal'.
    """
    return v - 2 * v.dot(normal) * normal
