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

from .base import BoundaryOracle, Hit, validate_chord


class IntersectionOracle(BoundaryOracle):
    """
    Boundary oracle of the intersection of two convex bodies, built from the oracles of each body.
    """

    def __init__(self, first: BoundaryOracle, second: BoundaryOracle):
        self.first = first
        self.second = second

    def chord(self, x: np.ndarray, v: np.ndarray) -> Tuple[float, float]:
        lower_first, upper_first = self.first.chord(x, v)
        lower_second, upper_second = self.second.chord(x, v)
        return validate_chord(max(lower_first, lower_second), min(upper_first, upper_second))

    def coordinate_chord(self, x: np.ndarray, i: int) -> Tuple[float, float]:
        lower_first, upper_first = self.first.coordinate_chord(x, i)
        lower_second, upper_second = self.second.coordinate_chord(x, i)
        return validate_chord(max(lower_first, lower_second), min(upper_first, upper_second))

    def hit(self, x: np.ndarray, v: np.ndarray) -> Hit:
        hit_first = self.first.hit(x, v)
        hit_second = self.second.hit(x, v)
        return hit_first if hit_first.t <= hit_second.t else hit_second

    def advance(self, x_new: np.ndarray, t: float) -> None:
        self.first.advance(x_new, t)
        self.second.advance(x_new, t)

    def reset(self) -> None:
        self.first.reset()
        self.second.reset()
