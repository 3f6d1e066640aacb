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
from typing import Optional, Tuple, TYPE_CHECKING

import numpy as np

from ..errors import DegenerateDirectionError
from ..oracles import reflect
from ..utils import assert_positive_integer, random_direction

if TYPE_CHECKING:
    from ..bodies import ConvexBody
    from ..oracles import BoundaryOracle

logger = logging.getLogger(__name__)

# fraction of the distance to the boundary travelled when a walk stops at the boundary
BOUNDARY_SHRINK = 0.995


class WalkState:
    """
    Working state of a single Markov chain. The oracle and random stream are private to the chain, so independent
    chains can be run concurrently over the same body.
    """

    def __init__(self, point: np.ndarray, oracle: BoundaryOracle, rng: np.random.RandomState):
        self.point = point
        self.direction = None  # type: Optional[np.ndarray]
        self.oracle = oracle
        self.rng = rng

        self.steps = 0
        self.rejections = 0
        self.resnaps = 0

        # last point which passed the membership check
        self.checkpoint = point.copy()

        # walk-specific data
        self.coordinate = 0
        self.momentum = None  # type: Optional[np.ndarray]
        self.delta = None  # type: Optional[float]
        self.trajectory_length = None  # type: Optional[float]
        self.center = None  # type: Optional[np.ndarray]
        self.max_reflections = None  # type: Optional[int]

    def __repr__(self):
        return "WalkState(steps={}, rejections={}, resnaps={})".format(self.steps, self.rejections, self.resnaps)

    @property
    def dim(self) -> int:
        return len(self.point)


class RandomWalk:
    """
    Base class for all random walks over convex bodies. Subclasses only need to implement a single move in the 'step'
    method; the shared 'advance' driver takes care of recovering from degenerate oracle queries and of detecting the
    numerical drift of the current point outside the body.
    """

    def __init__(self, check_every: int = 100, max_retries: int = 10):
        """
        :param check_every: number of steps between two membership tests of the current point
        :param max_retries: number of fresh directions to try after a degenerate oracle query before giving up the step
        """
        assert_positive_integer(check_every, 'check_every')
        assert_positive_integer(max_retries, 'max_retries')

        self.check_every = check_every
        self.max_retries = max_retries

    def __repr__(self):
        return "{}()".format(type(self).__name__)

    def start(self, body: ConvexBody, x0: np.ndarray, rng: np.random.RandomState) -> WalkState:
        state = WalkState(np.array(x0, dtype=np.float64), body.boundary_oracle(), rng)
        self._initialize(body, state)
        return state

    def _initialize(self, body: ConvexBody, state: WalkState) -> None:
        pass

    def step(self, body: ConvexBody, state: WalkState) -> None:
        """
        Moves the chain one step. Implementations must only update 'state.point' after all oracle queries succeeded.
        """
        raise NotImplementedError

    def advance(self, body: ConvexBody, state: WalkState, n_steps: int) -> None:
        for _ in range(n_steps):
            self.__safe_step(body, state)
            state.steps += 1

            if state.steps % self.check_every == 0:
                self.__check_drift(body, state)

    def __safe_step(self, body: ConvexBody, state: WalkState) -> None:
        for _ in range(self.max_retries):
            try:
                self.step(body, state)
                return
            except DegenerateDirectionError:
                state.oracle.reset()

        logger.debug("Could not find a non-degenerate direction after %d retries.", self.max_retries)
        state.rejections += 1

    def __check_drift(self, body: ConvexBody, state: WalkState) -> None:
        if body.is_inside(state.point):
            state.checkpoint = state.point.copy()
            return

        state.resnaps += 1
        state.oracle.reset()

        x = state.checkpoint
        v = state.direction if state.direction is not None else random_direction(state.dim, state.rng)

        # the drifted point is moved to the closest point of the chord through the checkpoint, kept slightly inside
        try:
            t1, t2 = state.oracle.chord(x, v)
            s = (state.point - x).dot(v) / v.dot(v)
            state.point = x + np.clip(s, BOUNDARY_SHRINK * t1, BOUNDARY_SHRINK * t2) * v
        except DegenerateDirectionError:
            state.point = x.copy()

        state.oracle.reset()
        logger.debug("Point drifted outside the body, re-snapped to %s", state.point)


def reflective_path(oracle: BoundaryOracle, x: np.ndarray, v: np.ndarray, length: float,
                    max_reflections: int, shrink: float = BOUNDARY_SHRINK) -> Optional[Tuple[np.ndarray, np.ndarray]]:
    """
    Moves a point along a straight line, reflecting it on the boundary of the body every time it is hit.

    :param oracle: boundary oracle of the body
    :param x: starting point
    :param v: unit direction
    :param length: total path length
    :param max_reflections: maximum number of reflections
    :param shrink: before each reflection, the point stops at 'shrink * t_hit' in order to stay inside the body
    :return: final point and direction, or None if the path needs more than 'max_reflections' reflections
    """
    remaining = length

    for _ in range(max_reflections + 1):
        t, normal = oracle.hit(x, v)

        if remaining <= t:
            x = x + remaining * v
            oracle.advance(x, remaining)
            return x, v

        s = shrink * t
        x = x + s * v
        oracle.advance(x, s)

        remaining -= t
        v = reflect(v, normal)

    return None
