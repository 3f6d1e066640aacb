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
from typing import Optional, Tuple, Union, TYPE_CHECKING

import numpy as np

from .ball_walk import BallWalk
from .base import RandomWalk, WalkState
from .billiard import BilliardWalk
from .hit_and_run import CoordinateHitAndRun, RandomDirectionHitAndRun, GaussianHitAndRun
from .hmc import HamiltonianReflectiveWalk
from ..bodies import HPolytope
from ..errors import InfeasibleSeedError
from ..utils import assert_positive_integer, assert_non_negative_integer, get_random_state

if TYPE_CHECKING:
    from ..bodies import ConvexBody
    from ..utils import Seed

logger = logging.getLogger(__name__)


def get_walk(name: str, **params) -> RandomWalk:
    """
    Builds a random walk from its name.

    :param name: one of 'coordinate-hit-and-run', 'random-hit-and-run', 'gaussian-hit-and-run', 'ball-walk',
    'billiard-walk' and 'hamiltonian-reflective' (case insensitive; '_' can be used instead of '-')
    :param params: parameters of the walk's constructor
    """
    key = name.upper().replace('_', '-')

    if key == 'COORDINATE-HIT-AND-RUN':
        return CoordinateHitAndRun(**params)
    if key == 'RANDOM-HIT-AND-RUN':
        return RandomDirectionHitAndRun(**params)
    if key == 'GAUSSIAN-HIT-AND-RUN':
        return GaussianHitAndRun(**params)
    if key == 'BALL-WALK':
        return BallWalk(**params)
    if key == 'BILLIARD-WALK':
        return BilliardWalk(**params)
    if key == 'HAMILTONIAN-REFLECTIVE':
        return HamiltonianReflectiveWalk(**params)

    raise ValueError("Unknown walk {}. Possible values are: 'coordinate-hit-and-run', 'random-hit-and-run', "
                     "'gaussian-hit-and-run', 'ball-walk', 'billiard-walk', 'hamiltonian-reflective'.".format(name))


def default_walk(body: ConvexBody) -> RandomWalk:
    """
    Coordinate directions are only cheap for H-polytopes, where a single column of the constraints matrix is needed.
    """
    return CoordinateHitAndRun() if isinstance(body, HPolytope) else RandomDirectionHitAndRun()


def default_walk_length(dim: int) -> int:
    return 10 + dim // 10


def sample_chain(body: ConvexBody, walk: RandomWalk, x0: np.ndarray, rng: np.random.RandomState, n_samples: int,
                 walk_length: int, burn_in: int) -> Tuple[np.ndarray, WalkState]:
    """
    Runs a single Markov chain. After 'burn_in' initial steps, one sample is kept every 'walk_length' steps.

    :return: the samples (one per row) and the final state of the chain
    """
    state = walk.start(body, x0, rng)
    walk.advance(body, state, burn_in)

    samples = np.empty((n_samples, body.dim))
    for i in range(n_samples):
        walk.advance(body, state, walk_length)
        samples[i] = state.point

    return samples, state


def sample_points(body: ConvexBody, n_samples: int, walk: Optional[Union[str, RandomWalk]] = None,
                  walk_length: Optional[int] = None, burn_in: Optional[int] = None, x0: Optional[np.ndarray] = None,
                  seed: Seed = None) -> np.ndarray:
    """
    Samples points from a convex body with a random walk.

    :param body: convex body
    :param n_samples: number of samples
    :param walk: random walk or its name. Defaults to coordinate hit-and-run for H-polytopes, and random-direction
    hit-and-run for all other bodies.
    :param walk_length: number of walk steps between two samples. Defaults to 10 + d // 10.
    :param burn_in: number of initial steps to discard. Defaults to d * walk_length.
    :param x0: starting point, which must be strictly inside the body. Defaults to the body's interior point.
    :param seed: random seed or RandomState
    :return: samples in a numpy array (one per row)
    """
    assert_positive_integer(n_samples, 'n_samples')
    assert_positive_integer(walk_length, 'walk_length', allow_none=True)
    assert_non_negative_integer(burn_in, 'burn_in', allow_none=True)

    if walk is None:
        walk = default_walk(body)
    elif isinstance(walk, str):
        walk = get_walk(walk)

    if walk_length is None:
        walk_length = default_walk_length(body.dim)

    if burn_in is None:
        burn_in = body.dim * walk_length

    x0 = body.interior_point() if x0 is None else np.array(x0, dtype=np.float64)
    if not body.is_well_inside(x0):
        raise InfeasibleSeedError("Starting point {} is not strictly inside the body.".format(x0))

    samples, state = sample_chain(body, walk, x0, get_random_state(seed), n_samples, walk_length, burn_in)
    logger.debug("%s finished: %s", walk, state)

    return samples
