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
from typing import NamedTuple, Optional, Union, TYPE_CHECKING

import numpy as np

from .ellipsoid import RoundingEllipsoid, minimum_volume_ellipsoid, covariance_ellipsoid
from .transform import AffineMap, random_rotation
from ..bodies import VPolytope
from ..utils import assert_positive, assert_positive_integer, get_random_state, metric_logger
from ..walks import sample_points

if TYPE_CHECKING:
    from ..bodies import ConvexBody
    from ..utils import Seed
    from ..walks import RandomWalk

logger = logging.getLogger(__name__)


class RoundingResult(NamedTuple):
    body: ConvexBody               # rounded body
    transform: AffineMap           # map from the original body to the rounded one
    round_value: float             # |det L| of the transform, so that vol(original) = vol(rounded) / round_value
    minmax_ratio: float            # axis ratio of the last ellipsoid computed
    iterations: int                # number of transformations applied
    converged: bool


class RoundingAlgorithm:
    """
    Iteratively maps a convex body towards isotropic position. At each iteration, the body's shape is approximated by an
    ellipsoid (computed from random samples of the body), which is then mapped onto the unit ball. The procedure stops
    once the ellipsoid is close enough to a ball.
    """

    def __init__(self, strategy: str = 'mvee', max_iter: int = 10, ratio_threshold: float = 2.0,
                 n_samples: Optional[int] = None, walk: Optional[Union[str, RandomWalk]] = None,
                 walk_length: Optional[int] = None, rotate: bool = False):
        """
        :param strategy: ellipsoid estimation strategy. Available options are: 'mvee' (minimum volume enclosing
        ellipsoid of the samples) and 'covariance' (scaled sample covariance)
        :param max_iter: maximum number of rounding iterations
        :param ratio_threshold: stop once the ratio between the largest and smallest ellipsoid axes falls below this value
        :param n_samples: number of samples per iteration. Defaults to 20 d.
        :param walk: random walk used for sampling (or its name)
        :param walk_length: walk length used for sampling
        :param rotate: whether to apply a uniformly random rotation before rounding
        """
        assert_positive_integer(max_iter, 'max_iter')
        assert_positive(ratio_threshold, 'ratio_threshold')
        assert_positive_integer(n_samples, 'n_samples', allow_none=True)

        if ratio_threshold < 1:
            raise ValueError("Expected ratio_threshold >= 1, got {}".format(ratio_threshold))

        self.strategy = strategy
        self.estimator = self.__get_estimator(strategy)
        self.max_iter = max_iter
        self.ratio_threshold = ratio_threshold
        self.n_samples = n_samples
        self.walk = walk
        self.walk_length = walk_length
        self.rotate = rotate

    def __repr__(self):
        return "RoundingAlgorithm(strategy={}, max_iter={}, ratio_threshold={})".format(self.strategy, self.max_iter, self.ratio_threshold)

    @staticmethod
    def __get_estimator(strategy: str):
        strategy = strategy.upper()
        if strategy == 'MVEE':
            return minimum_volume_ellipsoid
        if strategy == 'COVARIANCE':
            return covariance_ellipsoid
        raise ValueError("Unknown strategy {}. Possible values are: 'mvee', 'covariance'.".format(strategy))

    @metric_logger.log_execution_time('rounding_fit_time', on_duplicates='sum')
    def fit(self, body: ConvexBody, seed: Seed = None) -> RoundingResult:
        """
        Computes a rounded version of the body. The input body is not modified.
        """
        rng = get_random_state(seed)

        total = AffineMap.identity(body.dim)
        if self.rotate:
            total = random_rotation(body.dim, rng)
            body = body.transform(total)

        count, ratio, converged = 0, np.inf, False
        for _ in range(self.max_iter):
            elp = self.__compute_ellipsoid(body, rng)
            ratio = elp.axis_ratio
            logger.info("Rounding iteration %d: axis ratio = %.4f", count, ratio)

            if ratio <= self.ratio_threshold:
                converged = True
                break

            amap = elp.to_unit_ball()
            body = body.transform(amap)
            total = amap.compose(total)
            count += 1

        if not converged and count > 0:
            # the last transform was not measured yet
            ratio = self.__compute_ellipsoid(body, rng).axis_ratio
            converged = ratio <= self.ratio_threshold

        if not converged:
            logger.info("Rounding did not converge after %d iterations (last axis ratio = %.4f)", self.max_iter, ratio)

        metric_logger.log_metric('rounding_iters', count, on_duplicates='append')

        return RoundingResult(
            body=body,
            transform=total,
            round_value=abs(total.determinant),
            minmax_ratio=ratio,
            iterations=count,
            converged=converged,
        )

    def __compute_ellipsoid(self, body: ConvexBody, rng: np.random.RandomState) -> RoundingEllipsoid:
        if isinstance(body, VPolytope) and self.strategy.upper() == 'MVEE':
            return minimum_volume_ellipsoid(body.vertices)

        n_samples = self.n_samples if self.n_samples is not None else 20 * body.dim
        points = sample_points(body, n_samples, walk=self.walk, walk_length=self.walk_length, seed=rng)
        return self.estimator(points)
