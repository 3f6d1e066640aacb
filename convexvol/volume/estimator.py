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
import warnings
from concurrent.futures import ThreadPoolExecutor
from time import perf_counter
from typing import NamedTuple, List, Optional, Tuple, Union, TYPE_CHECKING

import numpy as np
from scipy.special import logsumexp
from scipy.stats import chi2

from .chain import VolumeChain, Phase
from ..bodies import Ball, BallIntersection
from ..errors import VolumeEstimationError
from ..rounding import RoundingAlgorithm, RoundingResult
from ..utils import assert_positive_integer, assert_non_negative_integer, assert_per_phase, get_random_state, spawn_seeds, metric_logger
from ..walks import GaussianHitAndRun, sample_points, default_walk_length

if TYPE_CHECKING:
    from ..bodies import ConvexBody
    from ..utils import Seed, PerPhase
    from ..walks import RandomWalk

logger = logging.getLogger(__name__)


def estimate_ratio(body: ConvexBody, inner: ConvexBody, walk: Optional[Union[str, RandomWalk]] = None,
                   n_samples: int = 1000, walk_length: Optional[int] = None, x0: Optional[np.ndarray] = None,
                   seed: Seed = None, burn_in: Optional[int] = None) -> float:
    """
    Estimates vol(inner) / vol(body) as the fraction of random samples of 'body' falling inside 'inner'. The inner body
    must be contained in 'body'.
    """
    samples = sample_points(body, n_samples, walk=walk, walk_length=walk_length, burn_in=burn_in, x0=x0, seed=seed)
    return float(np.mean(inner.is_inside(samples)))


def estimate_gaussian_ratio(body: ConvexBody, center: np.ndarray, a: float, a_next: float, n_samples: int = 1000,
                            walk_length: Optional[int] = None, x0: Optional[np.ndarray] = None, seed: Seed = None,
                            burn_in: Optional[int] = None) -> float:
    """
    Estimates Z(a) / Z(a_next), where Z(a) is the integral of exp(-a ||x - center||^2) over the body and a > a_next >= 0.
    Samples are drawn from the Gaussian of exponent 'a' restricted to the body, and Z(a_next) / Z(a) is the mean of the
    weights exp((a - a_next) ||x - center||^2).
    """
    if not a > a_next >= 0:
        raise ValueError("Expected a > a_next >= 0, got a = {}, a_next = {}".format(a, a_next))

    walk = GaussianHitAndRun(a, center)
    samples = sample_points(body, n_samples, walk=walk, walk_length=walk_length, burn_in=burn_in, x0=x0, seed=seed)

    log_weights = (a - a_next) * np.sum((samples - center) ** 2, axis=1)
    return float(np.exp(np.log(n_samples) - logsumexp(log_weights)))


class VolumeResult(NamedTuple):
    volume: float
    chain: VolumeChain
    rounding: Optional[RoundingResult]

    @property
    def ratios(self) -> List[float]:
        return self.chain.ratios


class PhaseOutcome(NamedTuple):
    ratio: Optional[float]
    attempts: int
    errors: List[str]
    elapsed: float


class VolumeEstimator:
    """
    Multiphase Monte Carlo volume estimator. The body is sandwiched between its inscribed ball B(c, r) and a sequence of
    growing intersections K ∩ B(c, r_i); the volume is the volume of the inscribed ball divided by the product of the
    ratios between consecutive bodies, each of which is estimated by random sampling.

    Two schedules are available for choosing the radii r_i:
        - 'balls': r_i = r 2^(i / d), until the body is reached. Every ratio is close to 1/2 for round bodies.
        - 'annealing': radii are computed adaptively, from the outermost body inwards, such that each new body keeps
          a fraction 'target_ratio' of the samples of the previous one.

    A third schedule, 'gaussian-cooling', replaces the bodies by Gaussian densities exp(-a ||x - c||^2) restricted to the
    body, for a decreasing sequence of exponents a_0 > ... > a_m = 0. Each phase samples one density with Gaussian
    hit-and-run and estimates the ratio of consecutive Gaussian integrals by importance reweighting.
    """

    # Gaussian mass allowed outside the inscribed ball at the first cooling phase
    GAUSSIAN_TAIL = 1e-3

    def __init__(self, walk: Optional[Union[str, RandomWalk]] = None, n_samples: PerPhase = 1000,
                 walk_length: Optional[PerPhase] = None, schedule: str = 'balls', target_ratio: float = 0.5,
                 rounding: Optional[Union[bool, RoundingAlgorithm]] = None, n_jobs: int = 1,
                 max_phase_retries: int = 3, burn_in: Optional[int] = None, seed: Seed = None):
        """
        :param walk: random walk (or its name) used for sampling. If None, a default walk is picked for each body.
        :param n_samples: number of samples per phase, or a sequence of values (one per phase; the last value is reused
        for any remaining phases)
        :param walk_length: walk length per phase, as above. Defaults to 10 + d // 10.
        :param schedule: one of 'balls', 'annealing' or 'gaussian-cooling'
        :param target_ratio: expected ratio between consecutive bodies. Only affects the 'annealing' schedule.
        :param rounding: rounding algorithm applied before sampling. If True, the default RoundingAlgorithm is used.
        :param n_jobs: number of threads used for running independent phases
        :param max_phase_retries: number of times a failed phase is re-run with a fresh random stream
        :param burn_in: number of discarded initial steps of each chain
        :param seed: random seed used by estimate() when it is called without one
        """
        assert_per_phase(n_samples, 'n_samples')
        if walk_length is not None:
            assert_per_phase(walk_length, 'walk_length')
        assert_positive_integer(n_jobs, 'n_jobs')
        assert_non_negative_integer(max_phase_retries, 'max_phase_retries')
        assert_non_negative_integer(burn_in, 'burn_in', allow_none=True)

        if not 0 < target_ratio < 1:
            raise ValueError("Expected 0 < target_ratio < 1, got {}".format(target_ratio))

        self.walk = walk
        self.n_samples = n_samples
        self.walk_length = walk_length
        self.schedule = self.__get_schedule(schedule)
        self.target_ratio = target_ratio
        self.rounding = RoundingAlgorithm() if rounding is True else (rounding or None)
        self.n_jobs = n_jobs
        self.max_phase_retries = max_phase_retries
        self.burn_in = burn_in
        self.seed = seed

        if self.schedule == 'GAUSSIAN-COOLING' and walk is not None:
            raise ValueError("The 'gaussian-cooling' schedule always samples with Gaussian hit-and-run, so 'walk' must be None.")

    @staticmethod
    def __get_schedule(schedule: str) -> str:
        key = schedule.upper().replace('_', '-')
        if key in ('BALLS', 'ANNEALING', 'GAUSSIAN-COOLING'):
            return key
        raise ValueError("Unknown schedule {}. Possible values are: 'balls', 'annealing', 'gaussian-cooling'.".format(schedule))

    @metric_logger.log_execution_time('volume_time', on_duplicates='sum')
    def estimate(self, body: ConvexBody, seed: Seed = None) -> VolumeResult:
        """
        Estimates the volume of a convex body.

        :param body: convex body
        :param seed: random seed or RandomState. The result is reproducible for a given seed, no matter the number of jobs.
        If None, the estimator's own seed is used.
        :return: a VolumeResult object, containing the estimate and the per-phase diagnostics
        """
        rng = get_random_state(self.seed if seed is None else seed)

        rounding_result = None
        if self.rounding is not None:
            rounding_result = self.rounding.fit(body, seed=rng)
            body = rounding_result.body
            logger.info("Rounding finished: round value = %g, axis ratio = %.4f", rounding_result.round_value, rounding_result.minmax_ratio)

        center, radius = body.inner_ball()
        outer = body.outer_radius(center, seed=rng)
        logger.info("Inner radius = %g, outer radius = %g", radius, outer)

        if self.schedule == 'GAUSSIAN-COOLING':
            chain = self.__build_cooling_chain(body, radius, outer)
        else:
            anchor = Ball(center, radius)
            chain = VolumeChain(anchor.volume)

            if self.schedule == 'BALLS':
                self.__add_ball_phases(chain, body, anchor, outer)
            else:
                self.__add_annealing_phases(chain, body, anchor, outer, rng)

        self.__run_phases(chain, center, rng)

        volume = chain.finalize()
        if rounding_result is not None:
            volume /= rounding_result.round_value

        metric_logger.log_metric('volume_phases', len(chain))
        return VolumeResult(volume, chain, rounding_result)

    def __add_ball_phases(self, chain: VolumeChain, body: ConvexBody, anchor: Ball, outer: float) -> None:
        inner = anchor  # type: ConvexBody
        dim = body.dim

        # radii within rounding error of the outer radius already cover the body
        i = 1
        while anchor.radius * 2 ** (i / dim) < (1 - 1e-9) * outer:
            current = BallIntersection(body, anchor.center, anchor.radius * 2 ** (i / dim), inner_radius=anchor.radius)
            self.__add_phase(chain, current, inner)
            inner, i = current, i + 1

        self.__add_phase(chain, body, inner)

    def __add_annealing_phases(self, chain: VolumeChain, body: ConvexBody, anchor: Ball, outer: float, rng: np.random.RandomState) -> None:
        """
        Builds the sequence of bodies from the outermost inwards. At each step, the current body is sampled and the next
        radius is the 'target_ratio' quantile of the distances between the samples and the center.
        """
        dim = body.dim
        shrink = self.target_ratio ** (1 / dim)
        max_phases = int(np.ceil(dim * np.log(outer / anchor.radius) / -np.log(self.target_ratio))) + 10 * dim

        nested = [body]  # type: List[ConvexBody]
        current, current_radius = body, outer

        while True:
            if len(nested) > max_phases:
                raise VolumeEstimationError("Annealing schedule did not reach the inner ball after {} phases.".format(max_phases))

            k = len(nested) - 1
            samples = sample_points(current, self.__per_phase(self.n_samples, k), walk=self.walk,
                                    walk_length=self.__walk_length(dim, k), burn_in=self.burn_in, x0=anchor.center, seed=rng)

            radius = float(np.quantile(np.linalg.norm(samples - anchor.center, axis=1), self.target_ratio))
            radius = min(radius, shrink * current_radius)

            if radius <= anchor.radius:
                break

            current = BallIntersection(body, anchor.center, radius, inner_radius=anchor.radius)
            current_radius = radius
            nested.append(current)

        nested.append(anchor)
        nested.reverse()

        for i in range(1, len(nested)):
            target = None if i == 1 else self.target_ratio
            self.__add_phase(chain, nested[i], nested[i - 1], target)

        logger.info("Annealing schedule built with %d phases.", len(chain))

    def __build_cooling_chain(self, body: ConvexBody, radius: float, outer: float) -> VolumeChain:
        """
        The first exponent a_0 leaves a mass below GAUSSIAN_TAIL outside the inscribed ball B(c, r), so Z(a_0) is the
        integral over the whole space (pi / a_0)^(d / 2). Exponents then decrease geometrically by a factor
        max(1 - 1 / sqrt(d), 1 / 2) until a R^2 <= 1, where the last phase jumps to the uniform distribution (a = 0).
        """
        dim = body.dim
        a = float(chi2.ppf(1 - self.GAUSSIAN_TAIL, dim)) / (2 * radius ** 2)
        factor = max(1 - 1 / np.sqrt(dim), 0.5)

        exponents = [a]
        while exponents[-1] * outer ** 2 > 1:
            exponents.append(factor * exponents[-1])
        exponents.append(0.0)

        chain = VolumeChain((np.pi / a) ** (dim / 2))
        for a_i, a_next in zip(exponents[:-1], exponents[1:]):
            self.__add_phase(chain, body, None, exponents=(a_i, a_next))

        logger.info("Gaussian cooling schedule built with %d phases (a_0 = %g).", len(chain), a)
        return chain

    def __add_phase(self, chain: VolumeChain, current: ConvexBody, inner: Optional[ConvexBody],
                    target_ratio: Optional[float] = None, exponents: Optional[Tuple[float, float]] = None) -> None:
        k = len(chain)
        chain.add_phase(current, inner, self.__per_phase(self.n_samples, k), self.__walk_length(current.dim, k),
                        target_ratio, exponents)

    def __walk_length(self, dim: int, k: int) -> int:
        if self.walk_length is None:
            return default_walk_length(dim)
        return self.__per_phase(self.walk_length, k)

    @staticmethod
    def __per_phase(value: PerPhase, k: int) -> int:
        if isinstance(value, (list, tuple)):
            return value[min(k, len(value) - 1)]
        return value

    def __run_phases(self, chain: VolumeChain, center: np.ndarray, rng: np.random.RandomState) -> None:
        pending = chain.pending
        seeds = spawn_seeds(rng, len(pending))  # drawn up front, so results do not depend on the execution order
        phases = [chain.phases[i] for i in pending]

        if self.n_jobs == 1:
            outcomes = [self._run_phase(phase, center, seed) for phase, seed in zip(phases, seeds)]
        else:
            with ThreadPoolExecutor(max_workers=self.n_jobs) as executor:
                outcomes = list(executor.map(lambda args: self._run_phase(*args), zip(phases, [center] * len(phases), seeds)))

        for index, outcome in zip(pending, outcomes):
            for error in outcome.errors:
                warnings.warn("Phase {} failed ({}). Retrying with a fresh random stream.".format(index, error), RuntimeWarning)

            if outcome.ratio is None:
                raise VolumeEstimationError("Phase {} failed after {} attempts.".format(index, outcome.attempts))

            chain.record_ratio(index, outcome.ratio, outcome.attempts)
            metric_logger.log_metrics({'phase_ratios': outcome.ratio, 'phase_time': outcome.elapsed}, on_duplicates='append')
            logger.info("Phase %d: ratio = %.5f (%d attempts, %.2fs)", index, outcome.ratio, outcome.attempts, outcome.elapsed)

    def _run_phase(self, phase: Phase, center: np.ndarray, seed: int) -> PhaseOutcome:
        """
        Estimates the ratio of a single phase. This method runs inside worker threads, so it must not write to any
        shared state (metrics included): all errors are reported back to the coordinating thread.
        """
        t0 = perf_counter()
        seeds = [seed] + spawn_seeds(get_random_state(seed), self.max_phase_retries)
        errors = []  # type: List[str]

        for attempt, phase_seed in enumerate(seeds, start=1):
            try:
                ratio = self.__estimate_phase_ratio(phase, center, phase_seed)
            except (ArithmeticError, np.linalg.LinAlgError) as e:
                errors.append("{}: {}".format(type(e).__name__, e))
                continue

            if np.isfinite(ratio) and ratio > 0:
                return PhaseOutcome(ratio, attempt, errors, perf_counter() - t0)

            errors.append("invalid ratio {}".format(ratio))

        return PhaseOutcome(None, len(seeds), errors, perf_counter() - t0)

    def __estimate_phase_ratio(self, phase: Phase, center: np.ndarray, seed: int) -> float:
        if phase.exponents is not None:
            a, a_next = phase.exponents
            return estimate_gaussian_ratio(phase.body, center, a, a_next, n_samples=phase.n_samples,
                                           walk_length=phase.walk_length, x0=center, seed=seed, burn_in=self.burn_in)

        return estimate_ratio(phase.body, phase.inner, walk=self.walk, n_samples=phase.n_samples,
                              walk_length=phase.walk_length, x0=center, seed=seed, burn_in=self.burn_in)
