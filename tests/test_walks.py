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

import numpy as np
import pytest
from scipy.stats import kstest

from convexvol.bodies import HPolytope, VPolytope, Spectrahedron, Ball
from convexvol.errors import InfeasibleSeedError, DegenerateDirectionError
from convexvol.oracles import HalfspaceOracle
from convexvol.volume import estimate_ratio
from convexvol.walks import (
    RandomWalk, CoordinateHitAndRun, RandomDirectionHitAndRun, GaussianHitAndRun, BallWalk, BilliardWalk,
    HamiltonianReflectiveWalk, get_walk, sample_points, default_walk_length
)


def cube(dim, half_width=1.0):
    return HPolytope(np.vstack([np.eye(dim), -np.eye(dim)]), half_width * np.ones(2 * dim))


def simplex():
    return HPolytope([[-1, 0], [0, -1], [1, 1]], [0, 0, 1])


class JumpOutsideWalk(RandomWalk):
    """ Moves the chain to a point outside the body at every step """

    def step(self, body, state):
        state.point = state.point + 10
        state.direction = np.eye(state.dim)[0]


class FlakyOracle(HalfspaceOracle):
    """ Fails every other chord query """

    def __init__(self, A, b):
        super().__init__(A, b)
        self.calls = 0

    def chord(self, x, v):
        self.calls += 1
        if self.calls % 2 == 1:
            raise DegenerateDirectionError("tangent direction")
        return super().chord(x, v)


class FlakyCube(HPolytope):
    def boundary_oracle(self):
        return FlakyOracle(self.A, self.b)


class TestHitAndRun:
    @pytest.mark.parametrize('walk', ['coordinate-hit-and-run', 'random-hit-and-run'])
    def test_first_coordinate_of_simplex_samples_follows_marginal_law(self, walk):
        samples = sample_points(simplex(), 2000, walk=walk, walk_length=20, seed=0)

        # for the uniform distribution over {x, y >= 0, x + y <= 1}, P(x <= s) = 1 - (1 - s)^2
        result = kstest(samples[:, 0], lambda s: 1 - (1 - np.clip(s, 0, 1)) ** 2)
        assert result.pvalue > 1e-3

    @pytest.mark.parametrize('walk', [CoordinateHitAndRun(), CoordinateHitAndRun(cycle=False), RandomDirectionHitAndRun()])
    def test_samples_are_inside_body(self, walk):
        body = cube(4)
        samples = sample_points(body, 200, walk=walk, seed=1)

        assert samples.shape == (200, 4)
        assert np.all(body.is_inside(samples))

    def test_same_seed_gives_same_samples(self):
        first = sample_points(cube(3), 50, seed=10)
        second = sample_points(cube(3), 50, seed=10)
        third = sample_points(cube(3), 50, seed=11)

        np.testing.assert_array_equal(first, second)
        assert not np.array_equal(first, third)

    def test_samples_from_v_polytope(self):
        body = VPolytope([[0, 0], [1, 0], [0, 1]])
        samples = sample_points(body, 100, walk='random-hit-and-run', seed=2)

        assert np.all(body.is_inside(samples, tol=1e-7))

    def test_samples_from_spectrahedron(self):
        body = Spectrahedron([np.eye(2), np.diag([1.0, -1.0]), np.array([[0.0, 1.0], [1.0, 0.0]])])
        samples = sample_points(body, 1000, walk='random-hit-and-run', seed=3)

        assert np.all(np.linalg.norm(samples, axis=1) <= 1 + 1e-9)
        np.testing.assert_allclose(samples.mean(axis=0), np.zeros(2), atol=0.1)


class TestGaussianHitAndRun:
    def test_samples_follow_gaussian_law_far_from_boundary(self):
        # sigma^2 = 1 / 2a = 1, and the box boundary is 10 sigmas away
        walk = GaussianHitAndRun(0.5, center=np.zeros(2))
        samples = sample_points(cube(2, 10), 3000, walk=walk, walk_length=10, seed=0)

        np.testing.assert_allclose(samples.mean(axis=0), [0, 0], atol=0.15)
        np.testing.assert_allclose(samples.var(axis=0), [1, 1], rtol=0.2)

    def test_samples_concentrate_around_center(self):
        body = cube(3)
        samples = sample_points(body, 500, walk=GaussianHitAndRun(50.0, center=[0.5, 0, 0]), seed=1)

        assert body.is_inside(samples).all()
        np.testing.assert_allclose(samples.mean(axis=0), [0.5, 0, 0], atol=0.05)

    def test_zero_exponent_is_uniform(self):
        samples = sample_points(simplex(), 2000, walk=GaussianHitAndRun(0.0), walk_length=20, seed=0)

        result = kstest(samples[:, 0], lambda s: 1 - (1 - np.clip(s, 0, 1)) ** 2)
        assert result.pvalue > 1e-3

    def test_default_center_is_interior_point(self):
        body = cube(2)
        state = GaussianHitAndRun(1.0).start(body, np.zeros(2), np.random.RandomState(0))

        np.testing.assert_allclose(state.center, body.interior_point())

    def test_center_with_wrong_dimension_raises_error(self):
        with pytest.raises(ValueError):
            GaussianHitAndRun(1.0, center=[0, 0, 0]).start(cube(2), np.zeros(2), np.random.RandomState(0))

    def test_negative_exponent_raises_error(self):
        with pytest.raises(ValueError):
            GaussianHitAndRun(-1.0)


class TestBallWalk:
    def test_samples_are_inside_body(self):
        body = cube(3)
        samples = sample_points(body, 200, walk=BallWalk(delta=0.5), seed=0)

        assert np.all(body.is_inside(samples))

    def test_large_radius_causes_rejections(self):
        body = cube(2)
        walk = BallWalk(delta=10)
        state = walk.start(body, np.zeros(2), np.random.RandomState(0))

        walk.advance(body, state, 100)

        assert state.rejections > 50
        assert state.steps == 100

    def test_default_radius_depends_on_inner_ball(self):
        body = cube(4)
        state = BallWalk().start(body, np.zeros(4), np.random.RandomState(0))

        assert state.delta == pytest.approx(4 * 1 / 2)

    def test_negative_radius_raises_error(self):
        with pytest.raises(ValueError):
            BallWalk(delta=-1)

    def test_reproduces_ball_volume_ratio(self):
        dim = 5
        inner = Ball(np.zeros(dim), 0.5 ** (1 / dim))

        ratio = estimate_ratio(Ball(np.zeros(dim), 1), inner, walk=BallWalk(delta=0.5), n_samples=10000, walk_length=30, seed=0)

        assert ratio == pytest.approx(0.5, rel=0.05)


class TestBilliardWalk:
    def test_samples_are_inside_body(self):
        body = cube(3)
        samples = sample_points(body, 200, walk=BilliardWalk(), seed=0)

        assert np.all(body.is_inside(samples, tol=1e-9))

    def test_reproduces_ball_volume_ratio(self):
        dim = 5
        inner = Ball(np.zeros(dim), 0.5 ** (1 / dim))

        ratio = estimate_ratio(Ball(np.zeros(dim), 1), inner, walk=BilliardWalk(), n_samples=10000, walk_length=2, seed=0)

        assert ratio == pytest.approx(0.5, rel=0.05)

    def test_exceeding_reflection_cap_keeps_point(self):
        body = cube(2)
        walk = BilliardWalk(trajectory_length=1e6, max_reflections=1)
        state = walk.start(body, np.zeros(2), np.random.RandomState(0))

        walk.advance(body, state, 10)

        assert state.rejections == 10
        np.testing.assert_array_equal(state.point, np.zeros(2))

    def test_default_parameters(self):
        state = BilliardWalk().start(cube(4), np.zeros(4), np.random.RandomState(0))

        assert state.trajectory_length == pytest.approx(6 * 2 * 1)
        assert state.max_reflections == 400


class TestHamiltonianReflectiveWalk:
    @pytest.mark.parametrize('temperature', [1.0, 0.5])
    def test_mean_of_boltzmann_distribution_over_interval(self, temperature):
        interval = HPolytope([[1], [-1]], [1, 1])
        walk = HamiltonianReflectiveWalk([1.0], temperature=temperature)

        samples = sample_points(interval, 4000, walk=walk, walk_length=5, seed=0)

        # for the density exp(-a x) over [-1, 1], the mean is 1/a - coth(a)
        a = 1 / temperature
        assert samples.mean() == pytest.approx(1 / a - 1 / np.tanh(a), abs=0.05)
        assert np.all(np.abs(samples) <= 1)

    def test_objective_dimension_mismatch_raises_error(self):
        walk = HamiltonianReflectiveWalk([1.0, 1.0, 1.0])

        with pytest.raises(ValueError):
            walk.start(cube(2), np.zeros(2), np.random.RandomState(0))

    def test_invalid_temperature_raises_error(self):
        with pytest.raises(ValueError):
            HamiltonianReflectiveWalk([1.0], temperature=0)


class TestRandomWalkDriver:
    def test_drifted_point_is_snapped_back_inside(self):
        body = cube(2)
        walk = JumpOutsideWalk(check_every=1)
        state = walk.start(body, np.zeros(2), np.random.RandomState(0))

        walk.advance(body, state, 3)

        assert state.resnaps == 3
        assert body.is_inside(state.point)

    def test_drifted_point_is_snapped_to_chord_end(self):
        body = cube(2)
        walk = JumpOutsideWalk(check_every=1)
        state = walk.start(body, np.zeros(2), np.random.RandomState(0))

        walk.advance(body, state, 1)

        # chord through the origin along the first axis is [-1, 1]
        np.testing.assert_allclose(state.point, [0.995, 0])

    def test_degenerate_directions_are_resampled(self):
        body = FlakyCube(np.vstack([np.eye(2), -np.eye(2)]), np.ones(4))
        walk = RandomDirectionHitAndRun()
        state = walk.start(body, np.zeros(2), np.random.RandomState(0))

        walk.advance(body, state, 20)

        assert state.oracle.calls == 40
        assert state.rejections == 0
        assert body.is_inside(state.point)

    def test_persistent_degenerate_directions_count_as_rejections(self):
        body = FlakyCube(np.vstack([np.eye(2), -np.eye(2)]), np.ones(4))
        walk = RandomDirectionHitAndRun(max_retries=1)
        state = walk.start(body, np.zeros(2), np.random.RandomState(0))

        walk.advance(body, state, 4)

        # odd calls fail, and a single try is allowed per step
        assert state.rejections == 2
        assert body.is_inside(state.point)

    def test_step_counter(self):
        body = cube(2)
        walk = RandomDirectionHitAndRun()
        state = walk.start(body, np.zeros(2), np.random.RandomState(0))

        walk.advance(body, state, 25)

        assert state.steps == 25
        assert state.rejections == 0

    def test_invalid_check_every_raises_error(self):
        with pytest.raises(ValueError):
            RandomDirectionHitAndRun(check_every=0)


class TestSamplePoints:
    def test_default_walk_length(self):
        assert default_walk_length(5) == 10
        assert default_walk_length(25) == 12

    def test_point_outside_raises_infeasible_seed(self):
        with pytest.raises(InfeasibleSeedError):
            sample_points(cube(2), 10, x0=[2, 2])

    def test_boundary_point_raises_infeasible_seed(self):
        with pytest.raises(InfeasibleSeedError):
            sample_points(cube(2), 10, x0=[1, 0])

    def test_invalid_number_of_samples_raises_error(self):
        with pytest.raises(ValueError):
            sample_points(cube(2), 0)


class TestGetWalk:
    @pytest.mark.parametrize('name, cls', [
        ('coordinate-hit-and-run', CoordinateHitAndRun),
        ('random-hit-and-run', RandomDirectionHitAndRun),
        ('ball-walk', BallWalk),
        ('BILLIARD_WALK', BilliardWalk),
    ])
    def test_walk_names(self, name, cls):
        assert isinstance(get_walk(name), cls)

    def test_gaussian_walk_takes_exponent(self):
        walk = get_walk('gaussian-hit-and-run', a=2.0)

        assert isinstance(walk, GaussianHitAndRun)
        assert walk.a == 2.0

    def test_params_are_forwarded(self):
        walk = get_walk('hamiltonian-reflective', objective=[1, 0], temperature=2)

        assert isinstance(walk, HamiltonianReflectiveWalk)
        assert walk.temperature == 2

    def test_unknown_walk_raises_error(self):
        with pytest.raises(ValueError):
            get_walk('unknown')
