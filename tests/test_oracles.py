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

import itertools

import numpy as np
import pytest

from convexvol.bodies import HPolytope, VPolytope, Zonotope, Spectrahedron, Ball, BallIntersection
from convexvol.errors import DegenerateDirectionError, IllConditionedWarning
from convexvol.oracles import reflect
from convexvol.walks import RandomDirectionHitAndRun


def cube(dim, half_width=1.0):
    return HPolytope(np.vstack([np.eye(dim), -np.eye(dim)]), half_width * np.ones(2 * dim))


def diagonal_lmi_cube(dim):
    """ The cube [-1, 1]^d written as the LMI diag(1 - x_1, ..., 1 - x_d, 1 + x_1, ..., 1 + x_d) >= 0 """
    A0 = np.eye(2 * dim)
    matrices = [A0]
    for i in range(dim):
        Ai = np.zeros((2 * dim, 2 * dim))
        Ai[i, i], Ai[dim + i, dim + i] = -1, 1
        matrices.append(Ai)
    return Spectrahedron(matrices)


class TestHalfspaceOracle:
    def setup_method(self):
        rng = np.random.RandomState(0)
        self.dim = 4
        A = np.vstack([np.eye(self.dim), -np.eye(self.dim), rng.normal(size=(20, self.dim))])
        self.body = HPolytope(A, np.ones(A.shape[0]))
        self.oracle = self.body.boundary_oracle()

        self.points = 0.1 * rng.uniform(-1, 1, size=(50, self.dim))
        self.directions = rng.normal(size=(50, self.dim))

    def test_chord_extremes_lie_on_boundary(self):
        for x, v in zip(self.points, self.directions):
            t1, t2 = self.oracle.chord(x, v)

            assert t1 < 0 < t2
            for t in (t1, t2):
                slack = self.body.b - self.body.A.dot(x + t * v)
                assert slack.min() == pytest.approx(0, abs=1e-9)
                assert self.body.is_inside(x + t * v, tol=1e-9)

    def test_chord_is_scale_invariant(self):
        x, v = self.points[0], self.directions[0]
        t1, t2 = self.oracle.chord(x, v)
        s1, s2 = self.oracle.chord(x, 2 * v)

        assert s1 == pytest.approx(t1 / 2)
        assert s2 == pytest.approx(t2 / 2)

    def test_coordinate_chord_equals_chord_over_canonical_direction(self):
        x = self.points[0]
        for i in range(self.dim):
            e = np.zeros(self.dim)
            e[i] = 1
            np.testing.assert_allclose(self.oracle.coordinate_chord(x, i), self.oracle.chord(x, e))

    def test_hit_returns_upper_chord_extreme_and_active_normal(self):
        for x, v in zip(self.points, self.directions):
            _, t2 = self.oracle.chord(x, v)
            t, normal = self.oracle.hit(x, v)

            assert t == pytest.approx(t2)
            assert np.linalg.norm(normal) == pytest.approx(1)

            active = np.argmin(self.body.b - self.body.A.dot(x + t * v))
            np.testing.assert_allclose(normal, self.body.A[active] / np.linalg.norm(self.body.A[active]))

    def test_ties_are_broken_by_lowest_constraint_index(self):
        oracle = cube(2).boundary_oracle()
        t, normal = oracle.hit(np.zeros(2), np.array([1.0, 1.0]))

        assert t == pytest.approx(1)
        np.testing.assert_allclose(normal, [1, 0])

    def test_advance_keeps_cache_consistent_with_fresh_oracle(self):
        x = self.points[0]
        for v in self.directions:
            t1, t2 = self.oracle.chord(x, v)
            t = 0.5 * (t1 + t2)
            x = x + t * v
            self.oracle.advance(x, t)

        fresh = self.body.boundary_oracle()
        for v in self.directions[:5]:
            np.testing.assert_allclose(self.oracle.chord(x, v), fresh.chord(x, v))

    def test_null_direction_is_degenerate(self):
        with pytest.raises(DegenerateDirectionError):
            self.oracle.chord(self.points[0], np.zeros(self.dim))

    def test_point_outside_is_degenerate(self):
        with pytest.raises(DegenerateDirectionError):
            self.oracle.chord(np.full(self.dim, 5.0), self.directions[0])


class TestHullOracles:
    def setup_method(self):
        self.dim = 3
        self.reference = cube(self.dim).boundary_oracle()

        vertices = np.array(list(itertools.product([-1, 1], repeat=self.dim)), dtype=float)
        self.bodies = [VPolytope(vertices), Zonotope(np.eye(self.dim))]

        rng = np.random.RandomState(1)
        self.points = 0.5 * rng.uniform(-1, 1, size=(10, self.dim))
        self.directions = rng.normal(size=(10, self.dim))

    def test_chord_matches_halfspace_description(self):
        for body in self.bodies:
            oracle = body.boundary_oracle()
            for x, v in zip(self.points, self.directions):
                np.testing.assert_allclose(oracle.chord(x, v), self.reference.chord(x, v), atol=1e-7)

    def test_hit_normal_is_the_face_normal(self):
        for body in self.bodies:
            oracle = body.boundary_oracle()
            for x, v in zip(self.points, self.directions):
                t, normal = oracle.hit(x, v)
                t_ref, normal_ref = self.reference.hit(x, v)

                assert t == pytest.approx(t_ref, abs=1e-7)
                np.testing.assert_allclose(normal, normal_ref, atol=1e-6)

    def test_translated_zonotope(self):
        oracle = Zonotope(np.eye(2), center=[5, 5]).boundary_oracle()
        np.testing.assert_allclose(oracle.chord(np.array([5.0, 5.5]), np.array([0.0, 1.0])), (-1.5, 0.5), atol=1e-7)

    def test_point_outside_is_degenerate(self):
        oracle = self.bodies[0].boundary_oracle()
        with pytest.raises(DegenerateDirectionError):
            oracle.chord(np.full(self.dim, 3.0), np.ones(self.dim))


class TestLMIOracle:
    def setup_method(self):
        self.dim = 3
        self.body = diagonal_lmi_cube(self.dim)
        self.oracle = self.body.boundary_oracle()
        self.reference = cube(self.dim).boundary_oracle()

        rng = np.random.RandomState(2)
        self.points = 0.5 * rng.uniform(-1, 1, size=(10, self.dim))
        self.directions = rng.normal(size=(10, self.dim))

    def test_diagonal_lmi_matches_halfspace_oracle(self):
        for x, v in zip(self.points, self.directions):
            np.testing.assert_allclose(self.oracle.chord(x, v), self.reference.chord(x, v), atol=1e-8)

    def test_diagonal_lmi_hit_matches_halfspace_oracle(self):
        for x, v in zip(self.points, self.directions):
            t, normal = self.oracle.hit(x, v)
            t_ref, normal_ref = self.reference.hit(x, v)

            assert t == pytest.approx(t_ref)
            np.testing.assert_allclose(normal, normal_ref, atol=1e-8)

    def test_advance_updates_cached_matrix(self):
        x = self.points[0]
        for v in self.directions:
            t1, t2 = self.oracle.chord(x, v)
            t = 0.5 * (t1 + t2)
            x = x + t * v
            self.oracle.advance(x, t)

        np.testing.assert_allclose(self.oracle.chord(x, self.directions[0]), self.reference.chord(x, self.directions[0]), atol=1e-8)

    def test_disk_spectrahedron(self):
        disk = Spectrahedron([np.eye(2), np.diag([1.0, -1.0]), np.array([[0.0, 1.0], [1.0, 0.0]])])
        oracle = disk.boundary_oracle()

        v = np.array([0.6, 0.8])
        np.testing.assert_allclose(oracle.chord(np.zeros(2), v), (-1, 1), atol=1e-10)

        t, normal = oracle.hit(np.zeros(2), np.array([1.0, 0.0]))
        assert t == pytest.approx(1)
        np.testing.assert_allclose(normal, [1, 0], atol=1e-10)

    def test_indefinite_pencil_warns_and_resets_cache(self):
        disk = Spectrahedron([np.eye(2), np.diag([1.0, -1.0]), np.array([[0.0, 1.0], [1.0, 0.0]])])
        oracle = disk.boundary_oracle()

        # M(x) = diag(3, -1) is not positive definite
        with pytest.warns(IllConditionedWarning):
            with pytest.raises(DegenerateDirectionError):
                oracle.chord(np.array([2.0, 0.0]), np.array([0.6, 0.8]))

        assert oracle._point is None
        assert oracle._M is None

        np.testing.assert_allclose(oracle.chord(np.zeros(2), np.array([0.6, 0.8])), (-1, 1), atol=1e-10)

    def test_walk_recovers_from_corrupted_cache(self):
        disk = Spectrahedron([np.eye(2), np.diag([1.0, -1.0]), np.array([[0.0, 1.0], [1.0, 0.0]])])
        walk = RandomDirectionHitAndRun()
        state = walk.start(disk, np.zeros(2), np.random.RandomState(0))

        # cached value of M(x) drifted away from positive definiteness
        state.oracle.chord(state.point, np.array([1.0, 0.0]))
        state.oracle._M = -np.eye(2)

        with pytest.warns(IllConditionedWarning):
            walk.advance(disk, state, 10)

        assert state.steps == 10
        assert state.rejections == 0
        assert disk.is_inside(state.point)


class TestQuadricOracles:
    def test_ball_chord(self):
        oracle = Ball([0, 0], 2).boundary_oracle()
        v = np.array([0.6, 0.8])
        np.testing.assert_allclose(oracle.chord(np.zeros(2), v), (-2, 2))

    def test_ball_hit_normal_is_radial(self):
        oracle = Ball([1, 1], 1).boundary_oracle()
        t, normal = oracle.hit(np.array([1.0, 1.0]), np.array([1.0, 1.0]))

        assert t == pytest.approx(1 / np.sqrt(2))
        np.testing.assert_allclose(normal, [1 / np.sqrt(2), 1 / np.sqrt(2)])

    def test_point_outside_ball_is_degenerate(self):
        oracle = Ball([0, 0], 1).boundary_oracle()
        with pytest.raises(DegenerateDirectionError):
            oracle.chord(np.array([5.0, 0.0]), np.array([0.0, 1.0]))

    def test_intersection_takes_innermost_extremes(self):
        oracle = BallIntersection(cube(2), [0, 0], 1.2).boundary_oracle()

        np.testing.assert_allclose(oracle.chord(np.zeros(2), np.array([1.0, 0.0])), (-1, 1))
        np.testing.assert_allclose(oracle.chord(np.zeros(2), np.array([1.0, 1.0]) / np.sqrt(2)), (-1.2, 1.2))

    def test_intersection_hit_uses_closest_body(self):
        oracle = BallIntersection(cube(2), [0, 0], 1.2).boundary_oracle()

        _, normal = oracle.hit(np.zeros(2), np.array([1.0, 0.0]))
        np.testing.assert_allclose(normal, [1, 0])

        _, normal = oracle.hit(np.zeros(2), np.array([1.0, 1.0]))
        np.testing.assert_allclose(normal, [1 / np.sqrt(2), 1 / np.sqrt(2)])


def test_reflect():
    np.testing.assert_allclose(reflect(np.array([1.0, 1.0]), np.array([1.0, 0.0])), [-1, 1])
