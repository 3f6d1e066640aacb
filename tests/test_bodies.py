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
import warnings

import numpy as np
import pytest

from convexvol.bodies import HPolytope, VPolytope, Zonotope, LMI, Spectrahedron, Ellipsoid, Ball, BallIntersection, unit_ball_volume
from convexvol.errors import MalformedBodyError, InfeasibleSeedError
from convexvol.rounding import AffineMap


def cube(dim, half_width=1.0):
    return HPolytope(np.vstack([np.eye(dim), -np.eye(dim)]), half_width * np.ones(2 * dim))


def disk_matrices():
    return [np.eye(2), np.diag([1.0, -1.0]), np.array([[0.0, 1.0], [1.0, 0.0]])]


class TestHPolytope:
    def test_mismatched_dimensions_raise_error(self):
        with pytest.raises(MalformedBodyError):
            HPolytope(np.eye(2), np.ones(3))

    def test_null_row_raises_error(self):
        with pytest.raises(MalformedBodyError):
            HPolytope([[1, 0], [0, 0]], [1, 1])

    def test_empty_constraint_set_raises_error(self):
        with pytest.raises(MalformedBodyError):
            HPolytope(np.empty((0, 2)), np.empty(0))

    def test_non_finite_entries_raise_error(self):
        with pytest.raises(MalformedBodyError):
            HPolytope([[1, 0], [0, np.inf]], [1, 1])

        with pytest.raises(MalformedBodyError):
            HPolytope([[1, 0], [0, 1]], [1, np.nan])

    def test_malformed_body_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            HPolytope(np.eye(2), np.ones(3))

    def test_unbounded_polytope_raises_error(self):
        with pytest.raises(MalformedBodyError):
            HPolytope(np.eye(2), np.ones(2)).inner_ball()

    def test_flat_polytope_raises_infeasible_seed(self):
        with pytest.raises(InfeasibleSeedError):
            HPolytope([[1], [-1]], [0, 0]).inner_ball()

    def test_chebyshev_ball_of_cube(self):
        center, radius = cube(3).inner_ball()

        np.testing.assert_allclose(center, np.zeros(3), atol=1e-9)
        assert radius == pytest.approx(1)

    def test_chebyshev_ball_of_shifted_box(self):
        body = HPolytope([[1, 0], [-1, 0], [0, 1], [0, -1]], [4, 0, 1, 1])
        center, radius = body.inner_ball()

        assert radius == pytest.approx(1)
        assert body.is_inside(center)

    def test_outer_radius_of_cube(self):
        assert cube(3).outer_radius(np.zeros(3)) == pytest.approx(np.sqrt(3))

    def test_bounding_box(self):
        low, high = cube(2, 2.0).bounding_box()

        np.testing.assert_allclose(low, [-2, -2])
        np.testing.assert_allclose(high, [2, 2])

    def test_is_inside_over_matrix(self):
        X = [[0, 0], [0.5, -0.5], [1.5, 0], [1, 1]]
        np.testing.assert_array_equal(cube(2).is_inside(X), [True, True, False, True])

    def test_is_inside_with_tolerance(self):
        assert not cube(2).is_inside([1.01, 0])
        assert cube(2).is_inside([1.01, 0], tol=0.02)

    def test_is_well_inside(self):
        assert cube(2).is_well_inside(np.zeros(2))
        assert not cube(2).is_well_inside(np.array([1.0, 0.0]))

    def test_transform_creates_new_body(self):
        body = cube(2)
        amap = AffineMap(2 * np.eye(2), [1, 1])

        new_body = body.transform(amap)

        assert new_body is not body
        assert new_body.is_inside([2.5, -0.5])
        assert not body.is_inside([2.5, -0.5])
        np.testing.assert_array_equal(body.b, np.ones(4))

    def test_transform_round_trip(self):
        rng = np.random.RandomState(0)
        body = cube(3)
        amap = AffineMap(rng.normal(size=(3, 3)) + 3 * np.eye(3), rng.normal(size=3))

        back = body.transform(amap).transform(amap.inverse())

        np.testing.assert_allclose(back.A, body.A, atol=1e-10)
        np.testing.assert_allclose(back.b, body.b, atol=1e-10)


class TestVPolytope:
    def test_lower_dimensional_points_raise_error(self):
        with pytest.raises(MalformedBodyError):
            VPolytope([[0, 0], [1, 1], [2, 2]])

    def test_too_few_points_raise_error(self):
        with pytest.raises(MalformedBodyError):
            VPolytope([[0, 0], [1, 0]])

    def test_is_inside_triangle(self):
        body = VPolytope([[0, 0], [1, 0], [0, 1]])

        np.testing.assert_array_equal(body.is_inside([[0.2, 0.2], [0.6, 0.6], [-0.1, 0.5]]), [True, False, False])
        assert body.is_inside([0.5, 0.5])

    def test_inner_ball_of_cube(self):
        vertices = np.array(list(itertools.product([-1, 1], repeat=3)), dtype=float)
        center, radius = VPolytope(vertices).inner_ball()

        np.testing.assert_allclose(center, np.zeros(3), atol=1e-9)
        assert radius == pytest.approx(1 / np.sqrt(3))

    def test_outer_radius_is_farthest_vertex(self):
        body = VPolytope([[0, 0], [2, 0], [0, 1]])
        assert body.outer_radius(np.zeros(2)) == pytest.approx(2)

    def test_transform_maps_vertices(self):
        body = VPolytope([[0, 0], [1, 0], [0, 1]])
        new_body = body.transform(AffineMap(np.eye(2), [1, 1]))

        np.testing.assert_allclose(new_body.vertices, [[1, 1], [2, 1], [1, 2]])


class TestZonotope:
    def test_rank_deficient_generators_emit_warning(self):
        with pytest.warns(UserWarning):
            Zonotope([[1, 0]])

    def test_full_rank_generators_do_not_warn(self):
        with warnings.catch_warnings():
            warnings.simplefilter('error')
            Zonotope([[1, 0], [0, 1], [1, 1]])

    def test_is_inside(self):
        body = Zonotope([[1, 0], [0, 1], [1, 1]])

        assert body.is_inside([1.9, 1.9])
        assert not body.is_inside([1.9, -1.9])

    def test_outer_radius(self):
        body = Zonotope(np.eye(2), center=[1, 1])
        assert body.outer_radius(np.array([1.0, 1.0])) == pytest.approx(np.sqrt(2))


class TestSpectrahedron:
    def test_non_symmetric_matrix_raises_error(self):
        with pytest.raises(MalformedBodyError):
            LMI([np.eye(2), np.array([[0, 1], [0, 0]])])

    def test_matrices_of_different_sizes_raise_error(self):
        with pytest.raises(MalformedBodyError):
            LMI([np.eye(2), np.eye(3)])

    def test_single_matrix_raises_error(self):
        with pytest.raises(MalformedBodyError):
            LMI([np.eye(2)])

    def test_non_interior_seed_raises_error(self):
        with pytest.raises(InfeasibleSeedError):
            Spectrahedron([-np.eye(2), np.eye(2)])

        with pytest.raises(InfeasibleSeedError):
            Spectrahedron(disk_matrices(), interior_point=[1, 0])

    def test_disk_membership(self):
        body = Spectrahedron(disk_matrices())

        assert body.dim == 2
        np.testing.assert_array_equal(body.is_inside([[0.5, 0.5], [0.8, 0.8], [0, -0.9]]), [True, False, True])

    def test_inner_ball_is_inside(self):
        body = Spectrahedron(disk_matrices(), interior_point=[0.5, 0.2])
        center, radius = body.inner_ball()

        assert radius > 0
        assert np.linalg.norm(center) + radius <= 1 + 1e-9

    def test_outer_radius_estimate(self):
        body = Spectrahedron(disk_matrices())
        radius = body.outer_radius(np.zeros(2), seed=0)

        assert radius == pytest.approx(1, abs=1e-6)

    def test_lmi_transform_matches_point_map(self):
        rng = np.random.RandomState(0)
        lmi = LMI(disk_matrices())
        amap = AffineMap(rng.normal(size=(2, 2)) + 2 * np.eye(2), rng.normal(size=2))

        new_lmi = lmi.transform(amap)

        for x in rng.normal(size=(5, 2)):
            np.testing.assert_allclose(new_lmi.evaluate(amap(x)), lmi.evaluate(x), atol=1e-10)

    def test_transform_keeps_seed_inside(self):
        body = Spectrahedron(disk_matrices()).transform(AffineMap(3 * np.eye(2), [1, 2]))

        assert body.is_inside([1, 2])
        assert body.is_inside([3.9, 2])
        assert not body.is_inside([4.1, 2])


class TestEllipsoid:
    def test_unit_ball_volume(self):
        assert unit_ball_volume(1) == pytest.approx(2)
        assert unit_ball_volume(2) == pytest.approx(np.pi)
        assert unit_ball_volume(3) == pytest.approx(4 * np.pi / 3)

    def test_ellipsoid_volume(self):
        assert Ellipsoid([0, 0], np.diag([4, 9])).volume == pytest.approx(6 * np.pi)

    def test_ball_volume(self):
        assert Ball(np.zeros(3), 2).volume == pytest.approx(32 * np.pi / 3)

    def test_non_positive_definite_matrix_raises_error(self):
        with pytest.raises(MalformedBodyError):
            Ellipsoid([0, 0], np.diag([1, -1]))

    def test_non_positive_radius_raises_error(self):
        with pytest.raises(ValueError):
            Ball([0, 0], 0)

    def test_is_inside(self):
        body = Ellipsoid([0, 0], np.diag([4, 1]))
        np.testing.assert_array_equal(body.is_inside([[1.9, 0], [0, 1.1], [0, 0]]), [True, False, True])

    def test_transform_scales_volume(self):
        body = Ball(np.zeros(2), 1)
        amap = AffineMap([[2, 1], [0, 3]], [5, 5])

        assert body.transform(amap).volume == pytest.approx(abs(amap.determinant) * body.volume)

    def test_inner_and_outer_radius(self):
        body = Ellipsoid([1, 1], np.diag([4, 1]))

        center, radius = body.inner_ball()
        np.testing.assert_allclose(center, [1, 1])
        assert radius == pytest.approx(1)
        assert body.outer_radius(np.array([1.0, 1.0])) == pytest.approx(2)


class TestBallIntersection:
    def setup_method(self):
        self.body = BallIntersection(cube(2), [0, 0], 1.2)

    def test_is_inside(self):
        np.testing.assert_array_equal(self.body.is_inside([[0.9, 0.0], [0.9, 0.9], [1.1, 0.0]]), [True, False, False])

    def test_inner_ball_of_body_is_reused_when_contained(self):
        center, radius = self.body.inner_ball()

        np.testing.assert_allclose(center, np.zeros(2), atol=1e-9)
        assert radius == pytest.approx(1)

    def test_explicit_inner_radius(self):
        body = BallIntersection(cube(2), [0, 0], 1.2, inner_radius=0.5)
        assert body.inner_ball()[1] == 0.5

    def test_outer_radius_is_bounded_by_ball(self):
        assert self.body.outer_radius(np.zeros(2)) == pytest.approx(1.2)

    def test_invalid_radius_raises_error(self):
        with pytest.raises(ValueError):
            BallIntersection(cube(2), [0, 0], -1)
