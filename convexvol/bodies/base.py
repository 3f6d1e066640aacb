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

from typing import Optional, TYPE_CHECKING

import numpy as np
from sklearn.utils import check_array, column_or_1d, assert_all_finite

from ..errors import MalformedBodyError, InfeasibleSeedError, DegenerateDirectionError
from ..utils import get_random_state, random_direction

if TYPE_CHECKING:
    from ..oracles import BoundaryOracle
    from ..rounding import AffineMap
    from ..utils import InnerBall, Seed


class ConvexBody:
    """
    This class represents an abstract definition of a full-dimensional, bounded convex subset of euclidean space.
    Bodies are read-only: preprocessing steps (like rounding) build new bodies through 'transform'.
    """

    @property
    def dim(self) -> int:
        raise NotImplementedError

    def is_inside(self, X: np.ndarray, tol: float = 0.0):
        """
        Tells if a point (or an array of points, one per row) is inside the convex body or not
        """
        raise NotImplementedError

    def is_well_inside(self, x: np.ndarray, margin: float = 1e-10) -> bool:
        """
        :return: whether the point is at a distance larger than 'margin' from the boundary, along every coordinate axis
        """
        if not self.is_inside(x):
            return False

        oracle = self.boundary_oracle()
        try:
            return all(min(-t1, t2) > margin for t1, t2 in (oracle.coordinate_chord(x, i) for i in range(self.dim)))
        except DegenerateDirectionError:
            return False

    def boundary_oracle(self) -> BoundaryOracle:
        """
        :return: a new boundary oracle over this body. Oracles hold private caches, so each random walk needs its own.
        """
        raise NotImplementedError

    def inner_ball(self) -> InnerBall:
        """
        :return: center and radius of a ball contained in the body
        """
        raise NotImplementedError

    def interior_point(self) -> np.ndarray:
        return self.inner_ball()[0].copy()

    def outer_radius(self, center: np.ndarray, seed: Seed = None) -> float:
        """
        :param center: any point
        :param seed: random seed, only used by bodies whose radius has to be estimated by sampling
        :return: a radius R such that the body is contained in the ball B(center, R)
        """
        raise NotImplementedError

    def transform(self, amap: AffineMap) -> ConvexBody:
        """
        :return: a new body, given by the image of this body under the affine map 'amap'
        """
        raise NotImplementedError


def as_matrix(A, name: str) -> np.ndarray:
    try:
        return check_array(A, dtype=np.float64)
    except ValueError as e:
        raise MalformedBodyError("Invalid matrix '{}': {}".format(name, e)) from e


def as_vector(b, name: str, size: Optional[int] = None) -> np.ndarray:
    try:
        b = column_or_1d(np.asarray(b, dtype=np.float64))
        assert_all_finite(b)
    except ValueError as e:
        raise MalformedBodyError("Invalid vector '{}': {}".format(name, e)) from e

    if size is not None and len(b) != size:
        raise MalformedBodyError("Expected '{}' of size {}, got {}".format(name, size, len(b)))

    return b


def as_points(X) -> np.ndarray:
    return np.atleast_2d(np.asarray(X, dtype=np.float64))


def axis_inner_ball(body: ConvexBody, center: np.ndarray) -> InnerBall:
    """
    Computes a ball centered at a given interior point and contained in the body. If r_i is the distance from the center
    to the boundary along the i-th axis (in both senses), the convex hull of the 2d points 'center +- r e_i' (a
    cross-polytope), with r = min r_i, is inside the body and contains the ball B(center, r / sqrt(d)).
    """
    oracle = body.boundary_oracle()

    try:
        radius = min(min(-t1, t2) for t1, t2 in (oracle.coordinate_chord(center, i) for i in range(body.dim)))
    except DegenerateDirectionError as e:
        raise InfeasibleSeedError("Center {} is not strictly inside the body.".format(center)) from e

    return center, radius / np.sqrt(body.dim)


def central_point(body: ConvexBody, x0: np.ndarray, sweeps: int = 5) -> np.ndarray:
    """
    Moves a point towards the "center" of the body by repeatedly replacing each coordinate by the midpoint of the chord
    through the point along the corresponding axis.
    """
    oracle = body.boundary_oracle()
    x = np.array(x0, dtype=np.float64)

    for _ in range(sweeps):
        for i in range(body.dim):
            t1, t2 = oracle.coordinate_chord(x, i)
            x = x.copy()
            x[i] += 0.5 * (t1 + t2)

    return x


def sampled_outer_radius(body: ConvexBody, center: np.ndarray, seed: Seed = None, n_chords: Optional[int] = None) -> float:
    """
    Estimates an outer radius by shooting random chords through 'center' and keeping the farthest boundary point found.
    The result is a lower estimate of the true circumradius. It is only used to lay out the phases of the volume
    estimator, whose last phase always samples the body itself.
    """
    rng = get_random_state(seed)
    oracle = body.boundary_oracle()

    if n_chords is None:
        n_chords = 50 * body.dim

    radius = 0.0
    for _ in range(n_chords):
        v = random_direction(body.dim, rng)
        try:
            t1, t2 = oracle.chord(center, v)
        except DegenerateDirectionError:
            continue
        radius = max(radius, -t1, t2)

    if radius == 0:
        raise InfeasibleSeedError("Center {} is not strictly inside the body.".format(center))

    return radius
