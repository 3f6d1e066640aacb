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
from .bodies import ConvexBody, HPolytope, VPolytope, Zonotope, LMI, Spectrahedron, Ellipsoid, Ball, BallIntersection
from .config import read_config, decode_walk, decode_rounding, decode_estimator
from .errors import MalformedBodyError, InfeasibleSeedError, DegenerateDirectionError, VolumeEstimationError, IllConditionedWarning
from .io import write_sdpa, to_sdpa_string
from .rounding import AffineMap, RoundingAlgorithm, RoundingResult, random_rotation
from .utils import setup_logging
from .volume import VolumeEstimator, VolumeResult, VolumeChain, estimate_ratio, estimate_gaussian_ratio
from .walks import (
    CoordinateHitAndRun, RandomDirectionHitAndRun, GaussianHitAndRun, BallWalk, BilliardWalk, HamiltonianReflectiveWalk,
    sample_points, get_walk
)

__version__ = '1.0.dev0'
