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
from .base import ConvexBody
from .ellipsoid import Ellipsoid, Ball, unit_ball_volume
from .hpolytope import HPolytope
from .intersection import BallIntersection
from .spectrahedron import LMI, Spectrahedron
from .vpolytope import VPolytope
from .zonotope import Zonotope
