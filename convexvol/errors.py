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


class MalformedBodyError(ValueError):
    """
    Raised when a convex body is built from an inconsistent description (mismatched dimensions, empty constraint set,
    non-square or non-symmetric LMI matrices, unbounded polytope, ...).
    """


class InfeasibleSeedError(RuntimeError):
    """
    Raised when the starting point of a random walk is not strictly inside the convex body.
    """


class DegenerateDirectionError(RuntimeError):
    """
    Raised by a boundary oracle whenever a line does not cross the boundary on both sides of the current point, i.e.
    the direction is tangent (or null), or the matrix pencil has no real root. Random walks recover from it by sampling
    a new direction, so it never reaches the caller.
    """


class VolumeEstimationError(RuntimeError):
    """
    Raised when a phase of the volume estimator keeps producing non-finite or null ratios after all retries.
    """


class IllConditionedWarning(RuntimeWarning):
    """
    Emitted when a numerical linear algebra routine fails due to ill-conditioning.
    """
