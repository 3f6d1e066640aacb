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

from .base import RandomWalk, WalkState, reflective_path
from ..bodies.base import as_vector
from ..utils import assert_positive, assert_positive_integer

if TYPE_CHECKING:
    from ..bodies import ConvexBody


class HamiltonianReflectiveWalk(RandomWalk):
    """
    Hamiltonian Monte Carlo for the Boltzmann distribution restricted to the body:

            pi(x) ~ exp(-c^T x / T),    x in K

    Each step draws a Gaussian momentum and integrates the Hamiltonian dynamics with the leapfrog scheme. Since the
    potential is linear, its gradient c / T is constant, and the only difficulty comes from the boundary: the position
    updates follow reflected trajectories, which keeps the dynamics reversible and volume-preserving. A final Metropolis
    correction removes the discretization bias.

    Reference: https://arxiv.org/abs/1202.4451 (Neal, 2011 - MCMC using Hamiltonian dynamics, Section 5.5.1.5)
    """

    def __init__(self, objective, temperature: float = 1.0, step_size: Optional[float] = None, n_steps: int = 5,
                 max_reflections: Optional[int] = None, **kwargs):
        """
        :param objective: direction c of the linear potential
        :param temperature: temperature T. Lower temperatures concentrate the distribution around the minimizer of c^T x.
        :param step_size: leapfrog step size. If None, it is set to r / sqrt(d), with r the radius of the inscribed ball.
        :param n_steps: number of leapfrog steps per move
        :param max_reflections: moves needing more reflections in a single position update are rejected. Defaults to 100 d.
        """
        super().__init__(**kwargs)

        assert_positive(temperature, 'temperature')
        assert_positive(step_size, 'step_size', allow_none=True)
        assert_positive_integer(n_steps, 'n_steps')
        assert_positive_integer(max_reflections, 'max_reflections', allow_none=True)

        self.objective = as_vector(objective, 'objective')
        self.temperature = temperature
        self.step_size = step_size
        self.n_steps = n_steps
        self.max_reflections = max_reflections

    def __repr__(self):
        return "HamiltonianReflectiveWalk(temperature={}, step_size={}, n_steps={})".format(self.temperature, self.step_size, self.n_steps)

    def _initialize(self, body: ConvexBody, state: WalkState) -> None:
        if len(self.objective) != body.dim:
            raise ValueError("Objective has size {}, but body has dimension {}".format(len(self.objective), body.dim))

        if self.step_size is not None:
            state.delta = self.step_size
        else:
            _, radius = body.inner_ball()
            state.delta = radius / np.sqrt(body.dim)

        state.max_reflections = self.max_reflections if self.max_reflections is not None else 100 * body.dim

    def potential(self, x: np.ndarray) -> float:
        return self.objective.dot(x) / self.temperature

    def step(self, body: ConvexBody, state: WalkState) -> None:
        grad = self.objective / self.temperature
        eta = state.delta

        x = state.point
        p = state.rng.normal(size=state.dim)
        initial_energy = self.potential(x) + 0.5 * p.dot(p)

        for _ in range(self.n_steps):
            p = p - 0.5 * eta * grad

            speed = np.linalg.norm(p)
            if speed > 0:
                path = reflective_path(state.oracle, x, p / speed, eta * speed, state.max_reflections)

                if path is None:
                    state.rejections += 1
                    return

                x, v = path
                p = speed * v

            p = p - 0.5 * eta * grad

        final_energy = self.potential(x) + 0.5 * p.dot(p)

        if np.log(state.rng.uniform()) >= initial_energy - final_energy:
            state.rejections += 1
            return

        state.point, state.momentum = x, p
        state.direction = p / np.linalg.norm(p) if np.any(p) else state.direction
