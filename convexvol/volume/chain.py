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
"""
Bookkeeping of the multiphase volume estimator. The volume of a convex body K is written as the telescoping product

        vol(K) = vol(K_0) * vol(K_1) / vol(K_0) * ... * vol(K_m) / vol(K_{m-1}),    K_0 ⊂ K_1 ⊂ ... ⊂ K_m = K

where vol(K_0) is known in closed-form. Each phase estimates one ratio vol(K_{i-1}) / vol(K_i) by sampling K_i and
counting the fraction of samples falling in K_{i-1}.

The Gaussian cooling variant replaces the bodies by the Gaussian integrals Z(a) = int_K exp(-a ||x - c||^2) dx, for a
decreasing sequence a_0 > a_1 > ... > a_m = 0, so that Z(a_m) = vol(K) and Z(a_0) is known in closed-form when a_0 is large.
"""
from __future__ import annotations

from typing import NamedTuple, List, Optional, Tuple, TYPE_CHECKING

import numpy as np

from ..utils import assert_positive, assert_positive_integer, assert_non_negative_integer

if TYPE_CHECKING:
    from ..bodies import ConvexBody


class Phase(NamedTuple):
    body: ConvexBody                       # sampled body K_i
    inner: Optional[ConvexBody]            # K_{i-1}, contained in K_i (None for Gaussian cooling phases)
    n_samples: int
    walk_length: int
    target_ratio: Optional[float] = None   # expected ratio, if the phase was built adaptively
    ratio: Optional[float] = None          # estimated vol(K_{i-1}) / vol(K_i)
    attempts: int = 0
    exponents: Optional[Tuple[float, float]] = None  # (a_i, a_{i+1}) for Gaussian cooling phases


class VolumeChain:
    def __init__(self, anchor_volume: float):
        """
        :param anchor_volume: volume of the innermost body K_0
        """
        assert_positive(anchor_volume, 'anchor_volume')

        self.anchor_volume = float(anchor_volume)
        self._phases = []  # type: List[Phase]
        self._volume = None  # type: Optional[float]

    def __repr__(self):
        return "VolumeChain(phases={}, pending={}, finalized={})".format(len(self._phases), len(self.pending), self.is_finalized)

    def __len__(self):
        return len(self._phases)

    @property
    def phases(self) -> Tuple[Phase, ...]:
        return tuple(self._phases)

    @property
    def is_finalized(self) -> bool:
        return self._volume is not None

    @property
    def pending(self) -> List[int]:
        """
        :return: indexes of the phases whose ratio was not recorded yet
        """
        return [i for i, phase in enumerate(self._phases) if phase.ratio is None]

    @property
    def ratios(self) -> List[Optional[float]]:
        return [phase.ratio for phase in self._phases]

    @property
    def is_complete(self) -> bool:
        return len(self._phases) > 0 and not self.pending

    @property
    def volume(self) -> Optional[float]:
        return self._volume

    def add_phase(self, body: ConvexBody, inner: Optional[ConvexBody], n_samples: int, walk_length: int,
                  target_ratio: Optional[float] = None, exponents: Optional[Tuple[float, float]] = None) -> int:
        """
        :param exponents: (a_i, a_{i+1}) for a Gaussian cooling phase, whose ratio is Z(a_i) / Z(a_{i+1})
        :return: index of the new phase
        """
        self.__assert_not_finalized()
        assert_positive_integer(n_samples, 'n_samples')
        assert_positive_integer(walk_length, 'walk_length')

        self._phases.append(Phase(body, inner, n_samples, walk_length, target_ratio, exponents=exponents))
        return len(self._phases) - 1

    def record_ratio(self, index: int, ratio: float, attempts: int = 1) -> None:
        self.__assert_not_finalized()
        assert_non_negative_integer(attempts, 'attempts')

        if not np.isfinite(ratio) or ratio <= 0:
            raise ValueError("Invalid ratio for phase {}: {}".format(index, ratio))

        self._phases[index] = self._phases[index]._replace(ratio=float(ratio), attempts=attempts)

    def finalize(self) -> float:
        """
        Computes the volume estimate. After this call, the chain cannot be modified anymore.
        """
        if self._volume is not None:
            return self._volume

        if not self.is_complete:
            raise RuntimeError("Cannot finalize chain: phases {} have no recorded ratio.".format(self.pending))

        log_volume = np.log(self.anchor_volume) - np.sum(np.log(self.ratios))
        self._volume = float(np.exp(log_volume))
        return self._volume

    def __assert_not_finalized(self) -> None:
        if self._volume is not None:
            raise RuntimeError("Volume chain is finalized and cannot be modified.")
