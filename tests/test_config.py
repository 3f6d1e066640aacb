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

import logging

import numpy as np
import pytest

from convexvol.bodies import HPolytope
from convexvol.config import read_config, decode_walk, decode_rounding, decode_estimator, get_config_from_resources, configure_logging
from convexvol.rounding import RoundingAlgorithm
from convexvol.volume import VolumeEstimator
from convexvol.walks import BallWalk, BilliardWalk


class TestReadConfig:
    def test_defaults(self):
        config = read_config()

        assert config['walk'] is None
        assert config['n_samples'] == 1000
        assert config['schedule'] == 'balls'
        assert config['rounding']['enabled'] is False
        assert config['verbose'] is False

    def test_defaults_match_resource_file(self):
        assert read_config() == get_config_from_resources('config')

    def test_overrides(self):
        config = read_config(n_samples=50, seed=3)

        assert config['n_samples'] == 50
        assert config['seed'] == 3

    def test_boolean_rounding_override(self):
        config = read_config(rounding=True)

        assert config['rounding']['enabled'] is True
        assert config['rounding']['strategy'] == 'mvee'

    def test_read_from_file(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text("n_samples: 50\nschedule: annealing\nrounding:\n  strategy: covariance\n")

        config = read_config(str(path), n_samples=70)

        assert config['n_samples'] == 70
        assert config['schedule'] == 'annealing'
        assert config['rounding']['strategy'] == 'covariance'
        assert config['rounding']['max_iter'] == 10

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text("")

        assert read_config(str(path)) == read_config()

    def test_unknown_option_raises_error(self):
        with pytest.raises(ValueError):
            read_config(unknown_option=1)

    def test_unknown_rounding_option_raises_error(self):
        with pytest.raises(ValueError):
            read_config(rounding={'unknown': 1})

    def test_missing_resource_raises_error(self):
        with pytest.raises(FileNotFoundError):
            get_config_from_resources('missing')


class TestDecoders:
    def test_no_walk(self):
        assert decode_walk(read_config()) is None

    def test_walk_by_name_with_delta(self):
        walk = decode_walk(read_config(walk='ball-walk', delta=0.3))

        assert isinstance(walk, BallWalk)
        assert walk.delta == 0.3

    def test_walk_with_params(self):
        walk = decode_walk(read_config(walk={'name': 'billiard-walk', 'params': {'max_reflections': 10}}))

        assert isinstance(walk, BilliardWalk)
        assert walk.max_reflections == 10

    def test_unknown_walk_raises_error(self):
        with pytest.raises(ValueError):
            decode_walk(read_config(walk='unknown'))

    def test_invalid_walk_parameter_raises_error(self):
        with pytest.raises(ValueError):
            decode_walk(read_config(walk='ball-walk', delta=-1))

    def test_rounding_disabled_by_default(self):
        assert decode_rounding(read_config()) is None

    def test_rounding(self):
        rounding = decode_rounding(read_config(rounding={'enabled': True, 'strategy': 'covariance', 'max_iter': 3}))

        assert isinstance(rounding, RoundingAlgorithm)
        assert rounding.strategy == 'covariance'
        assert rounding.max_iter == 3

    def test_estimator(self):
        estimator = decode_estimator(read_config(n_samples=[100, 200], schedule='annealing', n_jobs=2, rounding=True))

        assert isinstance(estimator, VolumeEstimator)
        assert estimator.n_samples == [100, 200]
        assert estimator.schedule == 'ANNEALING'
        assert estimator.n_jobs == 2
        assert isinstance(estimator.rounding, RoundingAlgorithm)

    def test_estimator_seed(self):
        estimator = decode_estimator(read_config(seed=3, n_samples=200))
        cube = HPolytope(np.vstack([np.eye(2), -np.eye(2)]), np.ones(4))

        assert estimator.seed == 3
        assert estimator.estimate(cube).volume == estimator.estimate(cube).volume

    def test_invalid_estimator_option_raises_error(self):
        with pytest.raises(ValueError):
            decode_estimator(read_config(target_ratio=2))

    def test_decoded_estimator_runs(self):
        estimator = decode_estimator(read_config(walk='random-hit-and-run', n_samples=200))
        cube = np.vstack([np.eye(2), -np.eye(2)])

        result = estimator.estimate(HPolytope(cube, np.ones(4)), seed=0)

        assert result.volume == pytest.approx(4, rel=0.3)

    def test_configure_logging(self):
        configure_logging(read_config(verbose=True))
        assert logging.getLogger('convexvol').level == logging.INFO

        configure_logging(read_config())
        assert logging.getLogger('convexvol').level == logging.WARNING
