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
Configuration surface. Options are read from YAML files, on top of the defaults shipped in 'resources/config.yaml', and
decoded into walks, rounding algorithms and volume estimators.
"""
from __future__ import annotations

import copy
import os
from typing import Optional, TYPE_CHECKING

import yaml

from .rounding import RoundingAlgorithm
from .utils.logger import RESOURCES_DIR, setup_logging
from .volume import VolumeEstimator
from .walks import get_walk

if TYPE_CHECKING:
    from .utils import Config
    from .walks import RandomWalk


def get_config_from_resources(resource: str, section: Optional[str] = None) -> Config:
    """
    Read an specific section from a YAML configuration file. Will throw exception is resource file does not exist.

    :param resource: resource file to read
    :param section: section of resource to read. If None, the entire resource will be returned
    :return: configuration as dict
    """
    path = get_path_to_resource(resource)

    with open(path, 'r') as file:
        conf = yaml.safe_load(file)
        return conf[section] if section else conf


def get_path_to_resource(resource: str) -> str:
    path = os.path.join(RESOURCES_DIR, resource + '.yaml')

    if not os.path.exists(path):
        raise FileNotFoundError("Resource file {}.yaml does not exist.".format(resource))

    return path


def read_config(path: Optional[str] = None, **overrides) -> Config:
    """
    Builds a configuration by merging the default options, the contents of a YAML file and keyword overrides (in this
    order of precedence). Unknown options raise a ValueError.

    :param path: path to a YAML configuration file
    :param overrides: option values taking precedence over everything else. 'rounding' also accepts a boolean.
    """
    config = get_config_from_resources('config')

    if path is not None:
        with open(path, 'r') as file:
            __merge(config, yaml.safe_load(file) or {}, source=path)

    __merge(config, overrides, source='overrides')
    return config


def __merge(config: Config, new_values: Config, source: str) -> None:
    if not isinstance(new_values, dict):
        raise ValueError("Expected a mapping of options in {}, got {}".format(source, type(new_values).__name__))

    for key, value in new_values.items():
        if key not in config:
            raise ValueError("Unknown option '{}' in {}. Available options are: {}".format(key, source, ', '.join(config)))

        if key == 'rounding':
            if isinstance(value, bool):
                value = {'enabled': value}
            if not isinstance(value, dict):
                raise ValueError("Option 'rounding' must be a boolean or a mapping, got {}".format(value))

            for k in value:
                if k not in config['rounding']:
                    raise ValueError("Unknown rounding option '{}' in {}".format(k, source))
            config['rounding'].update(value)
        else:
            config[key] = value


def decode_walk(config: Config) -> Optional[RandomWalk]:
    """
    Builds the random walk described by the 'walk' option, which can be either a name or a {'name', 'params'} dict.
    The 'delta' option is forwarded to the ball walk.
    """
    walk_config = config.get('walk', None)
    if not walk_config:
        return None

    if isinstance(walk_config, str):
        name, params = walk_config, {}
    else:
        name, params = walk_config['name'], copy.deepcopy(walk_config.get('params', {}))

    if name.upper().replace('_', '-') == 'BALL-WALK' and config.get('delta', None) is not None:
        params.setdefault('delta', config['delta'])

    return get_walk(name, **params)


def decode_rounding(config: Config) -> Optional[RoundingAlgorithm]:
    rounding_config = dict(config.get('rounding', {}))

    if not rounding_config.pop('enabled', False):
        return None

    return RoundingAlgorithm(walk=decode_walk(config), walk_length=__per_phase_or_none(config.get('walk_length')), **rounding_config)


def decode_estimator(config: Config) -> VolumeEstimator:
    return VolumeEstimator(
        walk=decode_walk(config),
        n_samples=config['n_samples'],
        walk_length=config['walk_length'],
        schedule=config['schedule'],
        target_ratio=config['target_ratio'],
        rounding=decode_rounding(config),
        n_jobs=config['n_jobs'],
        max_phase_retries=config['max_phase_retries'],
        burn_in=config['burn_in'],
        seed=config['seed'],
    )


def configure_logging(config: Config) -> None:
    setup_logging(verbose=bool(config.get('verbose', False)))


def __per_phase_or_none(value):
    if isinstance(value, (list, tuple)):
        return value[0]
    return value
