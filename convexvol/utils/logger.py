#  Copyright 2019 École Polytechnique
#
#  Authorship
#    Luciano Di Palma <luciano.di-palma@polytechnique.edu>
#    Enhui Huang <enhui.huang@polytechnique.edu>
#
#  Disclaimer
#    THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED
#    TO THE WARRANTIES OF MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NON-INFRINGEMENT. IN NO EVENT SHALL
#    THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION OF
#    CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
#    IN THE SOFTWARE.
from __future__ import annotations

import logging
import logging.config
import os
from typing import Optional

import yaml

RESOURCES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'resources')


def setup_logging(verbose: bool = False, config_file: Optional[str] = None) -> None:
    """
    Configures the 'convexvol' loggers from a YAML dictConfig file.

    :param verbose: if True, progress messages (rounding iterations, volume phases) are printed at INFO level.
    Otherwise, only warnings and errors are shown.
    :param config_file: path to a custom logging configuration. Defaults to the packaged 'logging.yaml'.
    """
    if config_file is None:
        config_file = os.path.join(RESOURCES_DIR, 'logging.yaml')

    with open(config_file, 'r') as f:
        config = yaml.safe_load(f)

    logging.config.dictConfig(config)
    set_verbosity(verbose)


def set_verbosity(verbose: bool) -> None:
    logging.getLogger('convexvol').setLevel(logging.INFO if verbose else logging.WARNING)
