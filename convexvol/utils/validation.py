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

import math
from numbers import Integral, Real

import numpy as np

def assert_positive(value, name, allow_inf=False, allow_none=False):
    __assert_positive(Real, value, name, allow_inf, allow_none)

def assert_non_negative(value, name, allow_inf=False, allow_none=False):
    __assert_non_negative(Real, value, name, allow_inf, allow_none)

def assert_positive_integer(value, name, allow_inf=False, allow_none=False):
    __assert_positive(Integral, value, name, allow_inf, allow_none)

def assert_non_negative_integer(value, name, allow_inf=False, allow_none=False):
    __assert_non_negative(Integral, value, name, allow_inf, allow_none)

def __assert_positive(type, value, name, allow_inf=False, allow_none=False):
    __assert_non_negative(type, value, name, allow_inf, allow_none)
    if value == 0:
        raise ValueError("Expected positive '{}', got 0".format(name))

def __assert_non_negative(type, value, name, allow_inf=False, allow_none=False):
    if value is None:
        if not allow_none:
            raise ValueError("{} cannot be none.".format(name))
        return

    if value == math.inf:
        if not allow_inf:
            raise ValueError("{} cannot be infinity.".format(name))
        return

    if isinstance(value, (bool, np.bool_)) or not isinstance(value, type) or value < 0:
        raise ValueError("'{}' must be a positive, got {}".format(name, value))

def assert_per_phase(value, name):
    """
    Checks a tunable which can be either a single positive integer, or a sequence of positive integers (one per phase).
    """
    if isinstance(value, (list, tuple)):
        if len(value) == 0:
            raise ValueError("'{}' cannot be an empty sequence.".format(name))
        for v in value:
            assert_positive_integer(v, name)
        return

    assert_positive_integer(value, name)
