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

from typing import Optional, Union, List

import numpy as np

MAX_SEED = 2 ** 31 - 1


def get_random_state(seed: Optional[Union[int, np.random.RandomState]]) -> np.random.RandomState:
    return seed if isinstance(seed, np.random.RandomState) else np.random.RandomState(seed)


def spawn_seeds(rng: np.random.RandomState, n: int) -> List[int]:
    """
    Draws independent seeds for 'n' child chains. The seeds are drawn up front by the caller, so the result does not
    depend on the order in which the chains are later executed.
    """
    return [int(s) for s in rng.randint(0, MAX_SEED, size=n)]


def random_direction(dim: int, rng: np.random.RandomState) -> np.ndarray:
    """
    :return: a vector uniformly distributed over the unit sphere
    """
    direction = rng.normal(size=dim)
    norm = np.linalg.norm(direction)

    while norm == 0:
        direction = rng.normal(size=dim)
        norm = np.linalg.norm(direction)

    return direction / norm


def uniform_ball(dim: int, rng: np.random.RandomState, radius: float = 1.0) -> np.ndarray:
    """
    :return: a point uniformly distributed inside the ball B(0, radius)
    """
    return radius * rng.uniform() ** (1.0 / dim) * random_direction(dim, rng)
