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
"""
Process-wide store of sampling diagnostics: rounding iterations, per-phase ratios and timings, total running times.

The store is not synchronized. Metrics must only be written by the coordinating thread, never from inside the worker
threads running independent chains.
"""
from __future__ import annotations

from functools import wraps
from time import perf_counter
from typing import Any, Callable, Dict, TYPE_CHECKING

if TYPE_CHECKING:
    from .types import Metrics


__metrics: Metrics = {}


def __overwrite(current: Any, value: Any) -> Any:
    return value


def __sum(current: Any, value: Any) -> Any:
    return value if current is None else current + value


def __append(current: Any, value: Any) -> Any:
    values = [] if current is None else current
    values.append(value)
    return values


__COMBINERS: Dict[str, Callable[[Any, Any], Any]] = {
    'OVERWRITE': __overwrite,
    'SUM': __sum,
    'APPEND': __append,
}


def flush() -> None:
    """
    Clears all stored metrics. Usually called before each volume estimation.
    """
    __metrics.clear()


def get_metrics() -> Metrics:
    return __metrics


def snapshot(prefix: str = '') -> Metrics:
    """
    :param prefix: only metrics whose name starts with this prefix are returned
    :return: a copy of the stored metrics (lists included), which is not affected by a later flush() or log_metric()
    """
    return {k: (list(v) if isinstance(v, list) else v) for k, v in __metrics.items() if k.startswith(prefix)}


def log_execution_time(key: str, on_duplicates: str = 'overwrite'):
    """
    Decorator storing the running time (in seconds) of each call of the decorated function under 'key'.
    """
    combine = __get_combiner(on_duplicates)

    def time_decorator(func):
        @wraps(func)
        def wrapped_func(*args, **kwargs):
            t0 = perf_counter()
            try:
                return func(*args, **kwargs)
            finally:
                __store(key, perf_counter() - t0, combine)
        return wrapped_func

    return time_decorator


def log_metrics(metrics: Metrics, on_duplicates: str = 'overwrite') -> None:
    combine = __get_combiner(on_duplicates)
    for key, value in metrics.items():
        __store(key, value, combine)


def log_metric(key: str, value: Any, on_duplicates: str = 'overwrite') -> None:
    """
    Stores a single metric.

    :param key: metric's name
    :param value: metric's value
    :param on_duplicates: what to do when 'key' has already been logged:
        - 'overwrite' (default): keep the new value only
        - 'sum': keep the sum of all values (running times, counters)
        - 'append': keep the list of all values (one entry per phase or per iteration)
    """
    __store(key, value, __get_combiner(on_duplicates))


def __store(key: str, value: Any, combine: Callable[[Any, Any], Any]) -> None:
    __metrics[key] = combine(__metrics.get(key, None), value)


def __get_combiner(on_duplicates: str) -> Callable[[Any, Any], Any]:
    try:
        return __COMBINERS[on_duplicates.upper()]
    except KeyError:
        raise ValueError("Unknown option {} for on_duplicates. Available options are: 'overwrite', 'sum', or 'append'".format(on_duplicates)) from None
