"""Rolling-window statistics shared by the safety scoring."""

from typing import Callable, Iterable, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


def rolling_average(values: Sequence[float]) -> float:
    """Arithmetic mean of a window. Raises ValueError on an empty window."""
    if len(values) == 0:
        raise ValueError("rolling_average of an empty window")
    return float(np.mean(np.asarray(values, dtype=float)))


def last_n(values: Sequence[T], n: int) -> Sequence[T]:
    """Trailing window of at most n items, oldest first."""
    if n <= 0:
        return values[:0]
    return values[-n:]


def is_monotonic_decreasing(values: Sequence[float]) -> bool:
    """Strictly decreasing. Windows shorter than two values are not a trend."""
    if len(values) < 2:
        return False
    return bool(np.all(np.diff(np.asarray(values, dtype=float)) < 0))


def is_monotonic_non_decreasing(values: Sequence[float]) -> bool:
    """Each value >= the previous one. Windows shorter than two values are not a trend."""
    if len(values) < 2:
        return False
    return bool(np.all(np.diff(np.asarray(values, dtype=float)) >= 0))


def fraction_where(values: Sequence[float], predicate: Callable[[float], bool]) -> float:
    """Share of the window satisfying the predicate, 0.0 for an empty window."""
    if len(values) == 0:
        return 0.0
    return sum(1 for value in values if predicate(value)) / len(values)


def longest_run(items: Iterable[T], predicate: Callable[[T], bool]) -> int:
    """Length of the longest consecutive run of items satisfying the predicate."""
    current = 0
    longest = 0
    for item in items:
        if predicate(item):
            current += 1
            longest = max(longest, current)
        else:
            current = 0
    return longest
