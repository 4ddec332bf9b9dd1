"""Nearest-index lookup and index-sequence construction for x-axis slicing.

Every cut bound is mapped to the position of the closest x-axis value. Ties
resolve to the lowest position, matching a first-minimum scan. Axes that are
finite and strictly monotonic take a binary-search path which returns the
same positions as the full scan.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from spectro_slice.engine.errors import EmptyAxisError, InvalidRangeError

__all__ = [
    "CutRange",
    "nearest_index",
    "nearest_indices",
    "range_index_sequence",
    "combined_index_sequence",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CutRange:
    lower: float
    upper: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "lower", _as_bound(self.lower))
        object.__setattr__(self, "upper", _as_bound(self.upper))

    def as_tuple(self) -> Tuple[float, float]:
        return (self.lower, self.upper)


def _as_bound(value: object) -> float:
    try:
        bound = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise InvalidRangeError(f"Cut bound {value!r} is not numeric") from exc
    if not np.isfinite(bound):
        raise InvalidRangeError(f"Cut bound {value!r} is not finite")
    return bound


def _prepare_axis(xs: Sequence[float] | np.ndarray) -> Tuple[np.ndarray, int]:
    """Return the axis as a flat float array and its monotonic direction.

    Direction is ``1`` for strictly ascending, ``-1`` for strictly descending
    and ``0`` otherwise (including axes holding non-finite values).
    """

    try:
        axis = np.asarray(xs, dtype=float).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise InvalidRangeError("x-axis values must be numeric") from exc
    if axis.size == 0:
        raise EmptyAxisError("Cannot look up nearest index on an empty x-axis")

    if axis.size < 2 or not np.all(np.isfinite(axis)):
        return axis, 0
    steps = np.diff(axis)
    if np.all(steps > 0):
        return axis, 1
    if np.all(steps < 0):
        return axis, -1
    return axis, 0


def _nearest_scan(axis: np.ndarray, query: float) -> int:
    distances = np.abs(axis - query)
    if not np.any(np.isfinite(distances)):
        raise InvalidRangeError(f"No finite distance between {query!r} and the x-axis")
    # NaN entries are never selected; infinite ones lose to any finite distance
    distances[np.isnan(distances)] = np.inf
    return int(np.argmin(distances))


def _nearest_sorted(axis: np.ndarray, query: float, direction: int) -> int:
    ascending = axis if direction > 0 else axis[::-1]
    n = ascending.size
    pos = int(np.searchsorted(ascending, query, side="left"))

    candidates = [idx for idx in (pos - 1, pos) if 0 <= idx < n]
    if direction < 0:
        candidates = [n - 1 - idx for idx in candidates]
    distance, best = min((abs(axis[idx] - query), idx) for idx in candidates)

    # Rounded distances can tie with a neighbour further from the query
    while best > 0 and abs(axis[best - 1] - query) == distance:
        best -= 1
    return best


def _lookup(axis: np.ndarray, direction: int, query: object) -> int:
    bound = _as_bound(query)
    if direction:
        return _nearest_sorted(axis, bound, direction)
    return _nearest_scan(axis, bound)


def nearest_index(query: float, xs: Sequence[float] | np.ndarray) -> int:
    """Position in ``xs`` of the value closest to ``query`` (first on ties)."""

    axis, direction = _prepare_axis(xs)
    return _lookup(axis, direction, query)


def nearest_indices(queries: Iterable[float], xs: Sequence[float] | np.ndarray) -> np.ndarray:
    axis, direction = _prepare_axis(xs)
    if direction:
        logger.debug("Using sorted-axis lookup for %d-point x-axis", axis.size)
    return np.array([_lookup(axis, direction, q) for q in queries], dtype=np.intp)


def _inclusive_range(start: int, stop: int) -> np.ndarray:
    step = 1 if start <= stop else -1
    return np.arange(start, stop + step, step, dtype=np.intp)


def range_index_sequence(xaxis: Sequence[float] | np.ndarray, cut: CutRange) -> np.ndarray:
    """Inclusive positions from the ``lower`` match to the ``upper`` match.

    The sequence counts down when the lower bound maps to a later position
    than the upper bound.
    """

    start, stop = nearest_indices(cut.as_tuple(), xaxis)
    return _inclusive_range(int(start), int(stop))


def combined_index_sequence(
    xaxis: Sequence[float] | np.ndarray,
    cuts: Sequence[CutRange],
) -> np.ndarray:
    """Concatenate per-range sequences in the given order.

    Overlapping ranges contribute duplicate positions; nothing is sorted or
    deduplicated.
    """

    axis, direction = _prepare_axis(xaxis)
    if direction:
        logger.debug("Using sorted-axis lookup for %d-point x-axis", axis.size)
    pieces: List[np.ndarray] = []
    for cut in cuts:
        start = _lookup(axis, direction, cut.lower)
        stop = _lookup(axis, direction, cut.upper)
        pieces.append(_inclusive_range(start, stop))
    if not pieces:
        return np.array([], dtype=np.intp)
    return np.concatenate(pieces)
