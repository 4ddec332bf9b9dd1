"""Storage variants for list-column cells.

A cell is either dense (``numpy`` arrays or nested sequences), a
``pandas.DataFrame`` whose columns are spectral positions, or a
``pandas.Series``. ``take_columns`` and ``column_count`` are the only entry
points the slicer uses.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from spectro_slice.engine.errors import DimensionMismatchError

__all__ = ["as_dense", "column_count", "take_columns"]


def as_dense(cell: Any) -> np.ndarray:
    try:
        arr = np.asarray(cell)
    except ValueError as exc:
        raise DimensionMismatchError("Spectral cell has an irregular shape") from exc
    if arr.ndim == 0:
        raise DimensionMismatchError("Spectral cell must be at least one-dimensional")
    return arr


def column_count(cell: Any) -> int:
    """Number of spectral positions held by ``cell`` (its last dimension)."""

    if isinstance(cell, pd.DataFrame):
        return int(cell.shape[1])
    if isinstance(cell, pd.Series):
        return int(cell.size)
    return int(as_dense(cell).shape[-1])


def take_columns(cell: Any, idx: np.ndarray) -> Any:
    """Select spectral positions ``idx`` from ``cell`` in the given order.

    Repeated positions are repeated in the result. Frames keep their column
    labels, so a frame sliced with overlapping ranges has duplicate labels.
    """

    idx = np.asarray(idx, dtype=np.intp)
    if isinstance(cell, pd.DataFrame):
        return cell.iloc[:, idx]
    if isinstance(cell, pd.Series):
        return cell.iloc[idx]
    return np.take(as_dense(cell), idx, axis=-1)
