"""Named-column access for spectral tables.

Two table variants are supported: a ``pandas.DataFrame`` with object
(list) columns and a plain mapping of column name to a sequence of cells.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Union

import numpy as np
import pandas as pd

from spectro_slice.engine.errors import MissingColumnError

__all__ = ["TableLike", "get_column", "require_columns", "row_count", "row_labels", "with_columns"]

TableLike = Union[pd.DataFrame, Mapping[str, Sequence[Any]]]


def _check_table(table: object) -> None:
    if not isinstance(table, (pd.DataFrame, Mapping)):
        raise TypeError(
            f"Spectral table must be a pandas DataFrame or a mapping of columns, got {type(table).__name__}"
        )


def require_columns(table: TableLike, *names: str) -> None:
    _check_table(table)
    available = list(table.columns) if isinstance(table, pd.DataFrame) else list(table.keys())
    for name in names:
        if name not in available:
            raise MissingColumnError(name, available)


def get_column(table: TableLike, name: str) -> List[Any]:
    require_columns(table, name)
    if isinstance(table, pd.DataFrame):
        return table[name].tolist()
    return list(table[name])


def row_count(table: TableLike) -> int:
    _check_table(table)
    if isinstance(table, pd.DataFrame):
        return len(table.index)
    lengths = {len(column) for column in table.values()}
    if len(lengths) > 1:
        raise ValueError(f"Table columns have differing lengths: {sorted(lengths)}")
    return lengths.pop() if lengths else 0


def row_labels(table: TableLike) -> List[Any]:
    if isinstance(table, pd.DataFrame):
        return list(table.index)
    return list(range(row_count(table)))


def _object_column(values: Sequence[Any]) -> np.ndarray:
    # Filled element-wise so equally shaped arrays stay separate cells
    cells = np.empty(len(values), dtype=object)
    for idx, value in enumerate(values):
        cells[idx] = value
    return cells


def with_columns(table: TableLike, updates: Mapping[str, Sequence[Any]]) -> TableLike:
    """Return a copy of ``table`` with the given columns replaced."""

    require_columns(table, *updates)
    n_rows = row_count(table)
    for name, values in updates.items():
        if len(values) != n_rows:
            raise ValueError(f"Column {name!r} has {len(values)} cells for {n_rows} rows")

    if isinstance(table, pd.DataFrame):
        out = table.copy()
        for name, values in updates.items():
            out[name] = _object_column(values)
        return out

    replaced: Dict[str, Any] = dict(table)
    for name, values in updates.items():
        replaced[name] = list(values)
    return replaced
