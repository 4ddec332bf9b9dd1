import numpy as np
import pandas as pd
import pytest

from spectro_slice.engine.cells import column_count, take_columns
from spectro_slice.engine.errors import DimensionMismatchError, MissingColumnError
from spectro_slice.engine.table import get_column, row_count, row_labels, with_columns


def test_take_columns_on_dense_cells():
    matrix = np.arange(8).reshape(2, 4)
    assert take_columns(matrix, np.array([3, 0, 0])).tolist() == [[3, 0, 0], [7, 4, 4]]
    assert take_columns([5, 6, 7], [2, 1]).tolist() == [7, 6]


def test_take_columns_on_pandas_cells():
    frame = pd.DataFrame([[1, 2, 3]], columns=["a", "b", "c"], index=["r1"])
    taken = take_columns(frame, [2, 0])
    assert list(taken.columns) == ["c", "a"]
    assert list(taken.index) == ["r1"]

    series = pd.Series([10.0, 20.0, 30.0], index=[100, 200, 300])
    taken_series = take_columns(series, [1, 1])
    assert taken_series.tolist() == [20.0, 20.0]
    assert list(taken_series.index) == [200, 200]


def test_column_count_uses_last_dimension():
    assert column_count(np.zeros((3, 7))) == 7
    assert column_count([1, 2, 3]) == 3
    assert column_count(pd.DataFrame(np.zeros((2, 5)))) == 5
    assert column_count(pd.Series([1, 2])) == 2
    with pytest.raises(DimensionMismatchError):
        column_count(4.0)


def test_get_column_and_row_helpers_for_frames():
    table = pd.DataFrame({"x": [1, 2]}, index=["a", "b"])
    assert get_column(table, "x") == [1, 2]
    assert row_count(table) == 2
    assert row_labels(table) == ["a", "b"]
    with pytest.raises(MissingColumnError):
        get_column(table, "y")


def test_row_helpers_for_mappings():
    table = {"x": [1, 2, 3], "y": ["a", "b", "c"]}
    assert row_count(table) == 3
    assert row_labels(table) == [0, 1, 2]
    with pytest.raises(ValueError):
        row_count({"x": [1], "y": [1, 2]})


def test_with_columns_stores_equal_shaped_arrays_as_cells():
    table = pd.DataFrame({"id": [1, 2], "spc": [None, None]})
    updated = with_columns(table, {"spc": [np.zeros((2, 3)), np.ones((2, 3))]})
    assert updated["spc"].iloc[1].shape == (2, 3)
    assert table["spc"].isna().all()


def test_with_columns_rejects_wrong_length_and_unknown_tables():
    table = pd.DataFrame({"spc": [None, None]})
    with pytest.raises(ValueError):
        with_columns(table, {"spc": [1]})
    with pytest.raises(TypeError):
        with_columns([1, 2], {"spc": [1, 2]})


def test_column_count_rejects_ragged_nested_lists():
    with pytest.raises(DimensionMismatchError, match="irregular shape"):
        column_count([[1.0, 2.0], [3.0]])
