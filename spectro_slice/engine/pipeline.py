"""Slice spectral tables to x-axis ranges.

This module holds the table-level operation: cut ranges are normalised once,
each row's x-axis is mapped to a combined index sequence, and the spectrum
and x-axis list-columns are replaced by the selected positions.
"""

from __future__ import annotations

from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
import logging
import multiprocessing
import os
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from spectro_slice.engine.audit import log_step
from spectro_slice.engine.cells import column_count, take_columns
from spectro_slice.engine.errors import (
    DimensionMismatchError,
    EmptyAxisError,
    InvalidRangeError,
    SliceError,
)
from spectro_slice.engine.indexing import CutRange, combined_index_sequence
from spectro_slice.engine.table import TableLike, get_column, require_columns, row_labels, with_columns

if TYPE_CHECKING:
    from spectro_slice.engine.recipe_model import SliceRecipe

__all__ = [
    "RowSliceResult",
    "normalise_cut_ranges",
    "slice_row",
    "slice_xvalues",
    "slice_xvalues_with_recipe",
]

logger = logging.getLogger(__name__)

_LOWER_KEYS = ("lower", "min")
_UPPER_KEYS = ("upper", "max")


def _is_scalar(value: object) -> bool:
    return not isinstance(value, (CutRange, Mapping, str, bytes)) and np.ndim(value) == 0


def _first_present(entry: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return None


def _to_cut_range(entry: object) -> CutRange:
    if isinstance(entry, CutRange):
        return entry
    if isinstance(entry, Mapping):
        lo = _first_present(entry, _LOWER_KEYS)
        hi = _first_present(entry, _UPPER_KEYS)
        if lo is None or hi is None:
            raise InvalidRangeError(f"Cut range {dict(entry)!r} needs both a lower and an upper bound")
        return CutRange(lo, hi)
    if isinstance(entry, (str, bytes)) or _is_scalar(entry):
        raise InvalidRangeError(f"Cut range must be a pair of bounds, got {entry!r}")
    data = list(entry)  # type: ignore[call-overload]
    if len(data) != 2:
        raise InvalidRangeError(f"Cut range must have exactly two bounds, got {len(data)}")
    return CutRange(data[0], data[1])


def normalise_cut_ranges(xvalues_cut: object) -> List[CutRange]:
    """Normalise cut-range configuration into an ordered list of ``CutRange``.

    Accepts ``None``, a single pair, a mapping with ``lower``/``upper`` (or
    ``min``/``max``) keys, or a sequence of such entries. Bounds are kept in
    the order given; a range whose lower bound is above its upper bound
    produces a descending index sequence downstream.
    """

    if xvalues_cut is None:
        return []
    if isinstance(xvalues_cut, (CutRange, Mapping)):
        return [_to_cut_range(xvalues_cut)]
    if isinstance(xvalues_cut, (str, bytes)) or _is_scalar(xvalues_cut):
        raise InvalidRangeError(f"Cut ranges must be pairs of bounds, got {xvalues_cut!r}")

    entries = list(xvalues_cut)  # type: ignore[call-overload]
    if entries and all(_is_scalar(value) for value in entries):
        # A bare (lower, upper) pair
        return [_to_cut_range(entries)]
    return [_to_cut_range(entry) for entry in entries]


@dataclass(frozen=True)
class RowSliceResult:
    xvalues: Any
    spectrum: Any
    indices: np.ndarray


def slice_row(
    xvalues: Any,
    spectrum: Any,
    cuts: Sequence[CutRange],
    *,
    label: object = None,
) -> RowSliceResult:
    """Slice one row's x-axis and spectrum with the combined index sequence."""

    prefix = f"Row {label!r}: " if label is not None else ""
    try:
        indices = combined_index_sequence(xvalues, cuts)
    except (EmptyAxisError, InvalidRangeError) as exc:
        raise type(exc)(f"{prefix}{exc}") from exc

    try:
        n_axis = column_count(xvalues)
        n_spectrum = column_count(spectrum)
    except DimensionMismatchError as exc:
        raise DimensionMismatchError(f"{prefix}{exc}") from exc
    if n_axis != n_spectrum:
        raise DimensionMismatchError(
            f"{prefix}spectrum has {n_spectrum} columns but the x-axis has {n_axis} values"
        )

    return RowSliceResult(
        xvalues=take_columns(xvalues, indices),
        spectrum=take_columns(spectrum, indices),
        indices=indices,
    )


def _slice_row_task(
    label: object,
    xvalues: Any,
    spectrum: Any,
    cuts: Sequence[CutRange],
) -> RowSliceResult:
    return slice_row(xvalues, spectrum, cuts, label=label)


def _default_parallel_workers() -> int:
    return max(1, min(4, os.cpu_count() or 1))


def _resolve_parallel_settings(parallel_cfg: object) -> Tuple[bool, int]:
    if isinstance(parallel_cfg, bool):
        return parallel_cfg, _default_parallel_workers()
    if not isinstance(parallel_cfg, Mapping):
        parallel_cfg = {}

    enabled = parallel_cfg.get("enabled")
    parallel_enabled = bool(enabled) if enabled is not None else False

    workers_value = parallel_cfg.get("workers")
    try:
        workers = int(workers_value) if workers_value is not None else _default_parallel_workers()
    except (TypeError, ValueError):
        workers = _default_parallel_workers()
    if workers < 1:
        workers = _default_parallel_workers()

    return parallel_enabled, workers


def _slice_rows_parallel(
    labels: Sequence[object],
    xvalues: Sequence[Any],
    spectra: Sequence[Any],
    cuts: Sequence[CutRange],
    workers: int,
) -> List[RowSliceResult]:
    ctx = multiprocessing.get_context("spawn")
    results: List[Optional[RowSliceResult]] = [None for _ in labels]
    with ProcessPoolExecutor(mp_context=ctx, max_workers=workers) as executor:
        future_map = {
            executor.submit(_slice_row_task, label, x, spc, cuts): idx
            for idx, (label, x, spc) in enumerate(zip(labels, xvalues, spectra))
        }
        for future in as_completed(future_map):
            idx = future_map[future]
            try:
                results[idx] = future.result()
            except Exception:
                logger.exception("Slicing task failed for row %r", labels[idx])
                for pending in future_map:
                    pending.cancel()
                raise

    missing = [labels[idx] for idx, result in enumerate(results) if result is None]
    if missing:
        raise SliceError(f"Slicing returned no result for rows {missing}")
    return results  # type: ignore[return-value]


def _describe_cuts(cuts: Sequence[CutRange]) -> str:
    return ", ".join(f"{cut.lower:g}-{cut.upper:g}" for cut in cuts)


def slice_xvalues(
    spc_tbl: TableLike,
    xunit_lcol: str = "wavenumbers",
    spc_lcol: str = "spc",
    xvalues_cut: object = None,
    *,
    parallel: Mapping[str, Any] | bool | None = None,
    audit: Optional[List[str]] = None,
) -> TableLike:
    """Slice every spectrum in ``spc_tbl`` to the ranges in ``xvalues_cut``.

    ``xunit_lcol`` names the list-column holding each row's x-axis values and
    ``spc_lcol`` the list-column holding the spectra (one matrix, frame or
    vector per row, with one column per x-axis value). Each range bound is
    matched to the nearest x-axis value of the row; the inclusive position
    sequences of all ranges are concatenated in the order given and used to
    subset both columns.

    Without ranges the table is returned unchanged. Otherwise a new table is
    returned in which only the two named columns differ. A failure on any row
    aborts the whole call.
    """

    cuts = normalise_cut_ranges(xvalues_cut)
    if not cuts:
        return spc_tbl

    if xunit_lcol == spc_lcol:
        raise SliceError(f"x-axis and spectrum columns must differ, both are {spc_lcol!r}")
    require_columns(spc_tbl, xunit_lcol, spc_lcol)
    xvalues = get_column(spc_tbl, xunit_lcol)
    spectra = get_column(spc_tbl, spc_lcol)
    labels = row_labels(spc_tbl)
    logger.debug(
        "Slicing %d rows of %r/%r to %d x-axis ranges",
        len(labels),
        spc_lcol,
        xunit_lcol,
        len(cuts),
    )

    parallel_enabled, parallel_workers = _resolve_parallel_settings(parallel)
    if parallel_enabled and len(labels) > 1 and parallel_workers > 1:
        results = _slice_rows_parallel(labels, xvalues, spectra, cuts, parallel_workers)
    else:
        results = [
            slice_row(x, spc, cuts, label=label)
            for label, x, spc in zip(labels, xvalues, spectra)
        ]

    if audit is not None:
        log_step(
            audit,
            f"Sliced {len(results)} spectra in {spc_lcol!r} to {xunit_lcol} ranges {_describe_cuts(cuts)}",
        )

    return with_columns(
        spc_tbl,
        {
            spc_lcol: [result.spectrum for result in results],
            xunit_lcol: [result.xvalues for result in results],
        },
    )


def slice_xvalues_with_recipe(
    spc_tbl: TableLike,
    recipe: "SliceRecipe",
    *,
    audit: Optional[List[str]] = None,
) -> TableLike:
    errs = recipe.validate()
    if errs:
        raise SliceError("; ".join(errs))
    return slice_xvalues(
        spc_tbl,
        recipe.xunit_lcol,
        recipe.spc_lcol,
        recipe.xvalues_cut,
        parallel=recipe.parallel,
        audit=audit,
    )
