__version__ = "0.1.0"

from spectro_slice.engine.errors import (
    DimensionMismatchError,
    EmptyAxisError,
    InvalidRangeError,
    MissingColumnError,
    SliceError,
)
from spectro_slice.engine.indexing import (
    CutRange,
    combined_index_sequence,
    nearest_index,
    nearest_indices,
    range_index_sequence,
)
from spectro_slice.engine.pipeline import (
    normalise_cut_ranges,
    slice_xvalues,
    slice_xvalues_with_recipe,
)
from spectro_slice.engine.recipe_model import SliceRecipe

__all__ = [
    "CutRange",
    "DimensionMismatchError",
    "EmptyAxisError",
    "InvalidRangeError",
    "MissingColumnError",
    "SliceError",
    "SliceRecipe",
    "combined_index_sequence",
    "nearest_index",
    "nearest_indices",
    "normalise_cut_ranges",
    "range_index_sequence",
    "slice_xvalues",
    "slice_xvalues_with_recipe",
]
