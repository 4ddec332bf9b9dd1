"""Exceptions raised while slicing spectral tables."""

from __future__ import annotations


class SliceError(ValueError):
    """Base class for all slicing failures."""


class MissingColumnError(SliceError, KeyError):
    def __init__(self, column: str, available: object = ()):
        self.column = column
        self.available = list(available)
        super().__init__(f"Column {column!r} not found in table (available: {self.available})")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class EmptyAxisError(SliceError):
    pass


class InvalidRangeError(SliceError):
    pass


class DimensionMismatchError(SliceError):
    pass
