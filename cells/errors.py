"""
cellstate • cells: error types

Every failure raised while building or parsing cells is a malformed-input
error (category ``bad_data``); the subclasses only narrow the code.
"""

from __future__ import annotations

from core.errors import DeserializationError, ErrorCode, MalformedInput


class CellUnderflow(MalformedInput):
    """Read past the end of a cell's bits or references (truncated input)."""

    default_code = ErrorCode.UNDERFLOW


class CellOverflow(MalformedInput):
    """Builder limits exceeded, or a value that does not fit its field."""

    default_code = ErrorCode.OVERFLOW


class UnknownTag(MalformedInput):
    """A constructor tag or discriminator with no known meaning."""

    default_code = ErrorCode.UNKNOWN_TAG


class PrunedCellAccess(MalformedInput):
    """Attempt to parse the contents of a pruned-branch placeholder."""

    default_code = ErrorCode.PRUNED_ACCESS


__all__ = [
    "CellUnderflow",
    "CellOverflow",
    "UnknownTag",
    "PrunedCellAccess",
    "DeserializationError",
]
