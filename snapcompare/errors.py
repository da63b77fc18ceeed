"""Fatal error types.

Comparison outcomes are never raised; these cover caller mistakes that must
abort the comparison instead of turning into a verdict.
"""

from __future__ import annotations


class SnapCompareError(Exception):
    """Base class for fatal comparison errors."""


class UnknownComparatorError(SnapCompareError, ValueError):
    """The options name a pixel-diff algorithm that does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Configuration specifies unknown comparator "{name}"')


class ImageDecodeError(SnapCompareError):
    """An image buffer could not be decoded, or is too large to decode."""
