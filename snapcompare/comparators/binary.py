"""Fallback comparator for arbitrary content: exact byte equality."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Union

from snapcompare.comparators.text import compare_text
from snapcompare.models.options import ComparisonOptions
from snapcompare.models.verdict import MATCH, Mismatch, Verdict

logger = logging.getLogger(__name__)

BUFFER_TYPES = (bytes, bytearray, memoryview)


def compare_buffers_or_strings(
    actual: Any,
    expected: bytes,
    options: Union[ComparisonOptions, Mapping[str, Any], None] = None,
) -> Verdict:
    # strings are always compared as text, whatever the declared content type
    if isinstance(actual, str):
        return compare_text(actual, expected, options)
    if not isinstance(actual, BUFFER_TYPES):
        return Mismatch(message="Actual result should be a Buffer or a string.")
    if bytes(actual) != bytes(expected):
        logger.info("Buffers differ (%d vs %d bytes)", len(actual), len(expected))
        return Mismatch(message="Buffers differ")
    return MATCH
