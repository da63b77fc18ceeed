"""Text comparator: exact string equality with a styled character diff."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional, Union

from snapcompare.diff.text import SemanticTextDiff, TextDiffAlgorithm
from snapcompare.models.options import ComparisonOptions
from snapcompare.models.verdict import MATCH, Mismatch, Verdict
from snapcompare.reporter.terminal_diff import render_terminal_diff

logger = logging.getLogger(__name__)

DEFAULT_TEXT_DIFF: TextDiffAlgorithm = SemanticTextDiff()


def compare_text(
    actual: Any,
    expected: Union[bytes, str],
    options: Union[ComparisonOptions, Mapping[str, Any], None] = None,
    *,
    text_diff: Optional[TextDiffAlgorithm] = None,
) -> Verdict:
    if not isinstance(actual, str):
        return Mismatch(message="Actual result should be a string")

    # invalid UTF-8 in the baseline becomes U+FFFD and shows up in the diff
    if isinstance(expected, str):
        expected_str = expected
    else:
        expected_str = bytes(expected).decode("utf-8", errors="replace")
    if expected_str == actual:
        return MATCH

    edits = (text_diff or DEFAULT_TEXT_DIFF).diff(expected_str, actual)
    logger.info("Text differs from baseline (%d edit spans)", len(edits))
    return Mismatch(message=render_terminal_diff(edits))
