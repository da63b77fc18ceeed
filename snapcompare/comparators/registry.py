"""Comparator registry: picks a comparator for a content type.

This is the public entry point::

    comparator = get_comparator("image/png")
    verdict = comparator(actual_bytes, expected_bytes, {"maxDiffPixels": 10})
    if not verdict.matched:
        print(verdict.message)
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional, Protocol, Union

from snapcompare.codecs.image_codec import ImageFormat
from snapcompare.comparators.binary import compare_buffers_or_strings
from snapcompare.comparators.image import ImageComparator, ImageComparatorConfig
from snapcompare.comparators.text import compare_text
from snapcompare.models.options import ComparisonOptions
from snapcompare.models.verdict import Verdict

logger = logging.getLogger(__name__)

TEXT_CONTENT_TYPE = "text/plain"


class Comparator(Protocol):
    def __call__(
        self,
        actual: Any,
        expected: bytes,
        options: Union[ComparisonOptions, Mapping[str, Any], None] = None,
    ) -> Verdict: ...


class ContentKind(str, Enum):
    IMAGE = "image"
    TEXT = "text"
    BINARY = "binary"


def classify(content_type: Optional[str]) -> tuple[ContentKind, Optional[ImageFormat]]:
    """Map a content type onto the closed set of comparator kinds."""
    if content_type == TEXT_CONTENT_TYPE:
        return ContentKind.TEXT, None
    for image_format in ImageFormat:
        if content_type == image_format.value:
            return ContentKind.IMAGE, image_format
    return ContentKind.BINARY, None


def get_comparator(content_type: Optional[str]) -> Comparator:
    kind, image_format = classify(content_type)
    logger.debug("Selected %s comparator for content type %r", kind.value, content_type)
    match kind:
        case ContentKind.IMAGE:
            return ImageComparator(ImageComparatorConfig(image_format=image_format))
        case ContentKind.TEXT:
            return compare_text
        case ContentKind.BINARY:
            return compare_buffers_or_strings
