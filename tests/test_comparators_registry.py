"""Tests for comparator selection."""

import pytest

from snapcompare.codecs.image_codec import ImageFormat
from snapcompare.comparators.binary import compare_buffers_or_strings
from snapcompare.comparators.image import ImageComparator
from snapcompare.comparators.registry import ContentKind, classify, get_comparator
from snapcompare.comparators.text import compare_text
from snapcompare.models.verdict import MATCH, Mismatch


class TestClassify:
    """Tests for classify."""

    @pytest.mark.parametrize(
        "content_type,expected",
        [
            ("image/png", (ContentKind.IMAGE, ImageFormat.PNG)),
            ("image/jpeg", (ContentKind.IMAGE, ImageFormat.JPEG)),
            ("text/plain", (ContentKind.TEXT, None)),
            ("application/json", (ContentKind.BINARY, None)),
            ("image/gif", (ContentKind.BINARY, None)),
            ("", (ContentKind.BINARY, None)),
            (None, (ContentKind.BINARY, None)),
        ],
    )
    def test_content_types(self, content_type, expected):
        assert classify(content_type) == expected


class TestGetComparator:
    """Tests for get_comparator."""

    def test_png(self):
        comparator = get_comparator("image/png")
        assert isinstance(comparator, ImageComparator)
        assert comparator.config.image_format is ImageFormat.PNG

    def test_jpeg(self):
        comparator = get_comparator("image/jpeg")
        assert isinstance(comparator, ImageComparator)
        assert comparator.config.image_format is ImageFormat.JPEG

    def test_text(self):
        assert get_comparator("text/plain") is compare_text

    def test_fallback(self):
        assert get_comparator("application/octet-stream") is compare_buffers_or_strings
        assert get_comparator(None) is compare_buffers_or_strings

    @pytest.mark.parametrize(
        "content_type, kind",
        [("image/jpeg", ContentKind.IMAGE), ("text/plain", ContentKind.TEXT), ("x/y", ContentKind.BINARY)],
    )
    def test_every_kind_has_a_comparator(self, content_type, kind):
        assert classify(content_type)[0] is kind
        assert callable(get_comparator(content_type))

    @pytest.mark.parametrize("content_type", ["image/png", "text/plain", "application/x-thing", None])
    def test_identical_content_matches(self, content_type, png_bytes):
        data = png_bytes(8, 8) if content_type == "image/png" else b"same content"
        actual = data.decode() if content_type == "text/plain" else data
        assert get_comparator(content_type)(actual, data) == MATCH

    def test_text_type_with_bytes_actual(self):
        verdict = get_comparator("text/plain")(b"abc", b"abc")
        assert verdict == Mismatch(message="Actual result should be a string")
