"""Tests for verdicts, pixel grids and text edits."""

import pytest

from snapcompare.models.pixel_grid import PixelGrid
from snapcompare.models.text_edit import EditKind, TextEdit, actual_text, expected_text
from snapcompare.models.verdict import MATCH, Match, Mismatch


class TestVerdict:
    """Tests for Match and Mismatch."""

    def test_match_wire_shape_is_none(self):
        assert MATCH.matched is True
        assert MATCH.to_wire() is None
        assert Match() == MATCH

    def test_mismatch_without_diff(self):
        verdict = Mismatch(message="Buffers differ")
        assert verdict.matched is False
        assert verdict.to_wire() == {"message": "Buffers differ"}

    def test_mismatch_with_diff(self):
        verdict = Mismatch(message="3 pixels", diff=b"\x89PNG")
        assert verdict.to_wire() == {"message": "3 pixels", "diff": b"\x89PNG"}


class TestPixelGrid:
    """Tests for PixelGrid construction."""

    def test_blank(self):
        grid = PixelGrid.blank(3, 2)
        assert grid.size == (3, 2)
        assert grid.total_pixels == 6
        assert len(grid.data) == 24
        assert not any(grid.data)

    def test_wrong_buffer_length(self):
        with pytest.raises(ValueError):
            PixelGrid(2, 2, bytearray(15))

    def test_non_positive_size(self):
        with pytest.raises(ValueError):
            PixelGrid(0, 2, bytearray())

    def test_pixels_view_is_writable(self):
        grid = PixelGrid.blank(2, 2)
        grid.pixels()[1, 0] = (1, 2, 3, 4)
        assert grid.data[8:12] == bytearray([1, 2, 3, 4])

    def test_same_size(self):
        assert PixelGrid.blank(2, 3).same_size(PixelGrid.blank(2, 3))
        assert not PixelGrid.blank(2, 3).same_size(PixelGrid.blank(3, 2))


class TestTextEdit:
    """Tests for rebuilding texts from edits."""

    def test_rebuild_both_sides(self):
        edits = [
            TextEdit(EditKind.EQUAL, "ab"),
            TextEdit(EditKind.DELETE, "d"),
            TextEdit(EditKind.INSERT, "c"),
        ]
        assert actual_text(edits) == "abc"
        assert expected_text(edits) == "abd"
