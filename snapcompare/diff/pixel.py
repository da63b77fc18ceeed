"""Pixel-diff algorithm interface shared by the image kernels."""

from __future__ import annotations

from typing import Protocol

from snapcompare.models.pixel_grid import PixelGrid

# Colors written into the visualization grid
DIFF_COLOR = (255, 0, 0)
ANTI_ALIASING_COLOR = (255, 255, 0)


class PixelDiffAlgorithm(Protocol):
    def count_differences(
        self, expected: PixelGrid, actual: PixelGrid, output: PixelGrid
    ) -> int:
        """Count differing pixels and draw the visualization into ``output``."""
        ...


def check_same_size(expected: PixelGrid, actual: PixelGrid, output: PixelGrid) -> None:
    if not (expected.same_size(actual) and expected.same_size(output)):
        raise ValueError(
            f"Pixel grids must share dimensions: expected {expected.size}, "
            f"actual {actual.size}, output {output.size}"
        )
