"""Image comparator: decode, pixel-diff, and apply the pixel caps."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from snapcompare.codecs.image_codec import ImageCodec, ImageFormat, PngCodec, codec_for
from snapcompare.diff.cie94 import Cie94Diff
from snapcompare.diff.pixel import PixelDiffAlgorithm
from snapcompare.diff.pixelmatch import PixelmatchDiff
from snapcompare.errors import UnknownComparatorError
from snapcompare.models.options import ComparatorAlgorithm, ComparisonOptions
from snapcompare.models.pixel_grid import PixelGrid
from snapcompare.models.verdict import MATCH, Mismatch, Verdict

logger = logging.getLogger(__name__)

# ΔE*94 of 1.0 is the conventional just-noticeable difference
JND_DELTA_E94 = 1.0

AlgorithmFactory = Callable[[ComparisonOptions], PixelDiffAlgorithm]

DEFAULT_ALGORITHMS: Mapping[ComparatorAlgorithm, AlgorithmFactory] = {
    ComparatorAlgorithm.PERCEPTUAL_THRESHOLD: lambda opts: PixelmatchDiff(threshold=opts.threshold),
    # the fixed JND limit replaces the per-call threshold here
    ComparatorAlgorithm.COLOR_DISTANCE_CIE94: lambda opts: Cie94Diff(max_color_delta_e94=JND_DELTA_E94),
}

# Visualizations are always written as PNG, whatever the input format
_DIFF_CODEC = PngCodec()


@dataclass(frozen=True)
class ImageComparatorConfig:
    image_format: ImageFormat


def diff_ratio(count: int, total_pixels: int) -> float:
    """Share of differing pixels, rounded up to two decimals."""
    return math.ceil(count / total_pixels * 100) / 100


class ImageComparator:
    def __init__(
        self,
        config: ImageComparatorConfig,
        algorithms: Optional[Mapping[ComparatorAlgorithm, AlgorithmFactory]] = None,
    ):
        self.config = config
        self.algorithms = dict(DEFAULT_ALGORITHMS)
        if algorithms:
            self.algorithms.update(algorithms)

    @property
    def codec(self) -> ImageCodec:
        return codec_for(self.config.image_format)

    def __call__(
        self,
        actual: Any,
        expected: bytes,
        options: Union[ComparisonOptions, Mapping[str, Any], None] = None,
    ) -> Verdict:
        if not isinstance(actual, (bytes, bytearray, memoryview)):
            return Mismatch(message="Actual result should be a Buffer.")

        opts = ComparisonOptions.merge(options)
        try:
            algorithm = self.algorithms[opts.resolve_algorithm()](opts)
        except UnknownComparatorError:
            logger.error("Invalid comparator configuration: %r", opts.comparator_algorithm)
            raise

        actual_grid = self.codec.decode(bytes(actual))
        expected_grid = self.codec.decode(bytes(expected))
        if not expected_grid.same_size(actual_grid):
            return Mismatch(
                message=(
                    f"Expected an image {expected_grid.width}px by {expected_grid.height}px, "
                    f"received {actual_grid.width}px by {actual_grid.height}px. "
                )
            )

        diff_grid = PixelGrid.blank(expected_grid.width, expected_grid.height)
        logger.debug(
            "Comparing %dx%d %s images with %s",
            expected_grid.width,
            expected_grid.height,
            self.config.image_format.value,
            opts.comparator_algorithm,
        )
        count = algorithm.count_differences(expected_grid, actual_grid, diff_grid)

        total = expected_grid.total_pixels
        if count <= opts.pixel_cap(total):
            return MATCH

        ratio = diff_ratio(count, total)
        logger.info("%d of %d pixels differ (ratio %.2f)", count, total, ratio)
        return Mismatch(
            message=f"{count} pixels (ratio {ratio:.2f} of all image pixels) are different",
            diff=_DIFF_CODEC.encode(diff_grid),
        )
