"""Comparison options shared by every comparator."""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from snapcompare.errors import UnknownComparatorError


class ComparatorAlgorithm(str, Enum):
    PERCEPTUAL_THRESHOLD = "perceptual-threshold"
    COLOR_DISTANCE_CIE94 = "color-distance-cie94"


DEFAULT_THRESHOLD = 0.2


class ComparisonOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # Per-pixel color tolerance, perceptual-threshold only
    threshold: float = Field(default=DEFAULT_THRESHOLD, ge=0.0, le=1.0)

    # Pixel caps; when both are set the stricter one wins
    max_diff_pixels: Optional[int] = Field(default=None, ge=0, alias="maxDiffPixels")
    max_diff_pixel_ratio: Optional[float] = Field(
        default=None, ge=0.0, le=1.0, alias="maxDiffPixelRatio"
    )

    # Kept as a plain string so unknown names reach the image comparator
    comparator_algorithm: str = Field(
        default=ComparatorAlgorithm.PERCEPTUAL_THRESHOLD.value,
        alias="comparatorAlgorithm",
    )

    @classmethod
    def merge(
        cls, options: Union["ComparisonOptions", Mapping[str, Any], None] = None
    ) -> "ComparisonOptions":
        """Build the effective options for one comparison call."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        # Absent and None mean the same thing: fall back to the default
        return cls(**{k: v for k, v in dict(options).items() if v is not None})

    def resolve_algorithm(self) -> ComparatorAlgorithm:
        try:
            return ComparatorAlgorithm(self.comparator_algorithm)
        except ValueError:
            raise UnknownComparatorError(self.comparator_algorithm) from None

    def pixel_cap(self, total_pixels: int) -> float:
        """Largest number of differing pixels that still counts as a match."""
        ratio_cap = (
            total_pixels * self.max_diff_pixel_ratio
            if self.max_diff_pixel_ratio is not None
            else None
        )
        if self.max_diff_pixels is not None and ratio_cap is not None:
            return min(self.max_diff_pixels, ratio_cap)
        if self.max_diff_pixels is not None:
            return self.max_diff_pixels
        if ratio_cap is not None:
            return ratio_cap
        return 0

    @classmethod
    def load(cls, path: str | Path) -> "ComparisonOptions":
        """Load options from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Options file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls.merge(data)

    def save(self, path: str | Path) -> None:
        """Save options to a JSON file using the camelCase keys."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(by_alias=True), f, indent=2)
