"""Raw RGBA pixel grids exchanged between codecs and pixel-diff kernels."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

CHANNELS = 4


@dataclass
class PixelGrid:
    width: int
    height: int
    data: bytearray  # row-major RGBA, one byte per sample

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid grid size {self.width}x{self.height}")
        if not isinstance(self.data, bytearray):
            self.data = bytearray(self.data)
        expected = self.width * self.height * CHANNELS
        if len(self.data) != expected:
            raise ValueError(
                f"Grid {self.width}x{self.height} needs {expected} bytes, got {len(self.data)}"
            )

    @classmethod
    def blank(cls, width: int, height: int) -> "PixelGrid":
        return cls(width, height, bytearray(width * height * CHANNELS))

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    @property
    def total_pixels(self) -> int:
        return self.width * self.height

    def same_size(self, other: "PixelGrid") -> bool:
        return self.size == other.size

    def pixels(self) -> np.ndarray:
        """Writable (height, width, 4) uint8 view over ``data``."""
        return np.frombuffer(self.data, dtype=np.uint8).reshape(
            self.height, self.width, CHANNELS
        )
