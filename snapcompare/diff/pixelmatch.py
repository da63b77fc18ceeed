"""Perceptual threshold pixel diff, after the pixelmatch algorithm.

Color difference is measured in YIQ space. A pixel whose difference exceeds
``35215 * threshold**2`` counts as changed, unless it looks like an
anti-aliased edge in either image. Anti-aliasing is detected from the
brightness of the 3x3 neighbourhood.
"""

from __future__ import annotations

import numpy as np

from snapcompare.diff.pixel import ANTI_ALIASING_COLOR, DIFF_COLOR, check_same_size
from snapcompare.models.pixel_grid import PixelGrid

# Largest possible YIQ delta between two colors
MAX_YIQ_DELTA = 35215


def _blend(channel: np.ndarray, alpha: np.ndarray) -> np.ndarray:
    return 255 + (channel - 255) * alpha


def _rgb2y(r, g, b):
    return r * 0.29889531 + g * 0.58662247 + b * 0.11448223


def _rgb2i(r, g, b):
    return r * 0.59597799 - g * 0.27417610 - b * 0.32180189


def _rgb2q(r, g, b):
    return r * 0.21147017 - g * 0.52261711 + b * 0.31114694


def _blended_rgb(pixels: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    px = pixels.astype(np.float64)
    alpha = px[..., 3] / 255
    return _blend(px[..., 0], alpha), _blend(px[..., 1], alpha), _blend(px[..., 2], alpha)


def _color_delta(img1: np.ndarray, img2: np.ndarray) -> np.ndarray:
    r1, g1, b1 = _blended_rgb(img1)
    r2, g2, b2 = _blended_rgb(img2)
    y = _rgb2y(r1, g1, b1) - _rgb2y(r2, g2, b2)
    i = _rgb2i(r1, g1, b1) - _rgb2i(r2, g2, b2)
    q = _rgb2q(r1, g1, b1) - _rgb2q(r2, g2, b2)
    delta = 0.5053 * y * y + 0.299 * i * i + 0.1957 * q * q
    delta[(img1 == img2).all(axis=-1)] = 0
    return delta


def _brightness(img: np.ndarray) -> np.ndarray:
    return _rgb2y(*_blended_rgb(img))


# 3x3 neighbour offsets, x outer and y inner, so ties resolve like a scan
_OFFSETS_X = np.array([dx for dx in (-1, 0, 1) for dy in (-1, 0, 1) if dx or dy])
_OFFSETS_Y = np.array([dy for dx in (-1, 0, 1) for dy in (-1, 0, 1) if dx or dy])

# candidates are processed in batches to bound the (8, n) temporaries
BATCH_SIZE = 1 << 16


def _neighbours(
    xs: np.ndarray, ys: np.ndarray, width: int, height: int
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    nx = xs[None, :] + _OFFSETS_X[:, None]
    ny = ys[None, :] + _OFFSETS_Y[:, None]
    inside = (nx >= 0) & (nx < width) & (ny >= 0) & (ny < height)
    return np.clip(nx, 0, width - 1), np.clip(ny, 0, height - 1), inside


def _on_edge(xs: np.ndarray, ys: np.ndarray, width: int, height: int) -> np.ndarray:
    return ((xs == 0) | (xs == width - 1) | (ys == 0) | (ys == height - 1)).astype(np.int64)


def _has_many_siblings(
    img: np.ndarray, xs: np.ndarray, ys: np.ndarray, width: int, height: int
) -> np.ndarray:
    nx, ny, inside = _neighbours(xs, ys, width, height)
    same = (img[ny, nx] == img[ys, xs][None]).all(axis=-1) & inside
    return _on_edge(xs, ys, width, height) + same.sum(axis=0) > 2


def _antialiased(
    img: np.ndarray,
    brightness: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    width: int,
    height: int,
    other: np.ndarray,
) -> np.ndarray:
    nx, ny, inside = _neighbours(xs, ys, width, height)
    delta = brightness[ys, xs][None, :] - brightness[ny, nx]
    zeroes = _on_edge(xs, ys, width, height) + ((delta == 0) & inside).sum(axis=0)

    darker = np.where(inside & (delta < 0), delta, 0.0)
    brighter = np.where(inside & (delta > 0), delta, 0.0)
    cols = np.arange(len(xs))
    lo = darker.argmin(axis=0)
    hi = brighter.argmax(axis=0)
    lo_x, lo_y = nx[lo, cols], ny[lo, cols]
    hi_x, hi_y = nx[hi, cols], ny[hi, cols]

    # more than two equal siblings, or no darker and brighter neighbour,
    # means it's not an anti-aliased edge
    edge = (zeroes <= 2) & (darker[lo, cols] < 0) & (brighter[hi, cols] > 0)
    return edge & (
        (
            _has_many_siblings(img, lo_x, lo_y, width, height)
            & _has_many_siblings(other, lo_x, lo_y, width, height)
        )
        | (
            _has_many_siblings(img, hi_x, hi_y, width, height)
            & _has_many_siblings(other, hi_x, hi_y, width, height)
        )
    )


class PixelmatchDiff:
    def __init__(
        self,
        threshold: float = 0.2,
        include_anti_aliasing: bool = False,
        alpha: float = 0.1,
    ):
        self.threshold = threshold
        self.include_anti_aliasing = include_anti_aliasing
        self.alpha = alpha

    def _draw_gray(self, img: np.ndarray, out: np.ndarray) -> None:
        px = img.astype(np.float64)
        luma = _rgb2y(px[..., 0], px[..., 1], px[..., 2])
        val = _blend(luma, self.alpha * px[..., 3] / 255)
        gray = np.clip(val, 0, 255).astype(np.uint8)
        out[..., 0] = gray
        out[..., 1] = gray
        out[..., 2] = gray
        out[..., 3] = 255

    def count_differences(
        self, expected: PixelGrid, actual: PixelGrid, output: PixelGrid
    ) -> int:
        check_same_size(expected, actual, output)
        img1 = expected.pixels()
        img2 = actual.pixels()
        out = output.pixels()
        width, height = expected.size

        self._draw_gray(img1, out)
        if expected.data == actual.data:
            return 0

        max_delta = MAX_YIQ_DELTA * self.threshold * self.threshold
        delta = _color_delta(img1, img2)
        ys, xs = np.nonzero(np.abs(delta) > max_delta)
        if len(ys) == 0:
            return 0

        anti_aliased = np.zeros(len(ys), dtype=bool)
        if not self.include_anti_aliasing:
            brightness1 = _brightness(img1)
            brightness2 = _brightness(img2)
            for start in range(0, len(ys), BATCH_SIZE):
                bx, by = xs[start:start + BATCH_SIZE], ys[start:start + BATCH_SIZE]
                anti_aliased[start:start + BATCH_SIZE] = _antialiased(
                    img1, brightness1, bx, by, width, height, img2
                ) | _antialiased(img2, brightness2, bx, by, width, height, img1)

        out[ys[anti_aliased], xs[anti_aliased]] = (*ANTI_ALIASING_COLOR, 255)
        out[ys[~anti_aliased], xs[~anti_aliased]] = (*DIFF_COLOR, 255)
        return int(np.count_nonzero(~anti_aliased))
