"""Perceptual color-distance pixel diff using ΔE*94 and SSIM.

Pixels are first compared with the CIE94 color difference. A pixel above the
limit counts as changed when its 3x3 neighbourhood is flat in either image,
because then it cannot be an anti-aliased edge. Otherwise the mean SSIM of
the surrounding window decides whether the change is anti-aliasing noise.

Both images are blended over white and padded with a checkerboard so that
windows near the border have something to look at.
"""

from __future__ import annotations

import numpy as np

from snapcompare.diff.pixel import ANTI_ALIASING_COLOR, DIFF_COLOR, check_same_size
from snapcompare.models.pixel_grid import PixelGrid

VARIANCE_WINDOW_RADIUS = 1
SSIM_WINDOW_RADIUS = 15
PADDING_SIZE = max(VARIANCE_WINDOW_RADIUS, SSIM_WINDOW_RADIUS)
PADDING_COLOR_EVEN = (255, 0, 255)
PADDING_COLOR_ODD = (0, 255, 0)

DYNAMIC_RANGE = 2**8 - 1
SSIM_C1 = (0.01 * DYNAMIC_RANGE) ** 2
SSIM_C2 = (0.03 * DYNAMIC_RANGE) ** 2
ANTI_ALIASING_SSIM = 0.99

# D65 reference white
XN, YN, ZN = 0.950489, 1.0, 1.088840
SIGMA = 6 / 29


def blend_with_white(channel, alpha):
    return 255 + (channel - 255) * alpha


def into_rgb(pixels: np.ndarray, padding: int = PADDING_SIZE) -> np.ndarray:
    """Blend RGBA over white and surround with a checkerboard border.

    Returns an int64 array of shape (height + 2*padding, width + 2*padding, 3).
    """
    height, width = pixels.shape[:2]
    ys, xs = np.indices((height + 2 * padding, width + 2 * padding))
    even = ((ys + xs) % 2 == 0)[..., None]
    out = np.where(even, PADDING_COLOR_EVEN, PADDING_COLOR_ODD).astype(np.int64)

    px = pixels.astype(np.float64)
    alpha = px[..., 3:4] / 255
    blended = blend_with_white(px[..., :3], alpha)
    out[padding : padding + height, padding : padding + width] = blended.astype(np.int64)
    return out


def srgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    c = rgb.astype(np.float64) / 255
    c = np.where(c > 0.04045, ((c + 0.055) / 1.055) ** 2.4, c / 12.92)
    r, g, b = c[..., 0], c[..., 1], c[..., 2]
    x = (r * 0.4124 + g * 0.3576 + b * 0.1805) / XN
    y = (r * 0.2126 + g * 0.7152 + b * 0.0722) / YN
    z = (r * 0.0193 + g * 0.1192 + b * 0.9505) / ZN

    def f(t):
        return np.where(t > SIGMA**3, np.cbrt(t), t / 3 / SIGMA**2 + 4 / 29)

    fx, fy, fz = f(x), f(y), f(z)
    return np.stack([116 * fy - 16, 500 * (fx - fy), 200 * (fy - fz)], axis=-1)


def color_delta_e94(rgb1: np.ndarray, rgb2: np.ndarray) -> np.ndarray:
    lab1 = srgb_to_lab(rgb1)
    lab2 = srgb_to_lab(rgb2)
    delta_l = lab1[..., 0] - lab2[..., 0]
    delta_a = lab1[..., 1] - lab2[..., 1]
    delta_b = lab1[..., 2] - lab2[..., 2]
    c1 = np.hypot(lab1[..., 1], lab1[..., 2])
    c2 = np.hypot(lab2[..., 1], lab2[..., 2])
    delta_c = c1 - c2
    delta_h = np.sqrt(np.maximum(delta_a**2 + delta_b**2 - delta_c**2, 0))
    s_c = 1 + 0.045 * c1
    s_h = 1 + 0.015 * c1
    return np.sqrt(delta_l**2 + (delta_c / s_c) ** 2 + (delta_h / s_h) ** 2)


def rgb_to_gray(rgb: np.ndarray) -> np.ndarray:
    return (77 * rgb[..., 0] + 150 * rgb[..., 1] + 29 * rgb[..., 2] + 128) >> 8


class WindowStats:
    """Summed-area tables for windowed mean, variance and covariance of two channels."""

    def __init__(self, c1: np.ndarray, c2: np.ndarray):
        self.height, self.width = c1.shape
        self._sum1 = self._table(c1)
        self._sum2 = self._table(c2)
        self._sq1 = self._table(c1 * c1)
        self._sq2 = self._table(c2 * c2)
        self._mult = self._table(c1 * c2)

    @staticmethod
    def _table(values: np.ndarray) -> np.ndarray:
        table = np.zeros((values.shape[0] + 1, values.shape[1] + 1), dtype=np.int64)
        table[1:, 1:] = values.cumsum(axis=0).cumsum(axis=1)
        return table

    def bound(self, xs, ys):
        return np.clip(xs, 0, self.width - 1), np.clip(ys, 0, self.height - 1)

    @staticmethod
    def _sum(table, x1, y1, x2, y2):
        return table[y2 + 1, x2 + 1] - table[y1, x2 + 1] - table[y2 + 1, x1] + table[y1, x1]

    def variance_numerators(self, x1, y1, x2, y2):
        """``N**2`` times the variance of each channel, exact in integers."""
        n = (x2 - x1 + 1) * (y2 - y1 + 1)
        s1 = self._sum(self._sum1, x1, y1, x2, y2)
        s2 = self._sum(self._sum2, x1, y1, x2, y2)
        var1 = n * self._sum(self._sq1, x1, y1, x2, y2) - s1 * s1
        var2 = n * self._sum(self._sq2, x1, y1, x2, y2) - s2 * s2
        return var1, var2

    def ssim(self, x1, y1, x2, y2) -> np.ndarray:
        n = ((x2 - x1 + 1) * (y2 - y1 + 1)).astype(np.float64)
        s1 = self._sum(self._sum1, x1, y1, x2, y2).astype(np.float64)
        s2 = self._sum(self._sum2, x1, y1, x2, y2).astype(np.float64)
        mean1 = s1 / n
        mean2 = s2 / n
        var1 = (self._sum(self._sq1, x1, y1, x2, y2) - s1 * s1 / n) / n
        var2 = (self._sum(self._sq2, x1, y1, x2, y2) - s2 * s2 / n) / n
        cov = (self._sum(self._mult, x1, y1, x2, y2) - s1 * s2 / n) / n
        return (
            (2 * mean1 * mean2 + SSIM_C1)
            * (2 * cov + SSIM_C2)
            / (mean1**2 + mean2**2 + SSIM_C1)
            / (var1 + var2 + SSIM_C2)
        )


class Cie94Diff:
    def __init__(self, max_color_delta_e94: float = 1.0):
        self.max_color_delta_e94 = max_color_delta_e94

    def count_differences(
        self, expected: PixelGrid, actual: PixelGrid, output: PixelGrid
    ) -> int:
        check_same_size(expected, actual, output)
        pad = PADDING_SIZE
        width, height = expected.size
        rgb1 = into_rgb(expected.pixels())
        rgb2 = into_rgb(actual.pixels())
        inner1 = rgb1[pad : pad + height, pad : pad + width]
        inner2 = rgb2[pad : pad + height, pad : pad + width]

        out = output.pixels()
        gray = blend_with_white(rgb_to_gray(inner1), 0.1).astype(np.uint8)
        out[..., 0] = gray
        out[..., 1] = gray
        out[..., 2] = gray
        out[..., 3] = 255

        changed = (inner1 != inner2).any(axis=-1)
        if changed.any():
            changed &= color_delta_e94(inner1, inner2) > self.max_color_delta_e94
        ys, xs = np.nonzero(changed)
        if len(ys) == 0:
            return 0

        # padded coordinates of the candidate pixels
        px, py = xs + pad, ys + pad
        stats = [WindowStats(rgb1[..., ch], rgb2[..., ch]) for ch in range(3)]
        bounds = stats[0]

        vx1, vy1 = bounds.bound(px - VARIANCE_WINDOW_RADIUS, py - VARIANCE_WINDOW_RADIUS)
        vx2, vy2 = bounds.bound(px + VARIANCE_WINDOW_RADIUS, py + VARIANCE_WINDOW_RADIUS)
        flat1 = np.ones(len(px), dtype=bool)
        flat2 = np.ones(len(px), dtype=bool)
        for channel in stats:
            var1, var2 = channel.variance_numerators(vx1, vy1, vx2, vy2)
            flat1 &= var1 == 0
            flat2 &= var2 == 0
        # a pixel inside a flood fill in either image cannot be anti-aliasing
        counted = flat1 | flat2

        sx1, sy1 = bounds.bound(px - SSIM_WINDOW_RADIUS, py - SSIM_WINDOW_RADIUS)
        sx2, sy2 = bounds.bound(px + SSIM_WINDOW_RADIUS, py + SSIM_WINDOW_RADIUS)
        rest = ~counted
        if rest.any():
            ssim_rgb = sum(
                channel.ssim(sx1[rest], sy1[rest], sx2[rest], sy2[rest]) for channel in stats
            ) / 3.0
            counted[rest] = ssim_rgb < ANTI_ALIASING_SSIM

        out[ys[counted], xs[counted]] = (*DIFF_COLOR, 255)
        out[ys[~counted], xs[~counted]] = (*ANTI_ALIASING_COLOR, 255)
        return int(counted.sum())
