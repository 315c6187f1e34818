"""Baseline escape-time renderer using plain Python complex arithmetic."""

from __future__ import annotations

from typing import List, Optional

from .geometry import ImageBounds, PlaneRegion


def baseline_escape_time(c: complex, limit: int = 255) -> Optional[int]:
    z = 0j
    for i in range(limit):
        z = z * z + c
        if z.real * z.real + z.imag * z.imag >= 4.0:
            return i
    return None


def compute_mandelbrot(bounds: ImageBounds, region: PlaneRegion, limit: int = 255) -> List[int]:
    """Compute the grayscale pixels for ``bounds`` without numba."""
    width, height = bounds
    plane_width = region.lower_right.real - region.upper_left.real
    plane_height = region.upper_left.imag - region.lower_right.imag

    pixels = [0] * (width * height)
    for row in range(height):
        im = region.upper_left.imag - (row / height) * plane_height
        for column in range(width):
            re = region.upper_left.real + (column / width) * plane_width
            count = baseline_escape_time(complex(re, im), limit)
            pixels[row * width + column] = 0 if count is None else limit - count
    return pixels
