from __future__ import annotations

from typing import Optional, Union

import numpy as np
from numba import njit, prange

from .geometry import ImageBounds, PlaneRegion, _map_pixel

__all__ = [
    "LIMIT",
    "allocate_buffer",
    "escape_time",
    "intensity",
    "render",
    "render_rows",
    "render_prange",
]

LIMIT = 255

PixelBuffer = Union[np.ndarray, bytearray]


@njit(nogil=True)
def _escape_time(re: float, im: float, limit: int) -> int:
    zr = 0.0
    zi = 0.0
    for i in range(limit):
        zr, zi = zr * zr - zi * zi + re, 2.0 * zr * zi + im
        if zr * zr + zi * zi >= 4.0:
            return i
    return -1


@njit(nogil=True)
def _render_rows(
    pixels: np.ndarray,
    width: int,
    height: int,
    ul_re: float,
    ul_im: float,
    lr_re: float,
    lr_im: float,
    start_row: int,
    end_row: int,
    limit: int,
) -> None:
    for row in range(start_row, end_row):
        for column in range(width):
            re, im = _map_pixel(width, height, ul_re, ul_im, lr_re, lr_im, column, row)
            count = _escape_time(re, im, limit)
            pixels[row * width + column] = 0 if count < 0 else limit - count


@njit(parallel=True)
def _render_prange(
    pixels: np.ndarray,
    width: int,
    height: int,
    ul_re: float,
    ul_im: float,
    lr_re: float,
    lr_im: float,
    limit: int,
) -> None:
    for row in prange(height):
        for column in range(width):
            re, im = _map_pixel(width, height, ul_re, ul_im, lr_re, lr_im, column, row)
            count = _escape_time(re, im, limit)
            pixels[row * width + column] = 0 if count < 0 else limit - count


def allocate_buffer(bounds: ImageBounds) -> np.ndarray:
    """Zero-filled row-major grayscale buffer for ``bounds``."""
    return np.zeros(bounds.width * bounds.height, dtype=np.uint8)


def escape_time(c: complex, limit: int = LIMIT) -> Optional[int]:
    """Iteration index at which the orbit of ``c`` leaves the radius-2 disc.

    Iterates ``z = z*z + c`` from zero at most ``limit`` times and returns
    ``None`` when the orbit never escapes.
    """
    count = _escape_time(float(c.real), float(c.imag), int(limit))
    return None if count < 0 else count


def intensity(count: Optional[int]) -> int:
    """Grayscale byte for an escape time: ``255 - count``, or 0 inside the set."""
    return 0 if count is None else LIMIT - count


def _as_pixels(buffer: PixelBuffer) -> np.ndarray:
    if isinstance(buffer, np.ndarray):
        pixels = buffer
    else:
        pixels = np.frombuffer(buffer, dtype=np.uint8)
    assert pixels.dtype == np.uint8 and pixels.ndim == 1, "pixel buffer must be a flat uint8 buffer"
    return pixels


def _corners(region: PlaneRegion) -> tuple:
    return (
        float(region.upper_left.real),
        float(region.upper_left.imag),
        float(region.lower_right.real),
        float(region.lower_right.imag),
    )


def render_rows(
    buffer: PixelBuffer,
    bounds: ImageBounds,
    region: PlaneRegion,
    start_row: int,
    end_row: int,
) -> None:
    """Render rows ``[start_row, end_row)`` into their slice of ``buffer``."""
    pixels = _as_pixels(buffer)
    width, height = bounds
    assert width > 0 and height > 0, f"empty bounds {bounds}"
    assert len(pixels) == width * height, "buffer length does not match bounds"
    assert 0 <= start_row <= end_row <= height, f"rows {start_row}:{end_row} outside {bounds}"
    _render_rows(pixels, int(width), int(height), *_corners(region), int(start_row), int(end_row), LIMIT)


def render(buffer: PixelBuffer, bounds: ImageBounds, region: PlaneRegion) -> None:
    """Fill ``buffer`` with the escape-time intensity of every pixel, row by row."""
    render_rows(buffer, bounds, region, 0, bounds.height)


def render_prange(buffer: PixelBuffer, bounds: ImageBounds, region: PlaneRegion) -> None:
    """Same as :func:`render`, with rows spread over numba's parallel threads."""
    pixels = _as_pixels(buffer)
    width, height = bounds
    assert width > 0 and height > 0, f"empty bounds {bounds}"
    assert len(pixels) == width * height, "buffer length does not match bounds"
    _render_prange(pixels, int(width), int(height), *_corners(region), LIMIT)
