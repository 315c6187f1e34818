"""Image bounds, plane regions and the pixel-to-plane mapping."""

from __future__ import annotations

from typing import NamedTuple, Tuple

from numba import njit

__all__ = ["ImageBounds", "PlaneRegion", "pixel_to_point"]


class ImageBounds(NamedTuple):
    """Pixel dimensions of a render pass."""

    width: int
    height: int

    @property
    def size(self) -> int:
        return self.width * self.height


class PlaneRegion(NamedTuple):
    """Rectangle of the complex plane given by its upper-left and lower-right corners."""

    upper_left: complex
    lower_right: complex

    @property
    def plane_width(self) -> float:
        return self.lower_right.real - self.upper_left.real

    @property
    def plane_height(self) -> float:
        return self.upper_left.imag - self.lower_right.imag

    def is_proper(self) -> bool:
        return self.plane_width > 0 and self.plane_height > 0


@njit(nogil=True)
def _map_pixel(
    width: int,
    height: int,
    ul_re: float,
    ul_im: float,
    lr_re: float,
    lr_im: float,
    column: int,
    row: int,
) -> Tuple[float, float]:
    plane_width = lr_re - ul_re
    plane_height = ul_im - lr_im
    re = ul_re + (column / width) * plane_width
    im = ul_im - (row / height) * plane_height
    return re, im


def pixel_to_point(bounds: ImageBounds, region: PlaneRegion, pixel: Tuple[int, int]) -> complex:
    """Return the complex point for ``pixel`` (column, row) within ``bounds``.

    Rows grow downwards, so the imaginary part decreases as ``row`` increases.
    """
    width, height = bounds
    column, row = pixel
    assert 0 <= column < width and 0 <= row < height, f"pixel {pixel} outside {bounds}"
    re, im = _map_pixel(
        width,
        height,
        region.upper_left.real,
        region.upper_left.imag,
        region.lower_right.real,
        region.lower_right.imag,
        column,
        row,
    )
    return complex(re, im)
