"""Escape-time Mandelbrot rasterizer producing grayscale pixel buffers."""

__version__ = "1.0.0"

# Core computation - lightweight, no I/O
from .computation import LIMIT, allocate_buffer, escape_time, intensity, render, render_prange, render_rows
from .config import RenderConfig, default_render_config, load_render_configs
from .geometry import ImageBounds, PlaneRegion, pixel_to_point
from .report import RenderReport


# Conditional imports - only loaded when needed
def __getattr__(name):
    """Lazy loading of modules that pull in Pillow."""
    if name == "run_render":
        from .execution import run_render

        return run_render
    elif name == "write_image":
        from .image import write_image

        return write_image
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "LIMIT",
    "ImageBounds",
    "PlaneRegion",
    "RenderConfig",
    "RenderReport",
    "allocate_buffer",
    "default_render_config",
    "escape_time",
    "intensity",
    "load_render_configs",
    "pixel_to_point",
    "render",
    "render_prange",
    "render_rows",
    "run_render",
    "write_image",
]
