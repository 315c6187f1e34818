"""PNG output for rendered pixel buffers."""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from .geometry import ImageBounds


def write_image(path: str | Path, pixels, bounds: ImageBounds) -> Path:
    """Encode ``pixels`` as an 8-bit grayscale PNG of size ``bounds``."""
    width, height = bounds
    data = np.asarray(pixels, dtype=np.uint8)
    if data.size != width * height:
        raise ValueError(f"{data.size} pixels do not fill a {width}x{height} image")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(data.reshape(height, width)).save(path, format="PNG")
    return path
