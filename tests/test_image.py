import numpy as np
import pytest
from PIL import Image

from mandelraster.geometry import ImageBounds
from mandelraster.image import write_image


def test_write_image_round_trip(tmp_path):
    bounds = ImageBounds(5, 3)
    pixels = np.arange(15, dtype=np.uint8) * 17
    path = write_image(tmp_path / "nested" / "ramp.png", pixels, bounds)

    with Image.open(path) as image:
        assert image.format == "PNG"
        assert image.mode == "L"
        assert image.size == (5, 3)
        np.testing.assert_array_equal(np.asarray(image).ravel(), pixels)


def test_write_image_accepts_bytearray(tmp_path):
    path = write_image(tmp_path / "bytes.png", bytearray([0, 128, 255, 1]), ImageBounds(2, 2))
    with Image.open(path) as image:
        assert list(image.getdata()) == [0, 128, 255, 1]


def test_write_image_size_mismatch(tmp_path):
    with pytest.raises(ValueError, match="do not fill"):
        write_image(tmp_path / "bad.png", np.zeros(5, dtype=np.uint8), ImageBounds(2, 2))
