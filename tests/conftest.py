from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from photoshape.config import settings
from photoshape.customizer.types import SourceBitmap


def make_quadrant_image(width: int = 500, height: int = 500) -> Image.Image:
    """RGB image with a distinct solid color per quadrant."""
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    hh, hw = height // 2, width // 2
    arr[:hh, :hw] = (255, 0, 0)
    arr[:hh, hw:] = (0, 255, 0)
    arr[hh:, :hw] = (0, 0, 255)
    arr[hh:, hw:] = (255, 255, 0)
    return Image.fromarray(arr, mode="RGB")


def to_bytes(image: Image.Image, fmt: str = "PNG") -> bytes:
    buffer = BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


def decode_rgba(data: bytes) -> np.ndarray:
    with Image.open(BytesIO(data)) as img:
        return np.array(img.convert("RGBA"), dtype=np.uint8)


@pytest.fixture
def quadrant_source() -> SourceBitmap:
    return SourceBitmap(image=make_quadrant_image())


@pytest.fixture
def solid_source() -> SourceBitmap:
    return SourceBitmap(image=Image.new("RGB", (320, 240), (10, 120, 200)))


@pytest.fixture
def storage_root(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "storage_root", str(tmp_path))
    return tmp_path
