from __future__ import annotations

from io import BytesIO

import numpy as np
from PIL import Image, ImageOps, UnidentifiedImageError

from photoshape.config import settings
from photoshape.customizer.errors import ImageDecodeError, ImageEncodeError
from photoshape.customizer.types import SourceBitmap


ALLOWED_FORMATS = {"PNG", "JPEG"}


def _enforce_pixel_limit(width: int, height: int) -> None:
    total = int(width) * int(height)
    if total > settings.max_decode_pixels:
        raise ImageDecodeError(
            f"image resolution {width}x{height} exceeds the decode limit "
            f"of {settings.max_decode_pixels} pixels"
        )


def _to_8bit(img: Image.Image) -> Image.Image:
    # 16-bit grayscale PNGs open as "I"/"I;16"; convert() would clip them to white.
    if not img.mode.startswith("I"):
        return img
    arr = np.asarray(img, dtype=np.int64)
    scaled = (np.clip(arr, 0, 65535) >> 8).astype(np.uint8)
    return Image.fromarray(scaled, mode="L")


def decode_source(data: bytes) -> SourceBitmap:
    """Decode PNG/JPEG bytes into an owned, upright bitmap (first frame only)."""
    if not data:
        raise ImageDecodeError("empty image payload")
    try:
        with Image.open(BytesIO(data)) as img:
            fmt = (img.format or "").upper()
            if fmt not in ALLOWED_FORMATS:
                raise ImageDecodeError(f"unsupported image format: {fmt or '(unknown)'}")
            _enforce_pixel_limit(*img.size)
            img.seek(0)
            img.load()
            has_alpha = img.mode in {"RGBA", "LA", "PA"} or "transparency" in img.info
            upright = _to_8bit(ImageOps.exif_transpose(img))
            decoded = upright.convert("RGBA" if has_alpha else "RGB")
    except Image.DecompressionBombError as exc:
        raise ImageDecodeError(f"image resolution is too large to decode safely: {exc}") from exc
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise ImageDecodeError(f"failed to decode image: {exc}") from exc
    return SourceBitmap(image=decoded)


def encode_png(image: Image.Image, *, compress_level: int | None = None) -> bytes:
    level = settings.png_compress_level if compress_level is None else compress_level
    buffer = BytesIO()
    try:
        image.save(buffer, format="PNG", compress_level=level, optimize=False)
    except (OSError, ValueError) as exc:
        raise ImageEncodeError(f"failed to encode PNG: {exc}") from exc
    return buffer.getvalue()
