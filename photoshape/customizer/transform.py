from __future__ import annotations

import logging

from PIL import Image

from photoshape.customizer.errors import EmptyVisibleRegionError
from photoshape.customizer.types import PlacementRect, SourceBitmap


logger = logging.getLogger(__name__)


def _cover_resize(image: Image.Image, width: int, height: int) -> Image.Image:
    # cover-fit: fill the box exactly, source aspect is ignored
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    if rgba.size == (width, height):
        return rgba.copy()
    return rgba.resize((width, height), Image.Resampling.LANCZOS)


def transform(source: SourceBitmap, rect: PlacementRect) -> SourceBitmap:
    """Scale `source` to the placement size and keep only the on-canvas part."""
    if not rect.has_visible_region:
        raise EmptyVisibleRegionError(rect)

    resized = _cover_resize(source.image, rect.scaled_width, rect.scaled_height)
    cropped = resized.crop(rect.extract_box)
    logger.debug(
        "cover-fit %sx%s -> %sx%s, extracted %s",
        source.width,
        source.height,
        rect.scaled_width,
        rect.scaled_height,
        rect.extract_box,
    )
    return SourceBitmap(image=cropped)
