from __future__ import annotations

from PIL import Image, ImageChops

from photoshape.customizer.codec import encode_png
from photoshape.customizer.types import (
    AlphaMask,
    CanvasSpec,
    CompositeResult,
    PlacementRect,
    SourceBitmap,
)


BACKGROUND_RGBA = (255, 255, 255, 255)


def composite_image(
    canvas: CanvasSpec,
    extracted: SourceBitmap,
    rect: PlacementRect,
    mask: AlphaMask,
) -> Image.Image:
    if (mask.width, mask.height) != canvas.size or mask.image.size != canvas.size:
        raise ValueError(
            "mask size mismatch: "
            f"mask={mask.image.size}, canvas={canvas.size}"
        )

    result = Image.new("RGBA", canvas.size, BACKGROUND_RGBA)
    overlay = extracted.image if extracted.image.mode == "RGBA" else extracted.image.convert("RGBA")
    # source-over
    result.alpha_composite(overlay, dest=(rect.composite_left, rect.composite_top))

    # destination-in: keep color, alpha scaled by the mask
    clipped_alpha = ImageChops.multiply(result.getchannel("A"), mask.image)
    result.putalpha(clipped_alpha)
    return result


def composite(
    canvas: CanvasSpec,
    extracted: SourceBitmap,
    rect: PlacementRect,
    mask: AlphaMask,
) -> CompositeResult:
    image = composite_image(canvas, extracted, rect, mask)
    return CompositeResult(png_bytes=encode_png(image), width=canvas.width, height=canvas.height)
