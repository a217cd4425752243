from __future__ import annotations

import logging
import math

from photoshape.customizer.compositor import composite
from photoshape.customizer.errors import InvalidParameterError
from photoshape.customizer.geometry import resolve
from photoshape.customizer.masks import MaskCache, synthesize
from photoshape.customizer.transform import transform
from photoshape.customizer.types import (
    MAX_CENTER_PERCENT,
    MAX_ZOOM,
    MIN_CENTER_PERCENT,
    MIN_ZOOM,
    CanvasSpec,
    CompositeResult,
    PanZoomSpec,
    ShapeKind,
    SourceBitmap,
)


logger = logging.getLogger(__name__)


def validate_parameters(center_x_percent: float, center_y_percent: float, zoom: float) -> None:
    """Reject out-of-range values instead of letting PanZoomSpec clamp them."""
    checks = (
        ("x", center_x_percent, MIN_CENTER_PERCENT, MAX_CENTER_PERCENT),
        ("y", center_y_percent, MIN_CENTER_PERCENT, MAX_CENTER_PERCENT),
        ("zoom", zoom, MIN_ZOOM, MAX_ZOOM),
    )
    for name, value, low, high in checks:
        if not math.isfinite(value) or value < low or value > high:
            raise InvalidParameterError(f"{name} must be within [{low:g}, {high:g}], got {value}")


def run_customization(
    source: SourceBitmap,
    canvas: CanvasSpec,
    pan_zoom: PanZoomSpec,
    shape: ShapeKind,
    *,
    mask_cache: MaskCache | None = None,
) -> CompositeResult:
    rect = resolve(canvas, pan_zoom)
    extracted = transform(source, rect)
    mask = mask_cache.get(canvas, shape) if mask_cache is not None else synthesize(canvas, shape)
    result = composite(canvas, extracted, rect, mask)
    logger.debug(
        "customized %sx%s source into %s %sx%s png (%d bytes)",
        source.width,
        source.height,
        shape.value,
        result.width,
        result.height,
        len(result.png_bytes),
    )
    return result
