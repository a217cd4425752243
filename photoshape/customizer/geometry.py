from __future__ import annotations

import logging
import math

from photoshape.customizer.types import (
    MAX_CENTER_PERCENT,
    MAX_ZOOM,
    MIN_CENTER_PERCENT,
    MIN_ZOOM,
    CanvasSpec,
    PanZoomSpec,
    PlacementRect,
    clamp,
)


logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    # round() would send 2.5 to 2; placement math rounds .5 toward +inf.
    return int(math.floor(value + 0.5))


def resolve(canvas: CanvasSpec, spec: PanZoomSpec) -> PlacementRect:
    """Convert percent center and zoom into pixel placement on the canvas.

    `left`/`top` describe where the scaled image would sit if the canvas were
    unbounded. The extract rectangle is the part of the scaled image that
    overlaps the canvas, and `composite_left`/`composite_top` is where that
    part lands. Extract sizes may come out non-positive when nothing overlaps.
    """
    zoom = clamp(spec.zoom, MIN_ZOOM, MAX_ZOOM)
    cx = clamp(spec.center_x_percent, MIN_CENTER_PERCENT, MAX_CENTER_PERCENT)
    cy = clamp(spec.center_y_percent, MIN_CENTER_PERCENT, MAX_CENTER_PERCENT)

    scaled_w = round_half_up(canvas.width * zoom)
    scaled_h = round_half_up(canvas.height * zoom)

    center_x = round_half_up(cx / 100.0 * canvas.width)
    center_y = round_half_up(cy / 100.0 * canvas.height)

    left = round_half_up(center_x - scaled_w / 2)
    top = round_half_up(center_y - scaled_h / 2)

    extract_left = -left if left < 0 else 0
    extract_top = -top if top < 0 else 0
    composite_left = max(0, left)
    composite_top = max(0, top)

    extract_w = min(scaled_w - extract_left, canvas.width - composite_left)
    extract_h = min(scaled_h - extract_top, canvas.height - composite_top)

    rect = PlacementRect(
        scaled_width=scaled_w,
        scaled_height=scaled_h,
        left=left,
        top=top,
        extract_left=extract_left,
        extract_top=extract_top,
        extract_width=extract_w,
        extract_height=extract_h,
        composite_left=composite_left,
        composite_top=composite_top,
    )
    logger.debug("resolved placement canvas=%sx%s spec=%s rect=%s", canvas.width, canvas.height, spec, rect)
    return rect
