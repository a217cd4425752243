from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from collections.abc import Callable

import numpy as np
from PIL import Image, ImageDraw

from photoshape.customizer.errors import UnsupportedShapeError
from photoshape.customizer.types import AlphaMask, CanvasSpec, ShapeKind


logger = logging.getLogger(__name__)

SUPERSAMPLE = 4
RECT_INSET_RATIO = 0.08
RECT_CORNER_RADIUS_PX = 10.0
REFERENCE_CANVAS_SIDE = 500.0
HEART_VIEWBOX = 100.0
BEZIER_STEPS = 48

# Outline in a 100x100 box: start point, then cubic segments (c1, c2, end).
_HEART_START = (50.0, 90.0)
_HEART_SEGMENTS = (
    ((25.0, 75.0), (10.0, 60.0), (10.0, 45.0)),
    ((10.0, 30.0), (20.0, 20.0), (30.0, 20.0)),
    ((38.0, 20.0), (45.0, 25.0), (50.0, 35.0)),
    ((55.0, 25.0), (62.0, 20.0), (70.0, 20.0)),
    ((80.0, 20.0), (90.0, 30.0), (90.0, 45.0)),
    ((90.0, 60.0), (75.0, 75.0), (50.0, 90.0)),
)


def _cubic_points(p0, p1, p2, p3, steps: int) -> np.ndarray:
    t = np.linspace(0.0, 1.0, steps, endpoint=True)[:, None]
    mt = 1.0 - t
    pts = np.array([p0, p1, p2, p3], dtype=np.float64)
    return (
        (mt**3) * pts[0]
        + 3.0 * (mt**2) * t * pts[1]
        + 3.0 * mt * (t**2) * pts[2]
        + (t**3) * pts[3]
    )


def heart_outline(steps: int = BEZIER_STEPS) -> np.ndarray:
    """Flattened heart polygon in viewbox units, shape (N, 2)."""
    chunks = []
    start = _HEART_START
    for c1, c2, end in _HEART_SEGMENTS:
        # drop each segment's first point, it repeats the previous end
        chunks.append(_cubic_points(start, c1, c2, end, steps)[1:])
        start = end
    return np.vstack([np.array([_HEART_START]), *chunks])


def _render_circle(draw: ImageDraw.ImageDraw, width: int, height: int, ss: int) -> None:
    radius = min(width, height) / 2.0
    cx, cy = width / 2.0, height / 2.0
    box = [
        round((cx - radius) * ss),
        round((cy - radius) * ss),
        round((cx + radius) * ss) - 1,
        round((cy + radius) * ss) - 1,
    ]
    draw.ellipse(box, fill=255)


def _render_heart(draw: ImageDraw.ImageDraw, width: int, height: int, ss: int) -> None:
    # Uniform fit, centered in the canvas.
    scale = min(width, height) / HEART_VIEWBOX
    offset_x = (width - HEART_VIEWBOX * scale) / 2.0
    offset_y = (height - HEART_VIEWBOX * scale) / 2.0
    outline = heart_outline()
    xs = (outline[:, 0] * scale + offset_x) * ss
    ys = (outline[:, 1] * scale + offset_y) * ss
    draw.polygon(list(zip(xs.tolist(), ys.tolist())), fill=255)


def _render_rectangle(draw: ImageDraw.ImageDraw, width: int, height: int, ss: int) -> None:
    side = min(width, height)
    inset = side * RECT_INSET_RATIO
    radius = RECT_CORNER_RADIUS_PX * side / REFERENCE_CANVAS_SIDE
    box = [
        round(inset * ss),
        round(inset * ss),
        round((width - inset) * ss) - 1,
        round((height - inset) * ss) - 1,
    ]
    if box[2] <= box[0] or box[3] <= box[1]:
        return
    draw.rounded_rectangle(box, radius=max(0, round(radius * ss)), fill=255)


_RENDERERS: dict[ShapeKind, Callable[[ImageDraw.ImageDraw, int, int, int], None]] = {
    ShapeKind.CIRCLE: _render_circle,
    ShapeKind.HEART: _render_heart,
    ShapeKind.RECTANGLE: _render_rectangle,
}


def synthesize(canvas: CanvasSpec, shape: ShapeKind) -> AlphaMask:
    """Render `shape` as an anti-aliased L mask of exactly the canvas size."""
    renderer = _RENDERERS.get(shape) if isinstance(shape, ShapeKind) else None
    if renderer is None:
        raise UnsupportedShapeError(f"no mask renderer for shape: {shape!r}")

    ss = SUPERSAMPLE
    big = Image.new("L", (canvas.width * ss, canvas.height * ss), 0)
    renderer(ImageDraw.Draw(big), canvas.width, canvas.height, ss)
    # BOX over whole ss x ss blocks keeps interior at 255 and exterior at 0.
    mask = big.resize(canvas.size, Image.Resampling.BOX)
    return AlphaMask(shape=shape, width=canvas.width, height=canvas.height, image=mask)


class MaskCache:
    """Thread-safe read-through cache of masks keyed by (shape, width, height).

    Least recently used entries are dropped once `max_entries` is exceeded.
    """

    def __init__(self, max_entries: int = 32) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._max_entries = max_entries
        self._entries: OrderedDict[tuple[ShapeKind, int, int], AlphaMask] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, canvas: CanvasSpec, shape: ShapeKind) -> AlphaMask:
        key = (shape, canvas.width, canvas.height)
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._entries.move_to_end(key)
                return cached

        logger.debug("mask cache miss: %s %sx%s", shape.value, canvas.width, canvas.height)
        mask = synthesize(canvas, shape)

        with self._lock:
            # another thread may have rendered the same key meanwhile
            existing = self._entries.get(key)
            if existing is not None:
                self._entries.move_to_end(key)
                return existing
            self._entries[key] = mask
            while len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)
        return mask

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
