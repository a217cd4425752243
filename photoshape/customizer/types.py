from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from PIL import Image

from photoshape.customizer.errors import InvalidParameterError, UnsupportedShapeError


MIN_ZOOM = 0.1
MAX_ZOOM = 5.0
MIN_CENTER_PERCENT = 0.0
MAX_CENTER_PERCENT = 100.0


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class ShapeKind(str, Enum):
    CIRCLE = "circle"
    HEART = "heart"
    RECTANGLE = "rectangle"

    @classmethod
    def parse(cls, raw: str | ShapeKind) -> ShapeKind:
        if isinstance(raw, ShapeKind):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError as exc:
            valid = ", ".join(kind.value for kind in cls)
            raise UnsupportedShapeError(f"Invalid shape: {raw!r}. Must be one of: {valid}") from exc


@dataclass(frozen=True, slots=True)
class CanvasSpec:
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise InvalidParameterError(
                f"canvas size must be positive: {self.width}x{self.height}"
            )

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height


@dataclass(frozen=True, slots=True)
class PanZoomSpec:
    """Requested visual center (percent of canvas) and linear zoom.

    Values are clamped on construction, so geometry code never sees
    out-of-range input.
    """

    center_x_percent: float
    center_y_percent: float
    zoom: float

    def __post_init__(self) -> None:
        for name in ("center_x_percent", "center_y_percent", "zoom"):
            value = float(getattr(self, name))
            if not math.isfinite(value):
                raise InvalidParameterError(f"{name} must be a finite number, got {value}")
        object.__setattr__(
            self,
            "center_x_percent",
            clamp(float(self.center_x_percent), MIN_CENTER_PERCENT, MAX_CENTER_PERCENT),
        )
        object.__setattr__(
            self,
            "center_y_percent",
            clamp(float(self.center_y_percent), MIN_CENTER_PERCENT, MAX_CENTER_PERCENT),
        )
        object.__setattr__(self, "zoom", clamp(float(self.zoom), MIN_ZOOM, MAX_ZOOM))


@dataclass(slots=True)
class SourceBitmap:
    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


@dataclass(frozen=True, slots=True)
class PlacementRect:
    scaled_width: int
    scaled_height: int
    left: int
    top: int
    extract_left: int
    extract_top: int
    extract_width: int
    extract_height: int
    composite_left: int
    composite_top: int

    @property
    def has_visible_region(self) -> bool:
        return self.extract_width > 0 and self.extract_height > 0

    @property
    def extract_box(self) -> tuple[int, int, int, int]:
        return (
            self.extract_left,
            self.extract_top,
            self.extract_left + self.extract_width,
            self.extract_top + self.extract_height,
        )


@dataclass(frozen=True, slots=True)
class AlphaMask:
    """Single-channel ("L") mask, 255 inside the shape and 0 outside.

    Instances may be shared through the mask cache and must not be mutated.
    """

    shape: ShapeKind
    width: int
    height: int
    image: Image.Image


@dataclass(frozen=True, slots=True)
class CompositeResult:
    png_bytes: bytes
    width: int
    height: int
