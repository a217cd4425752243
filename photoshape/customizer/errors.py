from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from photoshape.customizer.types import PlacementRect


class CustomizerError(Exception):
    pass


class InvalidParameterError(CustomizerError, ValueError):
    pass


class UnsupportedShapeError(CustomizerError, ValueError):
    pass


class EmptyVisibleRegionError(CustomizerError):
    """Raised when the placed image does not overlap the canvas at all."""

    def __init__(self, rect: PlacementRect) -> None:
        super().__init__(
            "no part of the image is visible on the canvas: "
            f"extract={rect.extract_width}x{rect.extract_height}, "
            f"scaled={rect.scaled_width}x{rect.scaled_height}, "
            f"left={rect.left}, top={rect.top}"
        )
        self.rect = rect


class ImageDecodeError(CustomizerError):
    pass


class ImageEncodeError(CustomizerError):
    pass
