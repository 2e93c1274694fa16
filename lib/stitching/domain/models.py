"""
Domain models for stitching layout and configuration.
"""
import enum
from typing import Tuple

import attr

from stitch_config import (
    CANVAS_BACKGROUND_BGRA,
    MAX_TOTAL_PIXELS,
    STITCH_PREVIEW_MAX_SIZE,
)


class StitchMode(enum.Enum):
    """Axis along which selected images are concatenated."""
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"

    @classmethod
    def from_name(cls, name: str) -> 'StitchMode':
        """Parse a mode from its persisted name, case-insensitively."""
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown stitch mode: {name!r}")


@attr.s(frozen=True)
class Dimension:
    """Represents image dimensions."""
    width: int = attr.ib()
    height: int = attr.ib()

    @property
    def pixel_count(self) -> int:
        return int(self.width) * int(self.height)


@attr.s(frozen=True)
class Position:
    """Represents a position on the canvas."""
    x: int = attr.ib()
    y: int = attr.ib()


@attr.s(frozen=True)
class CanvasSize:
    """Represents the size of the stitching canvas."""
    width: int = attr.ib()
    height: int = attr.ib()

    @property
    def is_drawable(self) -> bool:
        return self.width > 0 and self.height > 0


@attr.s(frozen=True)
class StitchLayout:
    """Canvas size plus the top-left corner of every input, in input order."""
    canvas_size: CanvasSize = attr.ib()
    positions: Tuple[Position, ...] = attr.ib(converter=tuple)


@attr.s(frozen=True)
class StitchingConfig:
    """Configuration for stitching."""
    max_total_pixels: int = attr.ib(default=MAX_TOTAL_PIXELS)
    preview_max_size: Tuple[int, int] = attr.ib(default=STITCH_PREVIEW_MAX_SIZE)
    background_color: Tuple[int, int, int, int] = attr.ib(default=CANVAS_BACKGROUND_BGRA)

    @classmethod
    def default(cls) -> 'StitchingConfig':
        """Create a default stitching configuration."""
        return cls()
