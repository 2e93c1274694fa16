"""
Domain models for the interactive crop tool.

All rectangles live in source-image coordinates; the ViewTransform maps them
to and from the viewport the image is displayed in.
"""
import enum
from typing import Optional, Tuple

import attr


@attr.s(frozen=True)
class Point:
    """A point or a delta, depending on context."""
    x: float = attr.ib(converter=float)
    y: float = attr.ib(converter=float)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def distance_squared_to(self, other: 'Point') -> float:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy


@attr.s(frozen=True)
class Size:
    width: float = attr.ib()
    height: float = attr.ib()

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def ratio(self) -> float:
        return self.width / self.height


@attr.s(frozen=True)
class CropRect:
    """Crop rectangle with float edges in image coordinates."""
    left: float = attr.ib(converter=float)
    top: float = attr.ib(converter=float)
    right: float = attr.ib(converter=float)
    bottom: float = attr.ib(converter=float)

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def top_left(self) -> Point:
        return Point(self.left, self.top)

    @property
    def top_right(self) -> Point:
        return Point(self.right, self.top)

    @property
    def bottom_left(self) -> Point:
        return Point(self.left, self.bottom)

    @property
    def bottom_right(self) -> Point:
        return Point(self.right, self.bottom)

    def contains(self, point: Point) -> bool:
        """Half-open containment: left/top edges inside, right/bottom outside."""
        return self.left <= point.x < self.right and self.top <= point.y < self.bottom

    def translate(self, dx: float, dy: float) -> 'CropRect':
        return CropRect(self.left + dx, self.top + dy, self.right + dx, self.bottom + dy)

    def normalized(self) -> 'CropRect':
        """Swap inverted edges so left <= right and top <= bottom."""
        return CropRect(
            min(self.left, self.right),
            min(self.top, self.bottom),
            max(self.left, self.right),
            max(self.top, self.bottom)
        )

    def clamped(self, image_width: float, image_height: float) -> 'CropRect':
        """Clamp every edge independently into the image bounds."""
        return CropRect(
            _coerce_in(self.left, 0.0, image_width),
            _coerce_in(self.top, 0.0, image_height),
            _coerce_in(self.right, 0.0, image_width),
            _coerce_in(self.bottom, 0.0, image_height)
        )

    def to_int_box(self) -> Tuple[int, int, int, int]:
        """Integer (left, top, right, bottom), truncating toward zero."""
        return int(self.left), int(self.top), int(self.right), int(self.bottom)


def _coerce_in(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(value, maximum))


class DragMode(enum.Enum):
    """What an active drag gesture edits."""
    NONE = "none"
    MOVE = "move"
    SCALE_TOP_LEFT = "scale_top_left"
    SCALE_TOP_RIGHT = "scale_top_right"
    SCALE_BOTTOM_LEFT = "scale_bottom_left"
    SCALE_BOTTOM_RIGHT = "scale_bottom_right"

    @property
    def is_scale(self) -> bool:
        return self not in (DragMode.NONE, DragMode.MOVE)


class AspectRatioKind(enum.Enum):
    FREE = "free"
    FIXED = "fixed"
    ORIGINAL = "original"  # The source image's own ratio
    VIEWPORT = "viewport"  # The ratio of the area the image is shown in


@attr.s(frozen=True)
class AspectRatio:
    """A named crop aspect ratio (width / height)."""
    name: str = attr.ib()
    kind: AspectRatioKind = attr.ib(default=AspectRatioKind.FIXED)
    value: Optional[float] = attr.ib(default=None)

    @value.validator
    def _check_value(self, attribute, value):
        if self.kind is AspectRatioKind.FIXED and (value is None or value <= 0):
            raise ValueError(f"Fixed aspect ratio {self.name!r} needs a positive value")

    @classmethod
    def fixed(cls, width: float, height: float, name: Optional[str] = None) -> 'AspectRatio':
        label = name or f"{width:g}:{height:g}"
        return cls(label, AspectRatioKind.FIXED, width / height)

    def resolve(self, image_size: Size, viewport_size: Optional[Size] = None) -> Optional[float]:
        """
        Get the numeric ratio to lock to, or None for free cropping.

        Viewport ratios resolve to None while the viewport size is unknown.
        """
        if self.kind is AspectRatioKind.FREE:
            return None
        if self.kind is AspectRatioKind.FIXED:
            return self.value
        if self.kind is AspectRatioKind.ORIGINAL:
            return None if image_size.is_empty else image_size.ratio
        if viewport_size is None or viewport_size.is_empty:
            return None
        return viewport_size.ratio


FREE_ASPECT_RATIO = AspectRatio("Free", AspectRatioKind.FREE)

ASPECT_RATIO_PRESETS = (
    FREE_ASPECT_RATIO,
    AspectRatio.fixed(1, 1),
    AspectRatio.fixed(2, 3),
    AspectRatio.fixed(3, 4),
    AspectRatio.fixed(4, 5),
    AspectRatio.fixed(5, 6),
    AspectRatio.fixed(3, 5),
    AspectRatio.fixed(5, 7),
    AspectRatio("Original", AspectRatioKind.ORIGINAL),
    AspectRatio("Full", AspectRatioKind.VIEWPORT),
)


def find_aspect_ratio(name: str) -> AspectRatio:
    """Look up a preset by its display name."""
    for preset in ASPECT_RATIO_PRESETS:
        if preset.name == name:
            return preset
    raise KeyError(f"No aspect ratio preset named {name!r}")


@attr.s(frozen=True)
class ViewTransform:
    """Fit-to-view mapping: screen = image * scale + offset."""
    scale: float = attr.ib(default=1.0)
    offset_x: float = attr.ib(default=0.0)
    offset_y: float = attr.ib(default=0.0)

    @classmethod
    def fit(cls, viewport_size: Size, image_size: Size) -> 'ViewTransform':
        """Scale the image to fit the viewport and center it."""
        if viewport_size.is_empty or image_size.is_empty:
            raise ValueError(
                f"Cannot fit {image_size.width}x{image_size.height} image "
                f"into {viewport_size.width}x{viewport_size.height} viewport"
            )
        scale = min(viewport_size.width / image_size.width, viewport_size.height / image_size.height)
        return cls(
            scale=scale,
            offset_x=(viewport_size.width - image_size.width * scale) / 2.0,
            offset_y=(viewport_size.height - image_size.height * scale) / 2.0
        )

    def to_image(self, screen_point: Point) -> Point:
        return Point((screen_point.x - self.offset_x) / self.scale,
                     (screen_point.y - self.offset_y) / self.scale)

    def to_screen(self, image_point: Point) -> Point:
        return Point(image_point.x * self.scale + self.offset_x,
                     image_point.y * self.scale + self.offset_y)

    def delta_to_image(self, screen_delta: Point) -> Point:
        return Point(screen_delta.x / self.scale, screen_delta.y / self.scale)

    def rect_to_screen(self, rect: CropRect) -> CropRect:
        top_left = self.to_screen(rect.top_left)
        bottom_right = self.to_screen(rect.bottom_right)
        return CropRect(top_left.x, top_left.y, bottom_right.x, bottom_right.y)
