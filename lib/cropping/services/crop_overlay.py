"""
Interactive crop overlay: drag classification and crop-rectangle edits.

The overlay is a two-state machine (idle / dragging with a DragMode). Screen
coordinates are converted to image space through the current ViewTransform;
every edit keeps the rectangle inside the image.
"""
import logging
from typing import Optional

from cropping.domain.models import (
    FREE_ASPECT_RATIO,
    AspectRatio,
    CropRect,
    DragMode,
    Point,
    Size,
    ViewTransform
)
from stitch_config import CROP_CORNER_THRESHOLD_PX
from workflow.domain.observable import ObservableValue

logger = logging.getLogger(__name__)


def classify_drag(touch: Point, rect: CropRect, threshold: float) -> DragMode:
    """
    Pick the drag mode for a gesture starting at an image-space point.

    Corners win over the interior and are tested in the order top-left,
    top-right, bottom-left, bottom-right.
    """
    threshold_sq = threshold * threshold
    corners = (
        (rect.top_left, DragMode.SCALE_TOP_LEFT),
        (rect.top_right, DragMode.SCALE_TOP_RIGHT),
        (rect.bottom_left, DragMode.SCALE_BOTTOM_LEFT),
        (rect.bottom_right, DragMode.SCALE_BOTTOM_RIGHT),
    )
    for corner, mode in corners:
        if touch.distance_squared_to(corner) < threshold_sq:
            return mode
    if rect.contains(touch):
        return DragMode.MOVE
    return DragMode.NONE


def _move(rect: CropRect, delta: Point, image_size: Size) -> CropRect:
    translated = rect.translate(delta.x, delta.y)

    if translated.left < 0:
        dx = -translated.left
    elif translated.right > image_size.width:
        dx = image_size.width - translated.right
    else:
        dx = 0.0

    if translated.top < 0:
        dy = -translated.top
    elif translated.bottom > image_size.height:
        dy = image_size.height - translated.bottom
    else:
        dy = 0.0

    return rect.translate(delta.x + dx, delta.y + dy)


def _scale_free(mode: DragMode, rect: CropRect, delta: Point) -> CropRect:
    if mode is DragMode.SCALE_TOP_LEFT:
        return CropRect(rect.left + delta.x, rect.top + delta.y, rect.right, rect.bottom)
    if mode is DragMode.SCALE_TOP_RIGHT:
        return CropRect(rect.left, rect.top + delta.y, rect.right + delta.x, rect.bottom)
    if mode is DragMode.SCALE_BOTTOM_LEFT:
        return CropRect(rect.left + delta.x, rect.top, rect.right, rect.bottom + delta.y)
    if mode is DragMode.SCALE_BOTTOM_RIGHT:
        return CropRect(rect.left, rect.top, rect.right + delta.x, rect.bottom + delta.y)
    return rect


def _scale_locked(mode: DragMode, rect: CropRect, delta: Point, ratio: float) -> CropRect:
    # The corner diagonally opposite the dragged one stays put.
    if mode is DragMode.SCALE_BOTTOM_RIGHT:
        fixed = rect.top_left
        new_width = (rect.right + delta.x) - fixed.x
        return CropRect(fixed.x, fixed.y, fixed.x + new_width, fixed.y + new_width / ratio)
    if mode is DragMode.SCALE_TOP_LEFT:
        fixed = rect.bottom_right
        new_width = fixed.x - (rect.left + delta.x)
        return CropRect(fixed.x - new_width, fixed.y - new_width / ratio, fixed.x, fixed.y)
    if mode is DragMode.SCALE_TOP_RIGHT:
        fixed = rect.bottom_left
        new_width = (rect.right + delta.x) - fixed.x
        return CropRect(fixed.x, fixed.y - new_width / ratio, fixed.x + new_width, fixed.y)
    if mode is DragMode.SCALE_BOTTOM_LEFT:
        fixed = rect.top_right
        new_width = fixed.x - (rect.left + delta.x)
        return CropRect(fixed.x - new_width, fixed.y, fixed.x, fixed.y + new_width / ratio)
    return rect


def apply_drag(
    mode: DragMode,
    rect: CropRect,
    delta: Point,
    image_size: Size,
    aspect_ratio: Optional[float] = None
) -> CropRect:
    """
    Transition function for one drag update.

    Args:
        mode: Drag mode chosen at gesture start
        rect: Current crop rectangle (image space)
        delta: Drag delta already converted to image space
        image_size: Source image size
        aspect_ratio: Locked width/height ratio, or None for free scaling

    Returns:
        The edited rectangle, clamped into the image and normalized
    """
    if mode is DragMode.NONE:
        return rect
    if mode is DragMode.MOVE:
        edited = _move(rect, delta, image_size)
    elif aspect_ratio is None:
        edited = _scale_free(mode, rect, delta)
    else:
        edited = _scale_locked(mode, rect, delta, aspect_ratio)
    return edited.clamped(image_size.width, image_size.height).normalized()


def largest_centered_rect(image_size: Size, aspect_ratio: Optional[float]) -> CropRect:
    """Largest rectangle of the given ratio centered on the image."""
    new_width = float(image_size.width)
    new_height = float(image_size.height)

    if aspect_ratio is not None:
        if new_width / new_height > aspect_ratio:
            new_width = new_height * aspect_ratio
        else:
            new_height = new_width / aspect_ratio

    center_x = image_size.width / 2.0
    center_y = image_size.height / 2.0
    return CropRect(
        center_x - new_width / 2.0,
        center_y - new_height / 2.0,
        center_x + new_width / 2.0,
        center_y + new_height / 2.0
    )


class CropOverlay:
    """
    Crop rectangle state plus the drag gesture state machine.

    Owned by the interactive thread. The current rectangle is published via
    ``crop_rect`` so renderers can subscribe instead of polling.
    """

    def __init__(
        self,
        corner_threshold: float = CROP_CORNER_THRESHOLD_PX,
        aspect_ratio: AspectRatio = FREE_ASPECT_RATIO
    ):
        self.corner_threshold = corner_threshold
        self.crop_rect = ObservableValue(None)
        self._aspect_ratio = aspect_ratio
        self._image_size: Optional[Size] = None
        self._viewport_size: Optional[Size] = None
        self._view = ViewTransform()
        self._drag_mode = DragMode.NONE

    @property
    def aspect_ratio(self) -> AspectRatio:
        return self._aspect_ratio

    @property
    def image_size(self) -> Optional[Size]:
        return self._image_size

    @property
    def view_transform(self) -> ViewTransform:
        return self._view

    @property
    def drag_mode(self) -> DragMode:
        return self._drag_mode

    @property
    def is_dragging(self) -> bool:
        return self._drag_mode is not DragMode.NONE

    @property
    def is_ready(self) -> bool:
        return self._image_size is not None and self._viewport_size is not None

    def resolved_ratio(self) -> Optional[float]:
        if self._image_size is None:
            return None
        return self._aspect_ratio.resolve(self._image_size, self._viewport_size)

    def set_image(self, width: int, height: int) -> None:
        image_size = Size(width, height) if width > 0 and height > 0 else None
        if image_size == self._image_size:
            return
        self._image_size = image_size
        self._refit()

    def set_viewport(self, width: float, height: float) -> None:
        # Layout passes may report the same size repeatedly; only a change refits
        viewport_size = Size(width, height) if width > 0 and height > 0 else None
        if viewport_size == self._viewport_size:
            return
        self._viewport_size = viewport_size
        self._refit()

    def set_aspect_ratio(self, aspect_ratio: AspectRatio) -> None:
        if aspect_ratio == self._aspect_ratio:
            return
        self._aspect_ratio = aspect_ratio
        self._refit()

    def _refit(self) -> None:
        """Recompute the fit-to-view transform and reset the crop rectangle."""
        self._drag_mode = DragMode.NONE
        if not self.is_ready:
            self.crop_rect.set(None)
            return
        self._view = ViewTransform.fit(self._viewport_size, self._image_size)
        rect = largest_centered_rect(self._image_size, self.resolved_ratio())
        logger.debug("Crop rect reset to %s (ratio %s)", rect, self._aspect_ratio.name)
        self.crop_rect.set(rect)

    def drag_start(self, screen_point: Point) -> DragMode:
        rect = self.crop_rect.value
        if rect is None:
            self._drag_mode = DragMode.NONE
            return self._drag_mode
        touch = self._view.to_image(screen_point)
        self._drag_mode = classify_drag(touch, rect, self.corner_threshold)
        return self._drag_mode

    def drag(self, screen_delta: Point) -> Optional[CropRect]:
        rect = self.crop_rect.value
        if self._drag_mode is DragMode.NONE or rect is None:
            return rect
        delta = self._view.delta_to_image(screen_delta)
        updated = apply_drag(self._drag_mode, rect, delta, self._image_size, self.resolved_ratio())
        self.crop_rect.set(updated)
        return updated

    def drag_end(self) -> None:
        self._drag_mode = DragMode.NONE

    def screen_rect(self) -> Optional[CropRect]:
        """Current crop rectangle in viewport coordinates, for drawing."""
        rect = self.crop_rect.value
        if rect is None:
            return None
        return self._view.rect_to_screen(rect)
