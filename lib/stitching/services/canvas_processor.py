"""
Service for allocating the stitching canvas and drawing inputs onto it.
"""
import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from image_utils import paste_image_onto_canvas
from stitch_config import CANVAS_BACKGROUND_BGRA
from stitching.domain.models import CanvasSize, StitchMode
from stitching.services.layout_manager import calculate_stitch_layout, get_image_dimension

logger = logging.getLogger(__name__)


def create_canvas(
    canvas_size: CanvasSize,
    background_color: Tuple[int, int, int, int] = CANVAS_BACKGROUND_BGRA
) -> Optional[np.ndarray]:
    """
    Allocate an empty BGRA canvas.

    Returns:
        The canvas, or None if the size is not drawable or memory runs out
    """
    if not canvas_size.is_drawable:
        logger.warning("Refusing to allocate canvas of %sx%s", canvas_size.width, canvas_size.height)
        return None
    try:
        return np.full(
            (canvas_size.height, canvas_size.width, 4),
            background_color,
            dtype=np.uint8
        )
    except (MemoryError, ValueError) as e:
        logger.error("Could not allocate %sx%s canvas: %s", canvas_size.width, canvas_size.height, e)
        return None


def merge_images(
    images: Sequence[np.ndarray],
    mode: StitchMode,
    background_color: Tuple[int, int, int, int] = CANVAS_BACKGROUND_BGRA
) -> Optional[np.ndarray]:
    """
    Concatenate images along the axis selected by the stitch mode.

    Args:
        images: Orientation-normalized images in stitch order
        mode: Concatenation axis
        background_color: BGRA fill for uncovered canvas

    Returns:
        The composite image, or None for empty input or failed allocation
    """
    if not images:
        return None

    layout = calculate_stitch_layout([get_image_dimension(img) for img in images], mode)
    canvas = create_canvas(layout.canvas_size, background_color)
    if canvas is None:
        return None

    try:
        for image, position in zip(images, layout.positions):
            paste_image_onto_canvas(canvas, image, position.x, position.y)
    except MemoryError:
        logger.error("Out of memory while drawing onto the stitching canvas")
        return None

    return canvas


def merge_vertically(images: Sequence[np.ndarray]) -> Optional[np.ndarray]:
    """Stack images top-to-bottom."""
    return merge_images(images, StitchMode.VERTICAL)


def merge_horizontally(images: Sequence[np.ndarray]) -> Optional[np.ndarray]:
    """Stack images left-to-right."""
    return merge_images(images, StitchMode.HORIZONTAL)
