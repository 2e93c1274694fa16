"""
Service for downsampling images into previews and thumbnails.
"""
import logging
import math

import cv2
import numpy as np

from stitch_config import THUMBNAIL_MAX_SIZE

logger = logging.getLogger(__name__)


def calculate_fit_scale(source_width: int, source_height: int, max_width: int, max_height: int) -> float:
    """Uniform scale that fits the source inside the target bounds."""
    if source_width <= 0 or source_height <= 0:
        raise ValueError(f"Invalid source size {source_width}x{source_height}")
    if max_width <= 0 or max_height <= 0:
        raise ValueError(f"Invalid target bounds {max_width}x{max_height}")
    return min(max_width / source_width, max_height / source_height)


def create_preview_image(image: np.ndarray, max_width: int, max_height: int) -> np.ndarray:
    """
    Create a downsampled copy that fits into max_width x max_height.

    Keeps the aspect ratio. If the source already fits it is returned as-is
    (no copy); otherwise both sides are floored after scaling and resized
    with area interpolation.
    """
    height, width = image.shape[:2]
    ratio = calculate_fit_scale(width, height, max_width, max_height)
    if ratio >= 1.0:
        return image

    new_width = max(1, int(math.floor(width * ratio)))
    new_height = max(1, int(math.floor(height * ratio)))
    return cv2.resize(image, (new_width, new_height), interpolation=cv2.INTER_AREA)


def create_thumbnail(image: np.ndarray, max_size=THUMBNAIL_MAX_SIZE) -> np.ndarray:
    max_width, max_height = max_size
    return create_preview_image(image, max_width, max_height)
