"""
Service for extracting the crop rectangle from an image.
"""
import logging
from typing import Optional

import numpy as np

from cropping.domain.models import CropRect

logger = logging.getLogger(__name__)


def crop_image(image: np.ndarray, rect: CropRect) -> Optional[np.ndarray]:
    """
    Copy the region covered by a crop rectangle.

    Args:
        image: Source image
        rect: Crop rectangle in image coordinates; edges are truncated to
            integers and clipped to the image bounds

    Returns:
        The cropped copy, or None if the clipped region is empty
    """
    img_height, img_width = image.shape[:2]
    left, top, right, bottom = rect.normalized().to_int_box()

    x1 = max(0, min(left, img_width))
    y1 = max(0, min(top, img_height))
    x2 = max(0, min(right, img_width))
    y2 = max(0, min(bottom, img_height))

    if x2 <= x1 or y2 <= y1:
        logger.warning("Crop region is empty after clipping: %s,%s,%s,%s", x1, y1, x2, y2)
        return None

    try:
        return image[y1:y2, x1:x2].copy()
    except MemoryError:
        logger.error("Out of memory copying %sx%s crop", x2 - x1, y2 - y1)
        return None
