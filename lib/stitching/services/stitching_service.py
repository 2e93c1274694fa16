"""
Facade service for stitching functionality.

This module serves as the main entry point for the stitching functionality,
combining the orientation, layout, canvas and resizing services.
"""
import logging
from typing import Iterable, Optional, Sequence

import numpy as np

from stitching.domain.models import Dimension, StitchMode, StitchingConfig
from stitching.services.canvas_processor import merge_images
from stitching.services.image_resizer import create_preview_image
from stitching.services.layout_manager import exceeds_pixel_budget, total_pixel_count
from stitching.services.orientation import apply_exif_orientation

logger = logging.getLogger(__name__)


class StitchingService:
    """
    Facade service for coordinating the stitching process.
    """

    def __init__(self, config: Optional[StitchingConfig] = None):
        """
        Initialize the stitching service with a configuration.

        Args:
            config: Stitching configuration or None to use default
        """
        self.config = config or StitchingConfig.default()

    def is_within_pixel_budget(self, dimensions: Iterable[Dimension]) -> bool:
        """
        Check a selection against the decoded-pixel ceiling.

        Args:
            dimensions: Raw sizes of the selected images

        Returns:
            True if the summed pixel count does not exceed the configured limit
        """
        dimensions = list(dimensions)
        if exceeds_pixel_budget(dimensions, self.config.max_total_pixels):
            logger.warning(
                "Selection of %s pixels exceeds the limit of %s",
                total_pixel_count(dimensions), self.config.max_total_pixels
            )
            return False
        return True

    def orient(self, image: np.ndarray, exif_orientation: int) -> np.ndarray:
        return apply_exif_orientation(image, exif_orientation)

    def stitch(self, images: Sequence[np.ndarray], mode: StitchMode) -> Optional[np.ndarray]:
        """
        Concatenate images into a single canvas.

        Args:
            images: Orientation-normalized images in stitch order
            mode: Concatenation axis

        Returns:
            The composite image or None if it could not be produced
        """
        result = merge_images(images, mode, self.config.background_color)
        if result is None:
            logger.warning("Stitching %s image(s) %s produced no result", len(images), mode.value)
        return result

    def create_preview(self, image: np.ndarray) -> np.ndarray:
        """
        Downsample an image to the configured preview bounds.

        Args:
            image: Full-size image

        Returns:
            The preview (the input itself when it already fits)
        """
        max_width, max_height = self.config.preview_max_size
        return create_preview_image(image, max_width, max_height)
