"""
Service for managing the layout of images during stitching.
"""
from typing import Iterable, List, Sequence

import numpy as np

from stitching.domain.models import (
    CanvasSize,
    Dimension,
    Position,
    StitchLayout,
    StitchMode
)


def calculate_stitch_layout(dimensions: Sequence[Dimension], mode: StitchMode) -> StitchLayout:
    """
    Calculate the canvas size and offsets for concatenating images.

    Vertical mode stacks inputs top-to-bottom, left-aligned; horizontal mode
    places them left-to-right, top-aligned. No scaling is applied, so inputs
    smaller along the cross axis leave blank canvas.

    Args:
        dimensions: Input sizes in stitch order
        mode: Concatenation axis

    Returns:
        StitchLayout with the canvas size and one position per input
    """
    if not dimensions:
        return StitchLayout(CanvasSize(0, 0), ())

    positions: List[Position] = []
    offset = 0
    if mode is StitchMode.VERTICAL:
        for dim in dimensions:
            positions.append(Position(0, offset))
            offset += dim.height
        canvas = CanvasSize(max(dim.width for dim in dimensions), offset)
    elif mode is StitchMode.HORIZONTAL:
        for dim in dimensions:
            positions.append(Position(offset, 0))
            offset += dim.width
        canvas = CanvasSize(offset, max(dim.height for dim in dimensions))
    else:
        raise ValueError(f"Unsupported stitch mode: {mode!r}")

    return StitchLayout(canvas, positions)


def get_image_dimension(image: np.ndarray) -> Dimension:
    """Get the width and height of an image array (0x0 if invalid)."""
    if isinstance(image, np.ndarray) and image.ndim >= 2 and image.size > 0:
        return Dimension(width=image.shape[1], height=image.shape[0])
    return Dimension(0, 0)


def total_pixel_count(dimensions: Iterable[Dimension]) -> int:
    """Sum of width x height over all inputs."""
    return sum(dim.pixel_count for dim in dimensions)


def exceeds_pixel_budget(dimensions: Iterable[Dimension], max_total_pixels: int) -> bool:
    return total_pixel_count(dimensions) > max_total_pixels
