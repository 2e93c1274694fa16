"""
Service for baking EXIF orientation into image arrays.
"""
import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)

ORIENTATION_UNDEFINED = 0
ORIENTATION_NORMAL = 1
ORIENTATION_FLIP_HORIZONTAL = 2
ORIENTATION_ROTATE_180 = 3
ORIENTATION_FLIP_VERTICAL = 4
ORIENTATION_TRANSPOSE = 5
ORIENTATION_ROTATE_90 = 6
ORIENTATION_TRANSVERSE = 7
ORIENTATION_ROTATE_270 = 8

_INVERSE_ORIENTATIONS = {
    ORIENTATION_ROTATE_90: ORIENTATION_ROTATE_270,
    ORIENTATION_ROTATE_270: ORIENTATION_ROTATE_90,
}


def _transverse(image: np.ndarray) -> np.ndarray:
    return cv2.flip(cv2.transpose(image), -1)


_ORIENTATION_TRANSFORMS = {
    ORIENTATION_FLIP_HORIZONTAL: lambda img: cv2.flip(img, 1),
    ORIENTATION_ROTATE_180: lambda img: cv2.rotate(img, cv2.ROTATE_180),
    ORIENTATION_FLIP_VERTICAL: lambda img: cv2.flip(img, 0),
    ORIENTATION_TRANSPOSE: cv2.transpose,
    ORIENTATION_ROTATE_90: lambda img: cv2.rotate(img, cv2.ROTATE_90_CLOCKWISE),
    ORIENTATION_TRANSVERSE: _transverse,
    ORIENTATION_ROTATE_270: lambda img: cv2.rotate(img, cv2.ROTATE_90_COUNTERCLOCKWISE),
}


def swaps_dimensions(exif_orientation: int) -> bool:
    """True when the orientation exchanges width and height."""
    return exif_orientation in (
        ORIENTATION_TRANSPOSE,
        ORIENTATION_ROTATE_90,
        ORIENTATION_TRANSVERSE,
        ORIENTATION_ROTATE_270,
    )


def inverse_orientation(exif_orientation: int) -> int:
    """
    Get the orientation code that undoes the given one.

    Flips, the 180 degree rotation, transpose and transverse are their own
    inverse; the two quarter turns undo each other.
    """
    return _INVERSE_ORIENTATIONS.get(exif_orientation, exif_orientation)


def apply_exif_orientation(image: np.ndarray, exif_orientation: int) -> np.ndarray:
    """
    Rotate/flip an image according to an EXIF orientation code.

    Args:
        image: Decoded image array
        exif_orientation: EXIF orientation tag value (1-8)

    Returns:
        A new array with the transform applied, or the very same array for
        normal, undefined and unknown codes. If the transform runs out of
        memory the input is returned unchanged.
    """
    transform = _ORIENTATION_TRANSFORMS.get(exif_orientation)
    if transform is None:
        return image

    try:
        return np.ascontiguousarray(transform(np.ascontiguousarray(image)))
    except MemoryError:
        logger.error(
            "Out of memory applying orientation %s to %sx%s image",
            exif_orientation, image.shape[1], image.shape[0]
        )
        return image
