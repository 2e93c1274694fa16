"""
Services for the cropping package.
"""
from cropping.services.crop_processor import crop_image
from cropping.services.crop_overlay import (
    CropOverlay,
    apply_drag,
    classify_drag,
    largest_centered_rect
)
