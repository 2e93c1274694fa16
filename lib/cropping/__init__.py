"""
Cropping package for the ImageTool application.

This package contains the crop rectangle model, the drag-driven crop overlay
and the crop extraction service.
"""
from cropping.domain.models import (
    ASPECT_RATIO_PRESETS,
    FREE_ASPECT_RATIO,
    AspectRatio,
    AspectRatioKind,
    CropRect,
    DragMode,
    Point,
    Size,
    ViewTransform,
    find_aspect_ratio
)
from cropping.services.crop_processor import crop_image
from cropping.services.crop_overlay import (
    CropOverlay,
    apply_drag,
    classify_drag,
    largest_centered_rect
)
