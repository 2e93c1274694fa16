"""
Domain models for the cropping package.
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
