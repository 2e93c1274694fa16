"""
Domain models for the stitching package.
"""
from stitching.domain.models import (
    StitchMode,
    Dimension,
    Position,
    CanvasSize,
    StitchLayout,
    StitchingConfig
)
