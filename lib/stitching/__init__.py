"""
Stitching package for the ImageTool application.

This package contains modules for orienting, concatenating and downsampling images.
"""
from stitching.domain.models import (
    StitchMode,
    Dimension,
    Position,
    CanvasSize,
    StitchLayout,
    StitchingConfig
)
from stitching.services.stitching_service import StitchingService
