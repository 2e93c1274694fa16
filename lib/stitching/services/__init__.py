"""
Services for the stitching package.
"""
from stitching.services.orientation import (
    apply_exif_orientation,
    inverse_orientation
)
from stitching.services.image_resizer import (
    create_preview_image,
    create_thumbnail
)
from stitching.services.layout_manager import (
    calculate_stitch_layout,
    get_image_dimension,
    total_pixel_count
)
from stitching.services.canvas_processor import (
    merge_images,
    merge_vertically,
    merge_horizontally
)
from stitching.services.stitching_service import StitchingService
