# Configuration for the stitching and cropping process

# Memory guard
MAX_TOTAL_PIXELS = 120_000_000  # ~12k x 10k worth of decoded pixels

# Preview and thumbnail bounds (width, height)
STITCH_PREVIEW_MAX_SIZE = (1200, 1600)
THUMBNAIL_MAX_SIZE = (128, 128)

# Crop overlay
CROP_CORNER_THRESHOLD_PX = 48.0

# File naming conventions
STITCH_DEFAULT_NAME_PREFIX = "stitch_"
CROP_DEFAULT_NAME_PREFIX = "cropped_"
OUTPUT_FILE_EXTENSION = ".png"
OUTPUT_MIME_TYPE = "image/png"
PENDING_FILE_SUFFIX = ".pending"
DEFAULT_OUTPUT_SUBFOLDER_NAME = "ImageTool"

# Image settings
PNG_COMPRESSION_LEVEL = 6
CANVAS_BACKGROUND_BGRA = (0, 0, 0, 0)  # Transparent
VALID_IMAGE_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.tif', '.tiff', '.bmp', '.webp')

# Worker naming
BACKGROUND_WORKER_PREFIX = "imagetool-worker"
