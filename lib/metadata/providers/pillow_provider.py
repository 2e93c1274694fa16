import io
import logging
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from metadata.domain import ORIENTATION_TAG
from metadata.providers.base import MetadataProvider

logger = logging.getLogger(__name__)


class PillowProvider(MetadataProvider):
    """Reads header size and EXIF orientation for any format Pillow opens."""

    def is_available(self) -> bool:
        return True

    def read_orientation(self, image_bytes: bytes) -> Optional[int]:
        try:
            with Image.open(io.BytesIO(image_bytes)) as img:
                orientation = img.getexif().get(ORIENTATION_TAG)
        except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as e:
            logger.debug("Pillow could not read EXIF: %s", e)
            return None
        return orientation if isinstance(orientation, int) else None

    def read_size(self, image_bytes: bytes) -> Optional[Tuple[int, int]]:
        # Image.open only parses the header; pixel data stays undecoded
        try:
            with Image.open(io.BytesIO(image_bytes)) as img:
                return img.size
        except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as e:
            logger.debug("Pillow could not read image header: %s", e)
            return None
