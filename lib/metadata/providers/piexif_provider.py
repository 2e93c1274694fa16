import logging
import struct
from typing import Optional, Tuple

import piexif

from metadata.providers.base import MetadataProvider

logger = logging.getLogger(__name__)

_EXIF_CONTAINER_MAGIC = (b"\xff\xd8", b"II*\x00", b"MM\x00*")


class PiexifProvider(MetadataProvider):
    """Reads EXIF from JPEG and TIFF streams."""

    def is_available(self) -> bool:
        return True

    def read_orientation(self, image_bytes: bytes) -> Optional[int]:
        if not image_bytes.startswith(_EXIF_CONTAINER_MAGIC):
            return None
        try:
            exif_dictionary = piexif.load(image_bytes)
        except (ValueError, struct.error, KeyError) as e:
            logger.debug("piexif could not parse EXIF: %s", e)
            return None

        orientation = exif_dictionary.get("0th", {}).get(piexif.ImageIFD.Orientation)
        if isinstance(orientation, int):
            return orientation
        return None

    def read_size(self, image_bytes: bytes) -> Optional[Tuple[int, int]]:
        return None
