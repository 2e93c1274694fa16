import logging
from typing import List, Optional, Tuple

from metadata.domain import ORIENTATION_UNDEFINED, ImageInfo
from metadata.providers.base import MetadataProvider
from metadata.providers.piexif_provider import PiexifProvider
from metadata.providers.pillow_provider import PillowProvider

logger = logging.getLogger(__name__)


class MetadataService:
    def __init__(self, providers: Optional[List[MetadataProvider]] = None):
        if providers is None:
            providers = [PiexifProvider(), PillowProvider()]
        self.providers = [p for p in providers if p.is_available()]

    def read_orientation(self, image_bytes: bytes) -> int:
        for provider in self.providers:
            orientation = provider.read_orientation(image_bytes)
            if orientation is not None:
                return orientation
        logger.debug("No EXIF orientation found, treating as undefined")
        return ORIENTATION_UNDEFINED

    def read_size(self, image_bytes: bytes) -> Tuple[int, int]:
        for provider in self.providers:
            size = provider.read_size(image_bytes)
            if size is not None:
                return size
        logger.warning("Could not determine image size from header")
        return 0, 0

    def read_info(self, image_bytes: bytes) -> ImageInfo:
        width, height = self.read_size(image_bytes)
        return ImageInfo(width=width, height=height, orientation=self.read_orientation(image_bytes))
