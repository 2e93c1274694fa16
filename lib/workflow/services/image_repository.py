"""
Image loading and saving on top of the content provider and media store.
"""
import io
import logging
import time
from typing import Any, Optional, Tuple

import cv2
import imageio.v3 as iio
import numpy as np
from PIL import Image, UnidentifiedImageError

from image_utils import convert_to_8bit_if_needed, pil_to_numpy, to_rgb_for_encoding
from metadata.domain import ORIENTATION_UNDEFINED
from metadata.service import MetadataService
from stitch_config import (
    OUTPUT_FILE_EXTENSION,
    OUTPUT_MIME_TYPE,
    PNG_COMPRESSION_LEVEL,
    STITCH_DEFAULT_NAME_PREFIX,
    THUMBNAIL_MAX_SIZE
)
from stitching.services.image_resizer import create_preview_image
from stitching.services.orientation import apply_exif_orientation
from workflow.domain.models import ContentProvider, ImageItem, MediaStore
from workflow.services.media_store import FileContentProvider, ensure_png_name

logger = logging.getLogger(__name__)


def default_display_name(prefix: str = STITCH_DEFAULT_NAME_PREFIX) -> str:
    """Timestamped file name, e.g. ``stitch_1700000000000.png``."""
    return f"{prefix}{int(time.time() * 1000)}{OUTPUT_FILE_EXTENSION}"


def encode_png(image: np.ndarray) -> bytes:
    """Encode an OpenCV-ordered array as PNG bytes."""
    try:
        return iio.imwrite("<bytes>", to_rgb_for_encoding(image), extension=OUTPUT_FILE_EXTENSION)
    except (ValueError, TypeError, OSError) as e_imageio:
        logger.warning("imageio PNG encode failed, falling back to OpenCV: %s", e_imageio)

    ok, buffer = cv2.imencode(
        OUTPUT_FILE_EXTENSION,
        convert_to_8bit_if_needed(image),
        [int(cv2.IMWRITE_PNG_COMPRESSION), PNG_COMPRESSION_LEVEL]
    )
    if not ok:
        raise IOError("cv2.imencode for PNG returned False.")
    return buffer.tobytes()


class ImageRepository:
    """Reads selected images and writes results to shared media storage."""

    def __init__(
        self,
        media_store: MediaStore,
        content_provider: Optional[ContentProvider] = None,
        metadata_service: Optional[MetadataService] = None
    ):
        self.media_store = media_store
        self.content_provider = content_provider or FileContentProvider()
        self.metadata_service = metadata_service or MetadataService()

    def _read_bytes(self, ref: Any) -> Optional[bytes]:
        try:
            with self.content_provider.open_input(ref) as stream:
                return stream.read()
        except OSError as e:
            logger.error("Could not open %s: %s", ref, e)
            return None

    def load_full(self, ref: Any) -> Optional[np.ndarray]:
        """
        Decode a full-resolution image (no orientation applied).

        Returns:
            The decoded BGR/BGRA/grayscale array, or None on decode failure
            or when memory runs out
        """
        data = self._read_bytes(ref)
        if data is None:
            return None
        return self._decode_full(data, ref)

    def _decode_full(self, data: bytes, ref: Any) -> Optional[np.ndarray]:
        try:
            image = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
            if image is None or image.size == 0:
                logger.error("Could not decode image: %s", ref)
                return None
            return convert_to_8bit_if_needed(image)
        except MemoryError:
            logger.error("Out of memory decoding %s", ref)
            return None
        except cv2.error as e:
            logger.error("OpenCV failed to decode %s: %s", ref, e)
            return None

    def load_oriented(self, ref: Any, orientation: Optional[int] = None) -> Optional[np.ndarray]:
        """Decode an image and bake in its EXIF orientation."""
        data = self._read_bytes(ref)
        if data is None:
            return None
        if orientation is None:
            orientation = self.metadata_service.read_orientation(data)
        image = self._decode_full(data, ref)
        if image is None:
            return None
        return apply_exif_orientation(image, orientation)

    def get_image_size(self, ref: Any) -> Tuple[int, int]:
        """Raw (width, height) from the header, (0, 0) if unreadable."""
        data = self._read_bytes(ref)
        if data is None:
            return 0, 0
        return self.metadata_service.read_size(data)

    def get_exif_orientation(self, ref: Any) -> int:
        data = self._read_bytes(ref)
        if data is None:
            return ORIENTATION_UNDEFINED
        return self.metadata_service.read_orientation(data)

    def load_thumbnail(self, ref: Any, max_width: int = THUMBNAIL_MAX_SIZE[0],
                       max_height: int = THUMBNAIL_MAX_SIZE[1],
                       orientation: Optional[int] = None) -> Optional[np.ndarray]:
        """Decode a reduced-size, oriented thumbnail."""
        data = self._read_bytes(ref)
        if data is None:
            return None
        if orientation is None:
            orientation = self.metadata_service.read_orientation(data)
        return self._decode_thumbnail(data, ref, max_width, max_height, orientation)

    def _decode_thumbnail(self, data: bytes, ref: Any, max_width: int, max_height: int,
                          orientation: int) -> Optional[np.ndarray]:
        try:
            with Image.open(io.BytesIO(data)) as img:
                # JPEG can decode straight to a smaller scale
                img.draft("RGB", (max_width * 2, max_height * 2))
                image = pil_to_numpy(img)
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.error("Error loading thumbnail for %s: %s", ref, e)
            return None
        except MemoryError:
            logger.error("Out of memory loading thumbnail for %s", ref)
            return None
        oriented = apply_exif_orientation(image, orientation)
        return create_preview_image(oriented, max_width, max_height)

    def load_item(self, ref: Any, max_width: int = THUMBNAIL_MAX_SIZE[0],
                  max_height: int = THUMBNAIL_MAX_SIZE[1]) -> ImageItem:
        """
        Describe a selected image: raw size, EXIF orientation and an oriented
        thumbnail, all from a single read of the stream.

        Unreadable images come back with a 0x0 size and no thumbnail.
        """
        data = self._read_bytes(ref)
        if data is None:
            return ImageItem(ref)
        info = self.metadata_service.read_info(data)
        thumbnail = self._decode_thumbnail(data, ref, max_width, max_height, info.orientation)
        return ImageItem(ref, info.width, info.height, info.orientation, thumbnail)

    def save_png(self, image: np.ndarray, display_name: str = "") -> Optional[Any]:
        """
        Save an image as PNG into the media store.

        Args:
            image: Image to save
            display_name: File name; blank means a timestamped default

        Returns:
            Reference of the published entry, or None on failure (the
            pending entry is deleted)
        """
        filename = ensure_png_name(display_name.strip()) if display_name and display_name.strip() \
            else default_display_name()

        try:
            png_bytes = encode_png(image)
        except (IOError, cv2.error, MemoryError) as e:
            logger.error("Could not encode %s: %s", filename, e)
            return None

        item_ref = self.media_store.insert(filename, OUTPUT_MIME_TYPE)
        if item_ref is None:
            return None

        out = self.media_store.open_output(item_ref)
        if out is None:
            logger.error("Failed to open output stream for %s", filename)
            self.media_store.delete(item_ref)
            return None

        try:
            with out:
                out.write(png_bytes)
                out.flush()
            saved_ref = self.media_store.publish(item_ref)
        except OSError as e:
            logger.error("Error writing %s: %s", filename, e)
            self.media_store.delete(item_ref)
            return None

        logger.info("Saved %s", saved_ref)
        return saved_ref
