"""
This module provides blocking entry points for running a stitch or a crop
without a front end, wiring the controllers to a directory media store.
"""
import logging
import os
import re
from typing import Any, List, Optional, Sequence

from app_config_manager import AppSettings
from app_utils import get_default_media_dir_path
from cropping.domain.models import FREE_ASPECT_RATIO, AspectRatio, CropRect, find_aspect_ratio
from cropping.services.crop_overlay import CropOverlay
from stitch_config import VALID_IMAGE_EXTENSIONS
from stitching.domain.models import StitchingConfig, StitchMode
from stitching.services.stitching_service import StitchingService
from workflow.services.crop_controller import CropController
from workflow.services.image_repository import ImageRepository
from workflow.services.media_store import DirectoryMediaStore
from workflow.services.stitch_controller import StitchController

logger = logging.getLogger(__name__)

_NUMBER_CHUNK_PATTERN = re.compile(r"(\d+)")


def _natural_sort_key(file_name: str):
    return [int(chunk) if chunk.isdigit() else chunk.lower() for chunk in _NUMBER_CHUNK_PATTERN.split(file_name)]


def find_image_files(source_directory_path: str) -> List[str]:
    """
    List supported image files in a folder, in natural name order
    (``img_2`` before ``img_10``). Hidden and pending files are skipped.
    """
    if not os.path.isdir(source_directory_path):
        logger.error("Source directory '%s' not found.", source_directory_path)
        return []

    image_files = []
    for item_name in os.listdir(source_directory_path):
        item_full_path = os.path.join(source_directory_path, item_name)
        if item_name.startswith(".") or not os.path.isfile(item_full_path):
            continue
        if item_name.lower().endswith(VALID_IMAGE_EXTENSIONS):
            image_files.append(item_full_path)
    image_files.sort(key=lambda path: _natural_sort_key(os.path.basename(path)))
    logger.info("Found %s image file(s) in %s", len(image_files), source_directory_path)
    return image_files


def create_repository(settings: AppSettings) -> ImageRepository:
    output_dir = settings.output_dir or get_default_media_dir_path()
    return ImageRepository(DirectoryMediaStore(output_dir))


def create_stitch_controller(settings: Optional[AppSettings] = None) -> StitchController:
    settings = settings or AppSettings.load()
    service = StitchingService(StitchingConfig(
        max_total_pixels=settings.max_total_pixels,
        preview_max_size=settings.preview_max_size
    ))
    return StitchController(
        create_repository(settings),
        stitching_service=service,
        thumbnail_size=settings.thumbnail_max_size,
        stitch_mode=_stitch_mode_from_settings(settings.last_stitch_mode)
    )


def _stitch_mode_from_settings(name: str) -> StitchMode:
    try:
        return StitchMode.from_name(name)
    except ValueError:
        logger.warning("Unknown stitch mode '%s' in settings, using vertical", name)
        return StitchMode.VERTICAL


def _aspect_ratio_from_settings(name: str) -> AspectRatio:
    try:
        return find_aspect_ratio(name)
    except KeyError:
        logger.warning("Unknown aspect ratio '%s' in settings, using free cropping", name)
        return FREE_ASPECT_RATIO


def create_crop_controller(settings: Optional[AppSettings] = None) -> CropController:
    settings = settings or AppSettings.load()
    overlay = CropOverlay(
        corner_threshold=settings.corner_threshold_px,
        aspect_ratio=_aspect_ratio_from_settings(settings.last_aspect_ratio)
    )
    return CropController(create_repository(settings), overlay=overlay)


def run_stitch(
    image_refs: Sequence[Any],
    mode: StitchMode = StitchMode.VERTICAL,
    file_name: str = "",
    settings: Optional[AppSettings] = None
) -> Optional[Any]:
    """
    Stitch images and save the result, waiting for completion.

    Args:
        image_refs: Images in stitch order
        mode: Concatenation axis
        file_name: Output name; blank means a timestamped default
        settings: Application settings or None to load the saved ones

    Returns:
        Reference of the saved image or None on failure
    """
    controller = create_stitch_controller(settings)
    try:
        controller.set_stitch_mode(mode)
        controller.add_refs(image_refs).result()
        return controller.stitch_and_save(file_name).result()
    finally:
        controller.shutdown()


def run_crop(
    image_ref: Any,
    crop_rect: CropRect,
    file_name: str = "",
    settings: Optional[AppSettings] = None
) -> Optional[Any]:
    """Crop one image to a rectangle (image coordinates) and save it."""
    controller = create_crop_controller(settings)
    try:
        if controller.load_for_crop(image_ref).result() is None:
            return None
        return controller.crop_and_save(file_name, crop_rect).result()
    finally:
        controller.shutdown()
