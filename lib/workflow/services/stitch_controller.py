"""
Controller for the stitch screen: image selection, stitching and saving.
"""
import logging
import threading
from concurrent.futures import Future
from typing import Any, Iterable, List, Optional, Tuple

import numpy as np

from stitch_config import MAX_TOTAL_PIXELS, STITCH_PREVIEW_MAX_SIZE, THUMBNAIL_MAX_SIZE
from stitching.domain.models import StitchingConfig, StitchMode
from stitching.services.stitching_service import StitchingService
from workflow.domain.models import ImageItem, SavedCallback
from workflow.domain.observable import ObservableValue
from workflow.services.executor import BackgroundExecutor
from workflow.services.image_repository import ImageRepository

logger = logging.getLogger(__name__)


class StitchController:
    """
    Owns the selection and stitch state and runs all heavy work on one
    background worker.

    UI code reads the observables and calls the operations; only the worker
    writes ``preview_image``, ``is_processing`` and ``last_saved_ref``.
    """

    def __init__(
        self,
        repository: ImageRepository,
        stitching_service: Optional[StitchingService] = None,
        executor: Optional[BackgroundExecutor] = None,
        thumbnail_size: Tuple[int, int] = THUMBNAIL_MAX_SIZE,
        stitch_mode: StitchMode = StitchMode.VERTICAL
    ):
        self.repository = repository
        self.stitching_service = stitching_service or StitchingService(
            StitchingConfig(max_total_pixels=MAX_TOTAL_PIXELS, preview_max_size=STITCH_PREVIEW_MAX_SIZE)
        )
        self.executor = executor or BackgroundExecutor("stitch-worker")
        self.thumbnail_size = thumbnail_size

        self.selected_images: ObservableValue[Tuple[ImageItem, ...]] = ObservableValue(())
        self.preview_image: ObservableValue[Optional[np.ndarray]] = ObservableValue(None)
        self.is_processing = ObservableValue(False)
        self.stitch_mode = ObservableValue(stitch_mode)
        self.last_saved_ref: ObservableValue[Optional[Any]] = ObservableValue(None)
        self.last_error: ObservableValue[Optional[str]] = ObservableValue(None)

        self._selection_lock = threading.Lock()

    def add_refs(self, refs: Iterable[Any]) -> Future:
        """Read size, orientation and a thumbnail for each ref, then append them."""
        return self.executor.submit(self._add_refs, list(refs))

    def _add_refs(self, refs: List[Any]) -> Tuple[ImageItem, ...]:
        max_width, max_height = self.thumbnail_size
        items = []
        for ref in refs:
            item = self.repository.load_item(ref, max_width, max_height)
            items.append(item)
            logger.debug("Selected %s (%sx%s, orientation %s)", ref, item.width, item.height, item.orientation)

        with self._selection_lock:
            updated = self.selected_images.value + tuple(items)
            self.selected_images.set(updated)
        return updated

    def remove_item(self, item: ImageItem) -> None:
        with self._selection_lock:
            current = list(self.selected_images.value)
            if item in current:
                current.remove(item)
                self.selected_images.set(tuple(current))

    def clear_all(self) -> None:
        with self._selection_lock:
            self.selected_images.set(())
        self.preview_image.set(None)

    def set_stitch_mode(self, mode: StitchMode) -> None:
        self.stitch_mode.set(mode)

    def stitch_and_save(self, file_name: str = "", on_saved: Optional[SavedCallback] = None) -> Future:
        """
        Stitch the current selection, publish a preview and save the result.

        Returns:
            Future resolving to the saved reference, or None on any failure
        """
        return self.executor.submit(self._stitch_and_save, file_name, on_saved)

    def _stitch_and_save(self, file_name: str, on_saved: Optional[SavedCallback]) -> Optional[Any]:
        items = self.selected_images.value
        if not items:
            logger.info("Nothing selected to stitch")
            return None

        self.is_processing.set(True)
        self.last_error.set(None)
        saved_ref = None
        try:
            saved_ref = self._run_stitch(items, self.stitch_mode.value, file_name)
        except Exception as e:
            logger.exception("Stitching failed")
            self.last_error.set(f"Stitching failed: {e}")
        finally:
            self.is_processing.set(False)
            self.last_saved_ref.set(saved_ref)
            if on_saved is not None:
                on_saved(saved_ref)
        return saved_ref

    def _fail(self, message: str) -> None:
        logger.warning(message)
        self.last_error.set(message)

    def _run_stitch(self, items: Tuple[ImageItem, ...], mode: StitchMode, file_name: str) -> Optional[Any]:
        if not self.stitching_service.is_within_pixel_budget(item.dimension for item in items):
            self.preview_image.set(None)
            self._fail("Selection is too large to stitch in memory")
            return None

        merged = self._load_and_merge(items, mode)
        if merged is None:
            return None

        self.preview_image.set(self.stitching_service.create_preview(merged))
        saved_ref = self.repository.save_png(merged, file_name)
        if saved_ref is None:
            self._fail("Could not save the stitched image")
        return saved_ref

    def _load_and_merge(self, items: Tuple[ImageItem, ...], mode: StitchMode) -> Optional[np.ndarray]:
        # Source buffers go out of scope when this returns, before encoding
        images = []
        for item in items:
            decoded = self.repository.load_full(item.ref)
            if decoded is None:
                logger.warning("Skipping %s: could not be decoded", item.ref)
                continue
            images.append(self.stitching_service.orient(decoded, item.orientation))
            del decoded

        if not images:
            self._fail("None of the selected images could be decoded")
            return None

        logger.info("Stitching %s image(s) %s", len(images), mode.value)
        merged = self.stitching_service.stitch(images, mode)
        images.clear()
        if merged is None:
            self._fail("Could not allocate the stitched image")
        return merged

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)
