"""
Controller for the crop screen: loads the source image, drives the crop
overlay and saves the cropped region.
"""
import logging
from concurrent.futures import Future
from typing import Any, Callable, Optional

import numpy as np

from cropping.domain.models import CropRect
from cropping.services.crop_overlay import CropOverlay
from cropping.services.crop_processor import crop_image
from stitch_config import CROP_CORNER_THRESHOLD_PX, CROP_DEFAULT_NAME_PREFIX
from workflow.domain.models import SavedCallback
from workflow.domain.observable import ObservableValue
from workflow.services.executor import BackgroundExecutor, CallQueue
from workflow.services.image_repository import ImageRepository, default_display_name

logger = logging.getLogger(__name__)

Dispatcher = Callable[[Callable[[], None]], None]


class CropController:
    """
    Owns the crop source image and the crop overlay.

    The overlay belongs to the interactive thread. When the worker publishes
    a new ``image_to_crop``, the overlay update is handed to ``dispatch``,
    which must run it on that thread (for example a toolkit's "call later").
    Without a dispatcher, updates are queued and applied by
    ``process_pending()``, which the interactive thread calls from its loop.
    """

    def __init__(
        self,
        repository: ImageRepository,
        executor: Optional[BackgroundExecutor] = None,
        overlay: Optional[CropOverlay] = None,
        dispatch: Optional[Dispatcher] = None
    ):
        self.repository = repository
        self.executor = executor or BackgroundExecutor("crop-worker")
        self.overlay = overlay or CropOverlay(corner_threshold=CROP_CORNER_THRESHOLD_PX)

        self._pending_calls = CallQueue()
        self._dispatch = dispatch or self._pending_calls.post

        self.image_to_crop: ObservableValue[Optional[np.ndarray]] = ObservableValue(None)
        self.last_saved_ref: ObservableValue[Optional[Any]] = ObservableValue(None)

        self.image_to_crop.subscribe(self._on_image_changed)

    def _on_image_changed(self, image: Optional[np.ndarray]) -> None:
        # Runs on the writer's thread; only the size is forwarded to the overlay
        if image is None:
            width, height = 0, 0
        else:
            height, width = image.shape[:2]
        self._dispatch(lambda: self.overlay.set_image(width, height))

    def process_pending(self) -> int:
        """Apply queued overlay updates on the calling (interactive) thread."""
        return self._pending_calls.drain()

    def load_for_crop(self, ref: Any) -> Future:
        """Decode the image (orientation applied) and make it the crop source."""
        return self.executor.submit(self._load_for_crop, ref)

    def _load_for_crop(self, ref: Any) -> Optional[np.ndarray]:
        image = self.repository.load_oriented(ref)
        if image is None:
            logger.warning("Could not load %s for cropping", ref)
        self.image_to_crop.set(image)
        return image

    def crop_and_save(
        self,
        file_name: str = "",
        crop_rect: Optional[CropRect] = None,
        on_saved: Optional[SavedCallback] = None
    ) -> Future:
        """
        Save the region under the crop rectangle.

        Args:
            file_name: Output name; blank means ``cropped_<millis>.png``
            crop_rect: Region to save; defaults to the overlay's rectangle
            on_saved: Called on the worker with the saved reference or None
        """
        source = self.image_to_crop.value
        rect = crop_rect if crop_rect is not None else self.overlay.crop_rect.value
        return self.executor.submit(self._crop_and_save, source, rect, file_name, on_saved)

    def _crop_and_save(
        self,
        source: Optional[np.ndarray],
        rect: Optional[CropRect],
        file_name: str,
        on_saved: Optional[SavedCallback]
    ) -> Optional[Any]:
        saved_ref = None
        try:
            if source is None or rect is None:
                logger.warning("Nothing to crop")
            else:
                cropped = crop_image(source, rect)
                if cropped is not None:
                    name = file_name.strip() or default_display_name(CROP_DEFAULT_NAME_PREFIX)
                    saved_ref = self.repository.save_png(cropped, name)
        except Exception:
            logger.exception("Cropping failed")
        finally:
            self.last_saved_ref.set(saved_ref)
            if on_saved is not None:
                on_saved(saved_ref)
        return saved_ref

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)
