"""
File-system implementations of the content provider and media store boundaries.
"""
import logging
import os
import threading
from typing import BinaryIO, Optional

from stitch_config import OUTPUT_FILE_EXTENSION, PENDING_FILE_SUFFIX

logger = logging.getLogger(__name__)


class FileContentProvider:
    """Resolves image references that are plain file paths."""

    def open_input(self, ref) -> BinaryIO:
        return open(os.fspath(ref), "rb")


class DirectoryMediaStore:
    """
    Shared media storage backed by a directory.

    Entries are created as hidden ``.pending`` files and become visible under
    their display name only when published, so readers never see a partially
    written image.
    """

    def __init__(self, output_dir: str):
        self.output_dir = os.path.abspath(output_dir)
        self._lock = threading.Lock()

    def _final_path(self, pending_path: str) -> str:
        directory, name = os.path.split(pending_path)
        return os.path.join(directory, name[1:-len(PENDING_FILE_SUFFIX)])

    def _unique_display_name(self, display_name: str) -> str:
        base_name, ext = os.path.splitext(display_name)
        candidate = display_name
        counter = 1
        while (os.path.exists(os.path.join(self.output_dir, candidate))
               or os.path.exists(os.path.join(self.output_dir, f".{candidate}{PENDING_FILE_SUFFIX}"))):
            candidate = f"{base_name} ({counter}){ext}"
            counter += 1
        return candidate

    def insert(self, display_name: str, mime_type: str) -> Optional[str]:
        """Reserve a pending entry; returns its reference or None."""
        display_name = os.path.basename(display_name.strip())
        if not display_name:
            logger.error("Cannot insert media entry without a display name")
            return None
        try:
            os.makedirs(self.output_dir, exist_ok=True)
            with self._lock:
                unique_name = self._unique_display_name(display_name)
                pending_path = os.path.join(self.output_dir, f".{unique_name}{PENDING_FILE_SUFFIX}")
                with open(pending_path, "xb"):
                    pass
        except OSError as e:
            logger.error("Could not create media entry %s in %s: %s", display_name, self.output_dir, e)
            return None
        logger.debug("Inserted pending media entry %s (%s)", pending_path, mime_type)
        return pending_path

    def open_output(self, ref: str) -> Optional[BinaryIO]:
        try:
            return open(ref, "wb")
        except OSError as e:
            logger.error("Could not open media entry %s for writing: %s", ref, e)
            return None

    def publish(self, ref: str) -> str:
        """Make a pending entry visible; returns the final path."""
        final_path = self._final_path(ref)
        os.replace(ref, final_path)
        return final_path

    def delete(self, ref: str) -> None:
        try:
            if os.path.exists(ref):
                os.remove(ref)
        except OSError as e:
            logger.warning("Failed to delete media entry %s: %s", ref, e)


def ensure_png_name(display_name: str) -> str:
    if display_name.lower().endswith(OUTPUT_FILE_EXTENSION):
        return display_name
    return display_name + OUTPUT_FILE_EXTENSION
