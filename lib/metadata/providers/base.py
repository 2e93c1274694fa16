from abc import ABC, abstractmethod
from typing import Optional, Tuple


class MetadataProvider(ABC):
    @abstractmethod
    def is_available(self) -> bool:
        pass

    @abstractmethod
    def read_orientation(self, image_bytes: bytes) -> Optional[int]:
        """EXIF orientation code, or None if this provider cannot tell."""

    @abstractmethod
    def read_size(self, image_bytes: bytes) -> Optional[Tuple[int, int]]:
        """Raw (width, height) from the header, or None if unknown."""
