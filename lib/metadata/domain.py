from __future__ import annotations
import attr

ORIENTATION_UNDEFINED = 0
ORIENTATION_TAG = 0x0112


@attr.s(frozen=True)
class ImageInfo:
    width: int = attr.ib(default=0)
    height: int = attr.ib(default=0)
    orientation: int = attr.ib(default=ORIENTATION_UNDEFINED)

    @property
    def has_size(self) -> bool:
        return self.width > 0 and self.height > 0

    @classmethod
    def unknown(cls) -> ImageInfo:
        return cls(width=0, height=0, orientation=ORIENTATION_UNDEFINED)
