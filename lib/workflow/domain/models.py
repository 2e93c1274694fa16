from typing import Any, BinaryIO, Hashable, Optional

import attr
import numpy as np
from typing_extensions import Protocol

from metadata.domain import ORIENTATION_UNDEFINED
from stitching.domain.models import Dimension


@attr.s(frozen=True)
class ImageItem:
    ref: Hashable = attr.ib()
    width: int = attr.ib(default=0)
    height: int = attr.ib(default=0)
    orientation: int = attr.ib(default=ORIENTATION_UNDEFINED)
    thumbnail: Optional[np.ndarray] = attr.ib(default=None, eq=False, repr=False)

    @property
    def dimension(self) -> Dimension:
        return Dimension(self.width, self.height)


class ContentProvider(Protocol):
    def open_input(self, ref: Any) -> BinaryIO:
        ...


class MediaStore(Protocol):
    def insert(self, display_name: str, mime_type: str) -> Optional[Any]:
        ...

    def open_output(self, ref: Any) -> Optional[BinaryIO]:
        ...

    def publish(self, ref: Any) -> Any:
        ...

    def delete(self, ref: Any) -> None:
        ...


class SavedCallback(Protocol):
    def __call__(self, saved_ref: Optional[Any]) -> None:
        ...
