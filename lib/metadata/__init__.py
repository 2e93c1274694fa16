from metadata.domain import ImageInfo, ORIENTATION_UNDEFINED
from metadata.service import MetadataService

_metadata_service = MetadataService()


def read_image_info(image_bytes: bytes) -> ImageInfo:
    return _metadata_service.read_info(image_bytes)


__all__ = ['ImageInfo', 'MetadataService', 'ORIENTATION_UNDEFINED', 'read_image_info']
