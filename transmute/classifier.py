"""
MIME classification.

Maps a sniffed MIME string such as ``image/png`` to the catalog's
``(FileType, subtype)`` pair.
"""

from typing import Tuple

from .config import FileType
from .utils.catalog_lookup import get_media_file_type, lookup_mime_type
from .utils.error_handling import UnsupportedMimeType


def classify(mime_type: str) -> Tuple[FileType, str]:
    """
    Classify a MIME string.

    Parameters after ``;`` are ignored and matching is case-insensitive.
    A MIME string registered in the catalog resolves to its registered pair;
    any other string under a known top-level type resolves to that type's
    default file type and the raw subtype, which the converter factory will
    then reject.

    Args:
        mime_type: MIME string in ``type/subtype`` form

    Returns:
        Tuple of (file type, subtype)

    Raises:
        UnsupportedMimeType: If the string is malformed, the subtype is empty,
            or the type segment is not known to the catalog
    """
    if not isinstance(mime_type, str):
        raise UnsupportedMimeType(f"MIME type must be a string, got {type(mime_type).__name__}")

    essence = mime_type.split(";", 1)[0].strip().lower()
    parts = essence.split("/")
    if len(parts) != 2:
        raise UnsupportedMimeType(f"Malformed MIME type: '{mime_type}'", {"mime_type": mime_type})

    media_type, subtype = parts
    if not media_type or any(ch.isspace() for ch in essence):
        raise UnsupportedMimeType(f"Malformed MIME type: '{mime_type}'", {"mime_type": mime_type})
    if not subtype:
        raise UnsupportedMimeType(f"MIME type '{mime_type}' has an empty subtype", {"mime_type": mime_type})

    file_type = get_media_file_type(media_type)
    if file_type is None:
        raise UnsupportedMimeType(f"Unsupported MIME type: '{mime_type}'", {"mime_type": mime_type})

    registered = lookup_mime_type(essence)
    if registered:
        return registered

    return file_type, subtype
