"""
Catalog lookup utilities.

This module contains the query functions over the format catalog: which
subtypes a file type owns, which targets a subtype may convert to, and how
subtypes relate to MIME strings and file extensions. Every function returns
fresh containers so callers can never mutate the catalog.
"""

from typing import Dict, List, Optional, Tuple

from ..config import (
    EXTENSION_ALIASES,
    FORMAT_CATALOG,
    MEDIA_TYPES,
    FileType,
    FormatEntry,
)


def _build_mime_index() -> Dict[str, Tuple[FileType, str]]:
    index = {}
    for file_type, entries in FORMAT_CATALOG.items():
        for subtype, entry in entries.items():
            for mime_type in entry.mime_types:
                index[mime_type] = (file_type, subtype)
    return index


def _build_subtype_index() -> Dict[str, Tuple[FileType, FormatEntry]]:
    index = {}
    for file_type, entries in FORMAT_CATALOG.items():
        for subtype, entry in entries.items():
            index[subtype] = (file_type, entry)
    return index


MIME_INDEX = _build_mime_index()
SUBTYPE_INDEX = _build_subtype_index()


def get_file_types() -> List[FileType]:
    """Get every file type known to the catalog."""
    return list(FORMAT_CATALOG.keys())


def get_subtypes(file_type: FileType) -> Dict[str, str]:
    """
    Get the subtypes registered under a file type.

    Args:
        file_type: Catalog file type

    Returns:
        Dictionary mapping subtype to display label (empty for unknown types)
    """
    entries = FORMAT_CATALOG.get(file_type, {})
    return {subtype: entry.label for subtype, entry in entries.items()}


def get_file_type(subtype: str) -> Optional[FileType]:
    """Get the file type owning a subtype, or None if the subtype is unknown."""
    found = SUBTYPE_INDEX.get(subtype)
    return found[0] if found else None


def get_display_label(subtype: str) -> Optional[str]:
    """Get the display label of a subtype, or None if the subtype is unknown."""
    found = SUBTYPE_INDEX.get(subtype)
    return found[1].label if found else None


def get_supported_formats(subtype: str) -> Dict[str, str]:
    """
    Get the legal conversion targets of a subtype.

    Args:
        subtype: Source subtype (e.g. 'png', 'docx')

    Returns:
        Dictionary mapping target subtype to display label, in catalog order
    """
    found = SUBTYPE_INDEX.get(subtype)
    if not found:
        return {}
    return {target: SUBTYPE_INDEX[target][1].label for target in found[1].targets}


def is_legal_target(source_subtype: str, target_subtype: str) -> bool:
    """Check whether a subtype may be converted to another."""
    found = SUBTYPE_INDEX.get(source_subtype)
    return bool(found) and target_subtype in found[1].targets


def get_supported_file_types() -> Dict[str, FileType]:
    """Get a mapping of every known subtype to its file type."""
    return {subtype: found[0] for subtype, found in SUBTYPE_INDEX.items()}


def get_supported_conversions() -> Dict[str, List[str]]:
    """
    Get all supported source subtypes and their possible targets.

    Returns:
        Dictionary mapping source subtypes to lists of target subtypes
    """
    return {subtype: list(found[1].targets) for subtype, found in SUBTYPE_INDEX.items()}


def lookup_mime_type(mime_type: str) -> Optional[Tuple[FileType, str]]:
    """Get the (file type, subtype) registered for an exact MIME string."""
    return MIME_INDEX.get(mime_type)


def get_media_file_type(media_type: str) -> Optional[FileType]:
    """Get the default file type for a MIME top-level type (e.g. 'text')."""
    return MEDIA_TYPES.get(media_type)


def get_mime_type_for(subtype: str) -> Optional[str]:
    """Get the canonical MIME string of a subtype."""
    found = SUBTYPE_INDEX.get(subtype)
    return found[1].mime_types[0] if found else None


def get_subtype_for_extension(extension: str) -> Optional[str]:
    """
    Resolve a file extension to a catalog subtype.

    Args:
        extension: Extension with or without the leading dot ('.jpg', 'docx')

    Returns:
        The subtype or None if the extension is not known
    """
    if not extension:
        return None
    clean = extension.lstrip(".").lower()
    clean = EXTENSION_ALIASES.get(clean, clean)
    return clean if clean in SUBTYPE_INDEX else None
