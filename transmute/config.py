"""
Conversion configuration for transmute.

This module defines the process-wide format catalog (file types, subtypes,
display labels and the legal conversion targets of every subtype) together
with the environment-driven settings consumed by the HTTP layer.

The catalog is read-only after import. Use the helpers in
``transmute.utils.catalog_lookup`` to query it.
"""

import os
import tempfile
from enum import Enum
from typing import Dict, NamedTuple, Tuple


# Service configuration
UPLOAD_PATH = os.getenv("TMP_DIR") or tempfile.gettempdir()
PORT = int(os.getenv("TRANSMUTE_PORT", "8080"))
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "100"))

# Codec configuration
CODEC_CONCURRENCY = int(os.getenv("CODEC_CONCURRENCY", "0")) or os.cpu_count() or 1
PDF_RENDER_DPI = int(os.getenv("PDF_RENDER_DPI", "150"))
AUDIO_BITRATE = os.getenv("AUDIO_BITRATE", "192k")
FFMPEG_BINARY = os.getenv("FFMPEG_BINARY") or None
MAX_IMAGE_PIXELS = int(os.getenv("MAX_IMAGE_PIXELS", "0")) or None


class FileType(str, Enum):
    """Top-level format categories."""
    IMAGE = "image"
    APPLICATION = "application"
    DOCUMENT = "document"
    SPREADSHEET = "spreadsheet"
    AUDIO = "audio"

    @property
    def label(self) -> str:
        return FILE_TYPE_LABELS[self]


FILE_TYPE_LABELS: Dict[FileType, str] = {
    FileType.IMAGE: "Image",
    FileType.APPLICATION: "Application",
    FileType.DOCUMENT: "Document",
    FileType.SPREADSHEET: "Spreadsheet",
    FileType.AUDIO: "Audio",
}


class FormatEntry(NamedTuple):
    """A catalog entry: display label, legal targets and the MIME strings that identify it."""
    label: str
    targets: Tuple[str, ...]
    mime_types: Tuple[str, ...]


# Subtype produced whenever the source file type is APPLICATION
ARCHIVE_SUBTYPE = "zip"
ARCHIVE_MIME_TYPE = "application/zip"

# Format catalog: file type -> subtype -> entry
FORMAT_CATALOG: Dict[FileType, Dict[str, FormatEntry]] = {
    FileType.IMAGE: {
        "png": FormatEntry(
            "PNG",
            ("jpeg", "gif", "webp", "tiff", "bmp", "pdf"),
            ("image/png",),
        ),
        "jpeg": FormatEntry(
            "JPEG",
            ("png", "gif", "webp", "tiff", "bmp", "pdf"),
            ("image/jpeg", "image/jpg", "image/pjpeg"),
        ),
        "gif": FormatEntry(
            "GIF",
            ("png", "jpeg", "webp", "tiff", "bmp", "pdf"),
            ("image/gif",),
        ),
        "webp": FormatEntry(
            "WEBP",
            ("png", "jpeg", "gif", "tiff", "bmp", "pdf"),
            ("image/webp",),
        ),
        "tiff": FormatEntry(
            "TIFF",
            ("png", "jpeg", "gif", "webp", "bmp", "pdf"),
            ("image/tiff",),
        ),
        "bmp": FormatEntry(
            "BMP",
            ("png", "jpeg", "gif", "webp", "tiff", "pdf"),
            ("image/bmp", "image/x-bmp", "image/x-ms-bmp"),
        ),
    },

    FileType.APPLICATION: {
        "pdf": FormatEntry(
            "PDF",
            ("png", "jpeg", "txt", "html"),
            ("application/pdf", "application/x-pdf"),
        ),
    },

    FileType.DOCUMENT: {
        "docx": FormatEntry(
            "DOCX",
            ("pdf", "html", "txt"),
            ("application/vnd.openxmlformats-officedocument.wordprocessingml.document",),
        ),
        "html": FormatEntry(
            "HTML",
            ("pdf", "docx", "txt"),
            ("text/html", "application/xhtml+xml"),
        ),
        "txt": FormatEntry(
            "Plain Text",
            ("pdf", "html", "docx"),
            ("text/plain",),
        ),
    },

    FileType.SPREADSHEET: {
        "xlsx": FormatEntry(
            "XLSX",
            ("csv", "json", "html"),
            ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",),
        ),
        "xls": FormatEntry(
            "XLS",
            ("xlsx", "csv", "json", "html"),
            ("application/vnd.ms-excel", "application/x-excel"),
        ),
        "csv": FormatEntry(
            "CSV",
            ("xlsx", "json", "html"),
            ("text/csv", "application/csv", "text/x-csv"),
        ),
        "json": FormatEntry(
            "JSON",
            ("csv", "xlsx", "html"),
            ("application/json", "text/json"),
        ),
    },

    FileType.AUDIO: {
        "mp3": FormatEntry(
            "MP3",
            ("wav", "ogg", "flac"),
            ("audio/mpeg", "audio/mp3"),
        ),
        "wav": FormatEntry(
            "WAV",
            ("mp3", "ogg", "flac"),
            ("audio/wav", "audio/x-wav", "audio/wave", "audio/vnd.wave"),
        ),
        "ogg": FormatEntry(
            "OGG",
            ("mp3", "wav", "flac"),
            ("audio/ogg", "audio/vorbis", "application/ogg"),
        ),
        "flac": FormatEntry(
            "FLAC",
            ("mp3", "wav", "ogg"),
            ("audio/flac", "audio/x-flac"),
        ),
    },
}

# MIME top-level type -> file type used for subtypes not registered above
MEDIA_TYPES: Dict[str, FileType] = {
    "image": FileType.IMAGE,
    "application": FileType.APPLICATION,
    "text": FileType.DOCUMENT,
    "audio": FileType.AUDIO,
}

# File extension aliases for subtypes whose usual extension differs
EXTENSION_ALIASES: Dict[str, str] = {
    "jpg": "jpeg",
    "jpe": "jpeg",
    "tif": "tiff",
    "htm": "html",
    "xhtml": "html",
    "text": "txt",
    "oga": "ogg",
}


class CatalogError(ValueError):
    """Raised when the format catalog violates one of its invariants."""
    pass


def validate_catalog(catalog: Dict[FileType, Dict[str, FormatEntry]] = FORMAT_CATALOG) -> None:
    """
    Check the catalog invariants.

    Raises:
        CatalogError: If a subtype is registered twice, a target set is empty
            or names an unknown subtype, or a MIME string is claimed twice.
    """
    owners: Dict[str, FileType] = {}
    for file_type, entries in catalog.items():
        for subtype in entries:
            if subtype in owners:
                raise CatalogError(
                    f"Subtype '{subtype}' registered under both "
                    f"'{owners[subtype].value}' and '{file_type.value}'"
                )
            owners[subtype] = file_type

    mime_owners: Dict[str, str] = {}
    for entries in catalog.values():
        for subtype, entry in entries.items():
            if not entry.targets:
                raise CatalogError(f"Subtype '{subtype}' has no conversion targets")
            for target in entry.targets:
                if target not in owners:
                    raise CatalogError(f"Subtype '{subtype}' targets unknown subtype '{target}'")
                if target == subtype:
                    raise CatalogError(f"Subtype '{subtype}' lists itself as a target")
            for mime_type in entry.mime_types:
                if mime_type in mime_owners:
                    raise CatalogError(
                        f"MIME type '{mime_type}' claimed by '{mime_owners[mime_type]}' and '{subtype}'"
                    )
                mime_owners[mime_type] = subtype


validate_catalog()
