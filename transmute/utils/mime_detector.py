"""
MIME type detection for uploads.

Content-based detection with python-magic comes first. When magic can only
name a generic container (a ZIP for Office Open XML files, plain text for
CSV or JSON) the filename extension is used to pick the concrete catalog
format the container holds.
"""

import logging
import mimetypes
import re
from typing import Optional

# Try to import python-magic for content-based detection
try:
    import magic
    MAGIC_AVAILABLE = True
except ImportError:
    magic = None
    MAGIC_AVAILABLE = False

from .catalog_lookup import get_mime_type_for, get_subtype_for_extension

logger = logging.getLogger(__name__)

FALLBACK_MIME_TYPE = "application/octet-stream"

# Generic MIME types magic reports -> subtypes such content may really be
CONTAINER_OVERRIDES = {
    "application/zip": {"docx", "xlsx"},
    "application/octet-stream": {"docx", "xlsx", "xls", "mp3"},
    "application/x-ole-storage": {"xls"},
    "application/cdfv2": {"xls"},
    "text/plain": {"csv", "json", "html"},
    "application/xml": {"html"},
    "text/xml": {"html"},
}


class MimeTypeDetector:
    """
    MIME type detector with content-based detection and extension fallbacks.

    Detection priority order:
    1. Content-based detection (python-magic), refined by extension for generic containers
    2. Extension-based detection against the format catalog
    3. Extension-based detection with the mimetypes module
    4. application/octet-stream
    """

    def __init__(self):
        mimetypes.init()

    def detect_from_content(self, content: bytes, filename: Optional[str] = None) -> Optional[str]:
        """
        Detect MIME type from file content using python-magic.

        Args:
            content: Raw file content bytes
            filename: Optional filename used to refine generic container types

        Returns:
            Detected MIME type string or None
        """
        if not MAGIC_AVAILABLE or not content:
            return None

        try:
            detected_mime = magic.from_buffer(content, mime=True)
        except Exception as e:
            logger.debug(f"Content-based detection failed: {e}")
            return None

        if not detected_mime:
            return None

        override = self._override_container(detected_mime, filename)
        if override:
            logger.debug(f"Overriding magic detection {detected_mime} -> {override} for {filename}")
            return override

        logger.debug(f"Content-based detection: {detected_mime}")
        return detected_mime

    def detect_from_extension(self, filename: str) -> Optional[str]:
        """
        Detect MIME type from a filename's extension.

        Args:
            filename: Filename or path

        Returns:
            Detected MIME type string or None
        """
        extension = self._extension(filename)
        if not extension:
            return None

        subtype = get_subtype_for_extension(extension)
        if subtype:
            return get_mime_type_for(subtype)

        mime_type, _ = mimetypes.guess_type(f"file.{extension}")
        return mime_type

    def get_mime_type(self, content: Optional[bytes] = None, filename: Optional[str] = None) -> str:
        """
        Get MIME type using the detection methods in priority order.

        Args:
            content: Optional raw file content
            filename: Optional filename

        Returns:
            MIME type string with fallback to application/octet-stream
        """
        detected_mime = None

        if content:
            detected_mime = self.detect_from_content(content, filename)

        if not detected_mime and filename:
            detected_mime = self.detect_from_extension(filename)

        detected_mime = detected_mime or FALLBACK_MIME_TYPE
        logger.debug(f"Final MIME type detection: {detected_mime}")
        return detected_mime

    def _override_container(self, detected_mime: str, filename: Optional[str]) -> Optional[str]:
        candidates = CONTAINER_OVERRIDES.get(detected_mime.lower())
        if not candidates:
            return None
        subtype = get_subtype_for_extension(self._extension(filename))
        if subtype in candidates:
            return get_mime_type_for(subtype)
        return None

    @staticmethod
    def _extension(filename: Optional[str]) -> str:
        if not filename:
            return ""
        base = re.split(r"[\\/]", filename)[-1]
        return base.rsplit(".", 1)[1].lower() if "." in base else ""


# Global detector instance
_detector_instance = None


def get_mime_detector() -> MimeTypeDetector:
    """Get the global MIME type detector instance."""
    global _detector_instance
    if _detector_instance is None:
        _detector_instance = MimeTypeDetector()
    return _detector_instance


def get_mime_type(content: Optional[bytes] = None, filename: Optional[str] = None) -> str:
    """Convenience function to get MIME type using the global detector."""
    return get_mime_detector().get_mime_type(content, filename)
