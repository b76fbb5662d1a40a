"""
Base converter class.

Every file type has exactly one converter class deriving from
``FormatConverter``. The base class owns the contract shared by all of them:
target validation against the catalog, wrapping of codec errors, and the
guarantee that a fresh buffer is returned. Subclasses only implement
``_convert`` against their codec library.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..config import FileType
from ..utils.catalog_lookup import get_file_type, get_supported_formats
from ..utils.codec_runtime import DEFAULT_CODEC_SETTINGS, CodecRuntime, CodecSettings
from ..utils.error_handling import ConversionFailed, TransmuteError
from ..utils.filename_helpers import file_stem


class FormatConverter(ABC):
    """
    Converter for one source subtype.

    Instances hold only construction-time context (subtype, original filename,
    codec settings) and never write to it, so a converter can be used from
    several threads at once.
    """

    file_type: FileType

    def __init__(self, subtype: str, filename: str = "", runtime: Optional[CodecRuntime] = None):
        self.subtype = subtype
        self.filename = filename
        self.runtime = runtime

    @property
    def settings(self) -> CodecSettings:
        return self.runtime.settings if self.runtime else DEFAULT_CODEC_SETTINGS

    @property
    def stem(self) -> str:
        return file_stem(self.filename)

    def supported_formats(self) -> Dict[str, str]:
        """Get the legal targets of this converter's subtype as subtype -> display label."""
        return get_supported_formats(self.subtype)

    def convert_to(self, target_type: FileType, target_subtype: str, content: bytes) -> bytes:
        """
        Convert ``content`` to ``target_subtype``.

        Args:
            target_type: File type of the target subtype
            target_subtype: Target subtype (must be a legal target)
            content: Source bytes, left untouched

        Returns:
            Newly produced output bytes

        Raises:
            ConversionFailed: If the target is not legal for this subtype, the
                input is empty, or the codec rejects the input
        """
        if target_subtype not in self.supported_formats():
            raise ConversionFailed(
                f"Cannot convert {self.subtype} to {target_subtype}",
                {"subtype": self.subtype, "target": target_subtype},
            )
        if get_file_type(target_subtype) != target_type:
            raise ConversionFailed(
                f"Target {target_subtype} is not of type {getattr(target_type, 'value', target_type)}",
                {"target": target_subtype},
            )
        if not content:
            raise ConversionFailed(f"Empty {self.subtype} input", {"subtype": self.subtype})

        try:
            output = self._convert(target_subtype, bytes(content))
        except TransmuteError:
            raise
        except Exception as e:
            raise ConversionFailed(
                f"{self.subtype} to {target_subtype} conversion failed: {e}",
                {"subtype": self.subtype, "target": target_subtype},
            ) from e

        if not output:
            raise ConversionFailed(
                f"{self.subtype} to {target_subtype} conversion produced no output",
                {"subtype": self.subtype, "target": target_subtype},
            )
        return bytes(output)

    @abstractmethod
    def _convert(self, target_subtype: str, content: bytes) -> bytes:
        """
        Perform the codec-specific conversion.

        This method must be implemented by subclasses. Any exception it raises
        is reported as ``ConversionFailed``.
        """
        pass

    def __repr__(self):
        return f"{self.__class__.__name__}(subtype={self.subtype!r})"
