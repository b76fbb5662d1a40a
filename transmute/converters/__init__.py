"""
Converter factory.

This module maps every catalog file type to its converter class and builds
converter instances for a given subtype.
"""

from typing import Dict, Optional, Type, Union

from ..config import FileType
from ..utils.catalog_lookup import get_file_types, get_subtypes
from ..utils.codec_runtime import CodecRuntime
from ..utils.error_handling import UnknownFileType, UnsupportedSubType
from .base_converter import FormatConverter
from .formats.audio import AudioConverter
from .formats.document import DocumentConverter
from .formats.image import ImageConverter
from .formats.pdf import PdfConverter
from .formats.spreadsheet import SpreadsheetConverter

# File type -> converter class
CONVERTER_CLASSES: Dict[FileType, Type[FormatConverter]] = {
    FileType.IMAGE: ImageConverter,
    FileType.APPLICATION: PdfConverter,
    FileType.DOCUMENT: DocumentConverter,
    FileType.SPREADSHEET: SpreadsheetConverter,
    FileType.AUDIO: AudioConverter,
}


class ConverterFactory:
    """
    Factory for the converters of one file type.

    Holds only the file type, the original filename and the codec runtime,
    so it can be built and discarded per request.
    """

    def __init__(self, file_type: FileType, filename: str = "", runtime: Optional[CodecRuntime] = None):
        self.file_type = file_type
        self.filename = filename
        self.runtime = runtime

    def new_converter(self, subtype: str) -> FormatConverter:
        """
        Create the converter for a subtype of this factory's file type.

        Raises:
            UnsupportedSubType: If the subtype is not registered under the file type
        """
        if subtype not in get_subtypes(self.file_type):
            raise UnsupportedSubType(
                f"Unsupported {self.file_type.value} subtype: '{subtype}'",
                {"file_type": self.file_type.value, "subtype": str(subtype)},
            )
        converter_class = CONVERTER_CLASSES[self.file_type]
        return converter_class(subtype, filename=self.filename, runtime=self.runtime)

    def __repr__(self):
        return f"ConverterFactory(file_type={self.file_type.value!r}, filename={self.filename!r})"


def build_factory(
    file_type: Union[FileType, str],
    filename: str = "",
    runtime: Optional[CodecRuntime] = None,
) -> ConverterFactory:
    """
    Build the converter factory for a file type.

    Args:
        file_type: Catalog file type or its string value
        filename: Original filename, used to name archive members
        runtime: Codec runtime injected into the converters

    Raises:
        UnknownFileType: If the file type is not in the catalog
    """
    try:
        resolved = FileType(file_type)
    except ValueError:
        raise UnknownFileType(f"Unknown file type: '{file_type}'", {"file_type": str(file_type)}) from None

    if resolved not in get_file_types() or resolved not in CONVERTER_CLASSES:
        raise UnknownFileType(f"Unknown file type: '{file_type}'", {"file_type": resolved.value})

    return ConverterFactory(resolved, filename or "", runtime)


__all__ = ['CONVERTER_CLASSES', 'ConverterFactory', 'FormatConverter', 'build_factory']
