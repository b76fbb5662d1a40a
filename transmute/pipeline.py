"""
Conversion pipeline.

Orchestrates one conversion request from a sniffed MIME string to named
output bytes:

    RECEIVED -> CLASSIFIED -> FACTORY_BUILT -> CONVERTER_BUILT -> CONVERTED -> NAMED

Each stage either advances or raises the typed error it detected. There is no
retry and no partial result. The pipeline does no logging; callers decide how
to report failures.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from .classifier import classify
from .config import FileType
from .converters import build_factory
from .utils.catalog_lookup import get_file_type
from .utils.codec_runtime import CodecRuntime
from .utils.error_handling import ConversionCancelled, ConversionFailed
from .utils.filename_helpers import derive_output_name, resolve_output_subtype


class PipelineStage(str, Enum):
    """Stages a conversion request moves through, in order."""
    RECEIVED = "received"
    CLASSIFIED = "classified"
    FACTORY_BUILT = "factory_built"
    CONVERTER_BUILT = "converter_built"
    CONVERTED = "converted"
    NAMED = "named"


@dataclass(frozen=True)
class ConversionRequest:
    source_bytes: bytes
    source_type: FileType
    source_subtype: str
    target_subtype: str
    original_filename: str = ""


@dataclass(frozen=True)
class ConversionResult:
    output_bytes: bytes
    output_file_type: FileType


@dataclass(frozen=True)
class ConvertedFile:
    """What the HTTP layer persists and serves."""
    content: bytes
    file_type: FileType
    filename: str


class ConversionPipeline:
    """
    Runs conversion requests against the format catalog.

    A pipeline holds only the injected codec runtime, so one instance can serve
    concurrent requests.
    """

    def __init__(self, runtime: Optional[CodecRuntime] = None):
        self.runtime = runtime

    def run(
        self,
        mime_type: str,
        content: bytes,
        original_filename: str,
        target_subtype: str,
        cancel_event: Optional[threading.Event] = None,
        on_stage: Optional[Callable[[PipelineStage], None]] = None,
    ) -> ConvertedFile:
        """
        Classify, convert and name one upload.

        Args:
            mime_type: MIME string sniffed from ``content``
            content: Uploaded bytes
            original_filename: Filename supplied by the client
            target_subtype: Requested target subtype
            cancel_event: Checked at every stage boundary; when set the run
                aborts with ``ConversionCancelled``
            on_stage: Called with each stage as it is reached

        Returns:
            ConvertedFile with the output bytes, file type and filename

        Raises:
            UnsupportedMimeType, UnknownFileType, UnsupportedSubType,
            ConversionFailed, ConversionCancelled
        """
        def advance(stage: PipelineStage) -> None:
            if cancel_event is not None and cancel_event.is_set():
                raise ConversionCancelled(f"Conversion cancelled before stage '{stage.value}'")
            if on_stage:
                on_stage(stage)

        advance(PipelineStage.RECEIVED)
        file_type, subtype = classify(mime_type)

        advance(PipelineStage.CLASSIFIED)
        factory = build_factory(file_type, original_filename, self.runtime)

        advance(PipelineStage.FACTORY_BUILT)
        converter = factory.new_converter(subtype)

        advance(PipelineStage.CONVERTER_BUILT)
        request = ConversionRequest(
            source_bytes=content,
            source_type=file_type,
            source_subtype=subtype,
            target_subtype=target_subtype,
            original_filename=original_filename,
        )
        result = self._convert_with(converter, request)

        advance(PipelineStage.CONVERTED)
        filename = derive_output_name(original_filename, resolve_output_subtype(file_type, target_subtype))

        advance(PipelineStage.NAMED)
        return ConvertedFile(content=result.output_bytes, file_type=result.output_file_type, filename=filename)

    def convert(self, request: ConversionRequest) -> ConversionResult:
        """
        Convert an already classified request.

        Raises:
            UnknownFileType, UnsupportedSubType, ConversionFailed
        """
        factory = build_factory(request.source_type, request.original_filename, self.runtime)
        converter = factory.new_converter(request.source_subtype)
        return self._convert_with(converter, request)

    def detect(self, mime_type: str) -> Tuple[FileType, str, Dict[str, str]]:
        """
        Classify a MIME type and get its legal targets in one pass.

        Returns:
            Tuple of (file type, subtype, target subtype -> display label)
        """
        file_type, subtype = classify(mime_type)
        formats = build_factory(file_type, "", self.runtime).new_converter(subtype).supported_formats()
        return file_type, subtype, formats

    def supported_formats(self, mime_type: str) -> Dict[str, str]:
        """
        Get the legal targets for content of the given MIME type.

        Returns:
            Dictionary mapping target subtype to display label
        """
        return self.detect(mime_type)[2]

    @staticmethod
    def _convert_with(converter, request: ConversionRequest) -> ConversionResult:
        target_type = get_file_type(request.target_subtype)
        if target_type is None:
            raise ConversionFailed(
                f"Unknown target format: '{request.target_subtype}'",
                {"target": str(request.target_subtype)},
            )

        output = converter.convert_to(target_type, request.target_subtype, request.source_bytes)

        # application sources always produce an archive
        output_type = FileType.APPLICATION if request.source_type == FileType.APPLICATION else target_type
        return ConversionResult(output_bytes=output, output_file_type=output_type)
