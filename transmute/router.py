"""
Conversion router.

HTTP boundary of the conversion core: accepts uploads, runs the conversion
pipeline on the codec runtime's worker pool, persists the result and serves
it back.
"""

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import FileResponse

from .config import ARCHIVE_MIME_TYPE, ARCHIVE_SUBTYPE, FILE_TYPE_LABELS, FORMAT_CATALOG, MAX_UPLOAD_MB
from .pipeline import ConversionPipeline
from .utils.catalog_lookup import get_mime_type_for
from .utils.error_handling import (
    ErrorCode,
    TransmuteError,
    create_error_response,
    error_response_from_exception,
)
from .utils.logging_config import get_logger
from .utils.mime_detector import get_mime_type

logger = get_logger(__name__)

UPLOAD_FILE_FORM_FIELD = "uploadFile"
TARGET_FORMAT_FORM_FIELD = "input_format"

UPLOAD_CHUNK_SIZE = 1024 * 1024

router = APIRouter(tags=["conversions"])


class _UploadTooLarge(Exception):
    def __init__(self, size: int):
        super().__init__(f"Upload of {size} bytes exceeds the {MAX_UPLOAD_MB} MB limit")


async def _read_upload(upload: UploadFile) -> bytes:
    """Read an upload in chunks, stopping as soon as it passes the size limit."""
    limit = MAX_UPLOAD_MB * 1024 * 1024
    if upload.size is not None and upload.size > limit:
        raise _UploadTooLarge(upload.size)

    chunks = []
    total = 0
    while True:
        chunk = await upload.read(UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > limit:
            raise _UploadTooLarge(total)
        chunks.append(chunk)
    return b"".join(chunks)


@router.get("/formats")
async def list_formats():
    """List every file type, its subtypes and their legal targets."""
    return {
        "file_types": [
            {
                "file_type": file_type.value,
                "label": FILE_TYPE_LABELS[file_type],
                "subtypes": [
                    {
                        "subtype": subtype,
                        "label": entry.label,
                        "targets": list(entry.targets),
                    }
                    for subtype, entry in entries.items()
                ],
            }
            for file_type, entries in FORMAT_CATALOG.items()
        ]
    }


@router.post("/format")
async def detect_format(
    request: Request,
    upload_file: UploadFile = File(..., alias=UPLOAD_FILE_FORM_FIELD),
):
    """Detect the format of an upload and list the formats it can be converted to."""
    try:
        content = await _read_upload(upload_file)
    except _UploadTooLarge as e:
        return create_error_response(ErrorCode.FILE_TOO_LARGE, details=str(e))

    if not content:
        return create_error_response(ErrorCode.INVALID_FILE, details="Uploaded file is empty")

    mime_type = get_mime_type(content, upload_file.filename)
    pipeline = ConversionPipeline(request.app.state.codec_runtime)

    try:
        file_type, subtype, formats = pipeline.detect(mime_type)
    except TransmuteError as e:
        logger.warning(f"Error getting formats for {upload_file.filename} ({mime_type}): {e}")
        return error_response_from_exception(e, service="format")

    return {
        "mime_type": mime_type,
        "file_type": file_type.value,
        "subtype": subtype,
        "formats": [{"subtype": target, "label": label} for target, label in formats.items()],
    }


@router.post("/upload")
async def upload_and_convert(
    request: Request,
    upload_file: UploadFile = File(..., alias=UPLOAD_FILE_FORM_FIELD),
    target_subtype: str = Form(..., alias=TARGET_FORMAT_FORM_FIELD),
):
    """Convert an upload to the requested format and store the result."""
    try:
        content = await _read_upload(upload_file)
    except _UploadTooLarge as e:
        return create_error_response(ErrorCode.FILE_TOO_LARGE, details=str(e))

    if not content:
        return create_error_response(ErrorCode.INVALID_FILE, details="Uploaded file is empty")

    filename = upload_file.filename or ""
    mime_type = get_mime_type(content, filename)
    runtime = request.app.state.codec_runtime
    pipeline = ConversionPipeline(runtime)

    try:
        converted = await runtime.run(pipeline.run, mime_type, content, filename, target_subtype.strip().lower())
        await runtime.run(request.app.state.output_store.save, converted.filename, converted.content)
    except TransmuteError as e:
        logger.error(f"Error converting {filename} ({mime_type}) to {target_subtype}: {e}")
        return error_response_from_exception(e, service="upload")

    logger.info(f"Converted {filename} ({mime_type}) to {converted.filename}")
    return {
        "filename": converted.filename,
        "file_type": converted.file_type.value,
        "media_type": _media_type(converted.filename),
        "url": f"/files/{converted.filename}",
    }


@router.get("/files/{filename}")
async def download_file(request: Request, filename: str):
    """Serve a converted file from the output directory."""
    path = request.app.state.output_store.open_path(filename)
    if path is None:
        return create_error_response(ErrorCode.NOT_FOUND, details=f"File not found: {filename}")
    return FileResponse(path, media_type=_media_type(filename), filename=filename)


def _media_type(filename: str) -> str:
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if extension == ARCHIVE_SUBTYPE:
        return ARCHIVE_MIME_TYPE
    return get_mime_type_for(extension) or "application/octet-stream"
