"""
Centralized error handling for transmute.

This module defines the exception taxonomy raised by the conversion core,
the error codes they carry, and the helpers the HTTP layer uses to turn
them into consistent JSON error responses.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional, Union
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standardized error codes for consistent error handling."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    NOT_FOUND = "NOT_FOUND"

    # Upload errors
    INVALID_FILE = "INVALID_FILE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"

    # Classification and dispatch errors
    UNSUPPORTED_MIME_TYPE = "UNSUPPORTED_MIME_TYPE"
    UNKNOWN_FILE_TYPE = "UNKNOWN_FILE_TYPE"
    UNSUPPORTED_SUBTYPE = "UNSUPPORTED_SUBTYPE"

    # Conversion errors
    CONVERSION_FAILED = "CONVERSION_FAILED"
    CANCELLED = "CANCELLED"

    # Persistence errors
    CANT_WRITE_FILE = "CANT_WRITE_FILE"


class ErrorSeverity(str, Enum):
    """Error severity levels for logging and response handling."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Error code to HTTP status code mapping
ERROR_STATUS_MAP: Dict[ErrorCode, int] = {
    # 4xx Client Errors
    ErrorCode.INVALID_FILE: 400,
    ErrorCode.UNSUPPORTED_MIME_TYPE: 400,
    ErrorCode.UNKNOWN_FILE_TYPE: 400,
    ErrorCode.UNSUPPORTED_SUBTYPE: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CANCELLED: 408,
    ErrorCode.FILE_TOO_LARGE: 413,

    # 5xx Server Errors
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.CONVERSION_FAILED: 500,
    ErrorCode.CANT_WRITE_FILE: 500,
}

# Error code to severity mapping
ERROR_SEVERITY_MAP: Dict[ErrorCode, ErrorSeverity] = {
    ErrorCode.INTERNAL_ERROR: ErrorSeverity.CRITICAL,
    ErrorCode.CANT_WRITE_FILE: ErrorSeverity.HIGH,
    ErrorCode.CONVERSION_FAILED: ErrorSeverity.HIGH,
    ErrorCode.CANCELLED: ErrorSeverity.MEDIUM,
    ErrorCode.INVALID_FILE: ErrorSeverity.LOW,
    ErrorCode.FILE_TOO_LARGE: ErrorSeverity.LOW,
    ErrorCode.UNSUPPORTED_MIME_TYPE: ErrorSeverity.LOW,
    ErrorCode.UNKNOWN_FILE_TYPE: ErrorSeverity.LOW,
    ErrorCode.UNSUPPORTED_SUBTYPE: ErrorSeverity.LOW,
    ErrorCode.NOT_FOUND: ErrorSeverity.LOW,
}


class TransmuteError(Exception):
    """Base class for every error raised by the conversion core."""

    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_MAP.get(self.error_code, 500)


class UnsupportedMimeType(TransmuteError):
    """The MIME string is malformed or its type segment is not in the catalog."""
    error_code = ErrorCode.UNSUPPORTED_MIME_TYPE


class UnknownFileType(TransmuteError):
    """No converter factory exists for the file type."""
    error_code = ErrorCode.UNKNOWN_FILE_TYPE


class UnsupportedSubType(TransmuteError):
    """The subtype is not registered under the factory's file type."""
    error_code = ErrorCode.UNSUPPORTED_SUBTYPE


class ConversionFailed(TransmuteError):
    """The codec rejected the input, or the target is not a legal target."""
    error_code = ErrorCode.CONVERSION_FAILED


class ConversionCancelled(TransmuteError):
    """A cancellation signal was observed at a pipeline stage boundary."""
    error_code = ErrorCode.CANCELLED


class OutputPersistenceFailed(TransmuteError):
    """The converted output could not be written to the output directory."""
    error_code = ErrorCode.CANT_WRITE_FILE


def create_error_response(
    error_code: Union[ErrorCode, str],
    service: Optional[str] = None,
    details: Optional[str] = None,
    status_code: Optional[int] = None,
    **kwargs
) -> JSONResponse:
    """
    Create a consistent JSON error response across all endpoints.

    Args:
        error_code: Error code from ErrorCode enum or custom string
        service: Component that generated the error
        details: Additional error details (will be truncated to 1000 chars)
        status_code: Override the default HTTP status code
        **kwargs: Additional fields to include in the error response

    Returns:
        JSONResponse with standardized error format
    """
    if isinstance(error_code, ErrorCode):
        error_type = error_code.value
        if status_code is None:
            status_code = ERROR_STATUS_MAP.get(error_code, 500)
        severity = ERROR_SEVERITY_MAP.get(error_code, ErrorSeverity.MEDIUM)
    else:
        error_type = str(error_code)
        if status_code is None:
            status_code = 500
        severity = ErrorSeverity.MEDIUM

    error_data = {
        "error": error_type,
        "timestamp": datetime.now().isoformat() + "Z",
        "status_code": status_code,
        "severity": severity.value
    }

    if service:
        error_data["service"] = service

    if details:
        error_data["details"] = str(details)[:1000]

    error_data.update(kwargs)

    log_message = f"Error response: {error_data}"
    if severity == ErrorSeverity.CRITICAL:
        logger.critical(log_message)
    elif severity == ErrorSeverity.HIGH:
        logger.error(log_message)
    elif severity == ErrorSeverity.MEDIUM:
        logger.warning(log_message)
    else:
        logger.info(log_message)

    return JSONResponse(status_code=status_code, content=error_data)


def error_response_from_exception(error: TransmuteError, service: Optional[str] = None) -> JSONResponse:
    """
    Build the JSON error response for a core exception.

    Args:
        error: The exception raised by the conversion core
        service: Component that generated the error

    Returns:
        JSONResponse carrying the exception's error code and message
    """
    extra = {key: value for key, value in error.details.items() if isinstance(value, (str, int, float, bool))}
    return create_error_response(error.error_code, service=service, details=str(error), **extra)
