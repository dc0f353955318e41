"""
Centralized error code registry with specifications.

Single source of truth for the codes and default messages of the errors the
orchestrator raises itself. Transport-level codes are derived from the service
name in ``pipeline.core.exceptions``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from medextract.pipeline.core.exceptions import (
    ClassifiedError,
    ErrorKind,
    MalformedResponseError,
    PreconditionError,
)


@dataclass(frozen=True)
class ErrorSpec:
    """Specification for a single error type."""

    code: str
    kind: ErrorKind
    message: str
    field: Optional[str] = None  # Offending input for precondition errors


class ErrorCode(Enum):
    """Centralized error code registry.

    Usage:
        raise make_error("MISSING_DOCUMENT")
    """

    # ========================================
    # PRECONDITIONS (before any network call)
    # ========================================
    MISSING_DOCUMENT = ErrorSpec(
        "MISSING_DOCUMENT",
        ErrorKind.PRECONDITION,
        "Please upload a file first.",
        "document",
    )
    MISSING_API_KEY = ErrorSpec(
        "MISSING_API_KEY",
        ErrorKind.PRECONDITION,
        "Please enter your Google AI API key.",
        "api_key",
    )
    UNSUPPORTED_MIME_TYPE = ErrorSpec(
        "UNSUPPORTED_MIME_TYPE",
        ErrorKind.PRECONDITION,
        "Unsupported document type, expected a PNG or JPEG image.",
        "mime_type",
    )
    FILE_TOO_LARGE = ErrorSpec(
        "FILE_TOO_LARGE",
        ErrorKind.PRECONDITION,
        "File is too large.",
        "document",
    )

    # ========================================
    # MALFORMED BACKEND OUTPUT
    # ========================================
    INVALID_RESPONSE_STRUCTURE = ErrorSpec(
        "INVALID_RESPONSE_STRUCTURE",
        ErrorKind.MALFORMED_RESPONSE,
        "Invalid response structure",
    )
    INVALID_JSON = ErrorSpec(
        "INVALID_JSON",
        ErrorKind.MALFORMED_RESPONSE,
        "backend did not return valid JSON",
    )
    SCHEMA_MISMATCH = ErrorSpec(
        "SCHEMA_MISMATCH",
        ErrorKind.MALFORMED_RESPONSE,
        "backend JSON does not match the expected schema",
    )
    NO_TEXT_FOUND = ErrorSpec(
        "NO_TEXT_FOUND",
        ErrorKind.MALFORMED_RESPONSE,
        "No text found in the document",
    )

    @classmethod
    def get_spec(cls, code: str) -> ErrorSpec:
        """Get error specification by code string.

        Raises:
            KeyError: For codes missing from the registry
        """
        for error in cls:
            if error.value.code == code:
                return error.value
        raise KeyError(code)


def make_error(
    code: str,
    message: Optional[str] = None,
    raw_payload: Optional[str] = None,
    details: Optional[dict] = None,
) -> ClassifiedError:
    """Build the exception registered under ``code``.

    Args:
        code: Registry code, e.g. "INVALID_JSON"
        message: Overrides the registered default message
        raw_payload: Backend text to keep (malformed responses only)
        details: Extra context merged into the error details
    """
    spec = ErrorCode.get_spec(code)
    text = message or spec.message

    error: ClassifiedError
    if spec.kind is ErrorKind.PRECONDITION:
        error = PreconditionError(text, field=spec.field or "", error_code=spec.code)
    else:
        error = MalformedResponseError(
            text, error_code=spec.code, raw_payload=raw_payload
        )
    if details:
        error.details.update(details)
    return error
