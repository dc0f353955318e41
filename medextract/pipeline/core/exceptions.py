"""Classified exception hierarchy for medextract.

Every failure of an extraction call ends up as exactly one ``ClassifiedError``
subclass, so callers can dispatch on the type (or on ``kind``) instead of
parsing messages. The structured form is compatible with RFC 7807 Problem
Details for HTTP APIs.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    PRECONDITION = "precondition"
    TRANSIENT = "transient"
    PERMANENT = "permanent"
    MALFORMED_RESPONSE = "malformed_response"


class ClassifiedError(Exception):
    """Base exception for all extraction failures.

    Attributes:
        message: Human-readable error message
        kind: Failure kind used by callers to pick a reaction
        error_code: Application-specific error code
        http_status: Status returned by the backend, if there was one
        raw_payload: Backend text kept for diagnostics (malformed responses)
        details: Additional context (dict)
    """

    kind: ErrorKind = ErrorKind.PERMANENT
    api_status: int = 502

    def __init__(
        self,
        message: str,
        error_code: str,
        http_status: Optional[int] = None,
        raw_payload: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.http_status = http_status
        self.raw_payload = raw_payload
        self.details = details or {}

    @property
    def retryable(self) -> bool:
        """Whether the caller may retry the same request later."""
        return self.kind is ErrorKind.TRANSIENT

    def to_dict(self) -> dict[str, Any]:
        """Convert to RFC 7807 Problem Details format.

        Returns:
            Dict containing standardized error information
        """
        return {
            "type": f"/errors/{self.error_code}",
            "title": self.message,
            "status": self.api_status,
            "code": self.error_code,
            "detail": self.details.get("detail"),
            "kind": self.kind.value,
            "retryable": self.retryable,
            "upstream_status": self.http_status,
            "raw_payload": self.raw_payload,
        }


class PreconditionError(ClassifiedError):
    """Caller-side input problem detected before any network activity.

    Args:
        message: What is missing or wrong
        field: Name of the offending input
    """

    kind = ErrorKind.PRECONDITION
    api_status = 400

    def __init__(self, message: str, field: str, error_code: str = "PRECONDITION_FAILED"):
        super().__init__(
            message=message,
            error_code=error_code,
            details={"field": field},
        )
        self.field = field


class TransientServiceError(ClassifiedError):
    """Backend overloaded or rate limited (5xx / 429) after the retry budget ran out."""

    kind = ErrorKind.TRANSIENT
    api_status = 503

    def __init__(
        self,
        service_name: str,
        http_status: int,
        message: str = "Service temporarily unavailable, please retry later.",
        **kwargs,
    ):
        additional_details = kwargs.pop("details", {})
        additional_details["service"] = service_name
        super().__init__(
            message=message,
            error_code=f"{service_name.upper()}_UNAVAILABLE",
            http_status=http_status,
            details=additional_details,
            **kwargs,
        )
        self.service_name = service_name


class PermanentServiceError(ClassifiedError):
    """Backend rejected the request (non-429 4xx) or could not be reached at all.

    Network-level failures carry ``http_status=None``.
    """

    kind = ErrorKind.PERMANENT
    api_status = 502

    def __init__(
        self,
        service_name: str,
        message: str,
        http_status: Optional[int] = None,
        **kwargs,
    ):
        additional_details = kwargs.pop("details", {})
        additional_details["service"] = service_name
        error_type = "NETWORK_ERROR" if http_status is None else "REQUEST_REJECTED"
        super().__init__(
            message=message,
            error_code=f"{service_name.upper()}_{error_type}",
            http_status=http_status,
            details=additional_details,
            **kwargs,
        )
        self.service_name = service_name


class MalformedResponseError(ClassifiedError):
    """Backend answered 2xx but the body broke the envelope or output contract.

    ``raw_payload`` keeps the offending text verbatim so it can be shown to
    the user.
    """

    kind = ErrorKind.MALFORMED_RESPONSE
    api_status = 502

    def __init__(
        self,
        message: str,
        error_code: str = "MALFORMED_RESPONSE",
        raw_payload: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            raw_payload=raw_payload,
            **kwargs,
        )
