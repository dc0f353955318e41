"""Pydantic request/response schemas for API endpoints."""

from typing import Optional

from pydantic import BaseModel, Field

from medextract.pipeline.models.dto import ExtractionMode, MedicalRecord


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    See: https://www.rfc-editor.org/rfc/rfc7807
    """

    type: str = Field(..., description="URI reference identifying the problem type")
    title: str = Field(..., description="Short, human-readable summary of the problem")
    status: int = Field(..., description="HTTP status code for this problem")
    detail: Optional[str] = Field(
        None, description="Human-readable explanation specific to this occurrence"
    )
    instance: Optional[str] = Field(
        None, description="URI reference identifying this specific occurrence"
    )

    # Extension members (allowed by RFC 7807)
    code: str = Field(..., description="Application-specific error code")
    kind: str = Field(
        ...,
        description="precondition, transient, permanent or malformed_response",
    )
    retryable: bool = Field(
        default=False, description="Whether the same request may succeed later"
    )
    upstream_status: Optional[int] = Field(
        None, description="HTTP status returned by the AI backend, if any"
    )
    raw_payload: Optional[str] = Field(
        None, description="Unparseable backend output, kept verbatim for inspection"
    )
    trace_id: Optional[str] = Field(
        None, description="Tracing ID (matches X-Trace-ID header)"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "type": "/errors/INVALID_JSON",
                "title": "backend did not return valid JSON",
                "status": 502,
                "instance": "/v1/extract",
                "code": "INVALID_JSON",
                "kind": "malformed_response",
                "retryable": False,
                "raw_payload": "Sure! Here is the data you asked for...",
                "trace_id": "a1b2c3d4-e5f6-7890-abcd-ef1234567890",
            }
        }
    }


class ExtractResponse(BaseModel):
    """Successful extraction of one document."""

    transcribed_text: str = Field(..., description="Full text transcription")
    structured_fields: MedicalRecord = Field(
        ..., description="Structured clinical fields; every key always present"
    )
    mode: ExtractionMode
    processing_time_seconds: float
    trace_id: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    mode: str
