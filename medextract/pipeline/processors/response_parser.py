"""
Decode the text generated by the backend into typed results.

The generated text must be a JSON object. Markdown code fences are tolerated
(some models add them despite the JSON response directive); anything else that
fails to parse is reported with the raw text attached.
"""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from medextract.pipeline.errors.codes import make_error
from medextract.pipeline.models.dto import MedicalRecord

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


def _strip_code_fence(text: str) -> str:
    match = _FENCE_RE.match(text)
    return match.group(1) if match else text


def parse_json_object(raw: str) -> dict[str, Any]:
    """
    Parse generated text as a JSON object.

    Raises:
        MalformedResponseError: INVALID_JSON when the text is not JSON or is
            nested too deeply to decode, SCHEMA_MISMATCH when it is JSON but
            not an object
    """
    try:
        obj = json.loads(_strip_code_fence(raw))
    except (ValueError, RecursionError) as e:
        logger.error(
            "Failed to parse JSON from backend response",
            extra={"error_code": "INVALID_JSON", "raw_length": len(raw)},
        )
        raise make_error("INVALID_JSON", raw_payload=raw) from e

    if not isinstance(obj, dict):
        raise make_error(
            "SCHEMA_MISMATCH",
            raw_payload=raw,
            details={"detail": f"expected a JSON object, got {type(obj).__name__}"},
        )
    return obj


def to_medical_record(obj: Any, raw: str) -> MedicalRecord:
    """Validate structured fields, filling absent keys with null / empty values."""
    if obj is None:
        obj = {}
    if not isinstance(obj, dict):
        raise make_error(
            "SCHEMA_MISMATCH",
            raw_payload=raw,
            details={"detail": f"structured data must be an object, got {type(obj).__name__}"},
        )
    try:
        return MedicalRecord.model_validate(obj)
    except ValidationError as e:
        first = e.errors()[0] if e.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise make_error(
            "SCHEMA_MISMATCH",
            raw_payload=raw,
            details={"detail": f"{location}: {first.get('msg', 'invalid value')}"},
        ) from e


def parse_structured_output(raw: str) -> MedicalRecord:
    """Two-stage variant: the generated object is the record itself."""
    return to_medical_record(parse_json_object(raw), raw)


def parse_multimodal_output(raw: str) -> tuple[str, MedicalRecord]:
    """
    Single-call variant: ``{"transcription": str, "structuredData": object}``.

    Returns:
        (transcription, record); a missing transcription becomes ""
    """
    obj = parse_json_object(raw)

    transcription = obj.get("transcription")
    if transcription is None:
        transcription = ""
    if not isinstance(transcription, str):
        raise make_error(
            "SCHEMA_MISMATCH",
            raw_payload=raw,
            details={"detail": "transcription must be a string"},
        )

    return transcription, to_medical_record(obj.get("structuredData"), raw)
