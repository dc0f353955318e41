"""
Client for the Cloud Vision ``images:annotate`` endpoint (OCR stage).
"""

import logging
from typing import Any, Optional

import httpx

from medextract.core.settings import vision_settings
from medextract.pipeline.clients.transport import ResilientTransport
from medextract.pipeline.core.exceptions import PermanentServiceError
from medextract.pipeline.errors.codes import make_error

logger = logging.getLogger(__name__)

SERVICE_NAME = "Vision"


def build_annotate_payload(image_b64: str) -> dict[str, Any]:
    return {
        "requests": [
            {
                "image": {"content": image_b64},
                "features": [{"type": "DOCUMENT_TEXT_DETECTION"}],
            }
        ]
    }


def parse_annotate_response(response: httpx.Response) -> str:
    """
    Return the full-document text (``textAnnotations[0].description``).

    Raises:
        PermanentServiceError: Vision reported a per-image error inside a 200
        MalformedResponseError: Envelope broken or no text detected
    """
    raw = response.text
    try:
        envelope = response.json()
    except (ValueError, RecursionError) as e:
        raise make_error("INVALID_JSON", raw_payload=raw) from e

    responses = envelope.get("responses") if isinstance(envelope, dict) else None
    if not isinstance(responses, list) or not responses or not isinstance(responses[0], dict):
        raise make_error("INVALID_RESPONSE_STRUCTURE", raw_payload=raw)

    first = responses[0]
    error = first.get("error")
    if isinstance(error, dict) and error.get("message"):
        raise PermanentServiceError(
            SERVICE_NAME,
            f"{SERVICE_NAME} API error: {error['message']}",
            http_status=response.status_code,
            details={"vision_code": error.get("code")},
        )

    annotations = first.get("textAnnotations")
    if not isinstance(annotations, list) or not annotations:
        raise make_error("NO_TEXT_FOUND", raw_payload=raw)

    description = annotations[0].get("description") if isinstance(annotations[0], dict) else None
    if not isinstance(description, str) or not description.strip():
        raise make_error("NO_TEXT_FOUND", raw_payload=raw)

    return description


class VisionClient:
    """OCR via DOCUMENT_TEXT_DETECTION."""

    def __init__(
        self,
        transport: ResilientTransport,
        endpoint_url: Optional[str] = None,
    ) -> None:
        self._transport = transport
        self.endpoint_url = endpoint_url or vision_settings.VISION_ENDPOINT_URL

    def detect_document_text(self, image_b64: str, api_key: str) -> str:
        response = self._transport.send(
            self.endpoint_url,
            build_annotate_payload(image_b64),
            service_name=SERVICE_NAME,
            params={"key": api_key},
        )
        text = parse_annotate_response(response)
        logger.info(
            "Vision OCR returned %d characters",
            len(text),
            extra={"service": SERVICE_NAME},
        )
        return text
