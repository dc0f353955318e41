"""
Client for the Gemini ``generateContent`` endpoint.

Sends prompt parts through the resilient transport with a JSON-only response
directive and unwraps the generated text from the candidates envelope.
"""

import json
import logging
from typing import Any, Optional

import httpx

from medextract.core.settings import gemini_settings
from medextract.pipeline.clients.transport import ResilientTransport
from medextract.pipeline.errors.codes import make_error

logger = logging.getLogger(__name__)

SERVICE_NAME = "Gemini"


def text_part(text: str) -> dict[str, Any]:
    return {"text": text}


def inline_data_part(mime_type: str, data_b64: str) -> dict[str, Any]:
    return {"inline_data": {"mime_type": mime_type, "data": data_b64}}


def build_generate_payload(parts: list[dict[str, Any]]) -> dict[str, Any]:
    """Request body asking for strictly JSON output (no prose wrapper)."""
    return {
        "contents": [{"parts": parts}],
        "generationConfig": {"response_mime_type": "application/json"},
    }


def extract_candidate_text(response: httpx.Response) -> str:
    """
    Return ``candidates[0].content.parts[0].text`` from a generation response.

    Raises:
        MalformedResponseError: Body is not JSON or the nested text is missing
    """
    raw = response.text
    try:
        envelope = response.json()
    except (ValueError, RecursionError) as e:
        raise make_error("INVALID_JSON", raw_payload=raw) from e

    text = None
    candidates = envelope.get("candidates") if isinstance(envelope, dict) else None
    if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
        content = candidates[0].get("content")
        parts = content.get("parts") if isinstance(content, dict) else None
        if isinstance(parts, list) and parts and isinstance(parts[0], dict):
            text = parts[0].get("text")

    if not isinstance(text, str) or not text:
        finish_reason = None
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
            finish_reason = candidates[0].get("finishReason")
        logger.warning(
            "Gemini envelope without candidate text",
            extra={"service": SERVICE_NAME, "error_code": "INVALID_RESPONSE_STRUCTURE"},
        )
        raise make_error(
            "INVALID_RESPONSE_STRUCTURE",
            raw_payload=raw,
            details={"finish_reason": finish_reason} if finish_reason else None,
        )

    return text


class GeminiClient:
    """Thin wrapper binding the transport to the configured Gemini model."""

    def __init__(
        self,
        transport: ResilientTransport,
        endpoint_url: Optional[str] = None,
    ) -> None:
        self._transport = transport
        self.endpoint_url = endpoint_url or gemini_settings.generate_content_url

    def generate_json(self, parts: list[dict[str, Any]], api_key: str) -> str:
        """
        Run one generation call and return the raw generated text.

        The text is expected to be JSON but is not parsed here.

        Raises:
            ClassifiedError: Transport failure or malformed envelope
        """
        payload = build_generate_payload(parts)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Gemini request: %d part(s), %d bytes",
                len(parts),
                len(json.dumps(payload)),
                extra={"service": SERVICE_NAME},
            )
        response = self._transport.send(
            self.endpoint_url,
            payload,
            service_name=SERVICE_NAME,
            params={"key": api_key},
        )
        return extract_candidate_text(response)
