from __future__ import annotations

import logging
from typing import Optional

from medextract.core.settings import app_settings
from medextract.pipeline.clients.gemini_client import GeminiClient
from medextract.pipeline.clients.transport import ResilientTransport
from medextract.pipeline.clients.vision_client import VisionClient
from medextract.pipeline.core.config import ALLOWED_MIME_TYPES
from medextract.pipeline.core.exceptions import ClassifiedError
from medextract.pipeline.errors.codes import make_error
from medextract.pipeline.models.dto import ExtractedResult, ExtractionMode
from medextract.pipeline.processors.medical_extractor import (
    build_multimodal_request,
    build_two_stage_request,
    multimodal_parts,
    structuring_parts,
)
from medextract.pipeline.processors.response_parser import (
    parse_multimodal_output,
    parse_structured_output,
)
from medextract.pipeline.utils.file_detection import encode_base64
from medextract.pipeline.utils.timing import StageTimers

logger = logging.getLogger(__name__)


def default_mode() -> ExtractionMode:
    return ExtractionMode(app_settings.EXTRACTION_MODE)


def check_preconditions(document_bytes: bytes, mime_type: str, api_key: str) -> None:
    """Reject missing input before any network activity.

    Raises:
        PreconditionError: Empty document, unsupported MIME type or blank key
    """
    if not document_bytes:
        raise make_error("MISSING_DOCUMENT")
    if not api_key or not api_key.strip():
        raise make_error("MISSING_API_KEY")
    if mime_type not in ALLOWED_MIME_TYPES:
        raise make_error(
            "UNSUPPORTED_MIME_TYPE",
            details={"mime_type": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
        )


class ExtractionOrchestrator:
    """Turn one document image into an ``ExtractedResult``.

    Holds no per-request state: every ``extract`` call builds its own request
    and shares only the (stateless) transport.

    Args:
        transport: Resilient caller used for every backend request
        mode: Single multimodal call or Vision OCR followed by structuring
        gemini: Override of the Gemini client (defaults to settings)
        vision: Override of the Vision client (defaults to settings)
    """

    def __init__(
        self,
        transport: ResilientTransport,
        mode: Optional[ExtractionMode] = None,
        gemini: Optional[GeminiClient] = None,
        vision: Optional[VisionClient] = None,
    ) -> None:
        self.mode = mode or default_mode()
        self.gemini = gemini or GeminiClient(transport)
        self.vision = vision or VisionClient(transport)

    def extract(self, document_bytes: bytes, mime_type: str, api_key: str) -> ExtractedResult:
        """Run the configured extraction flow.

        Raises:
            ClassifiedError: Precondition, transient, permanent or malformed
                response failure; no partial result is ever returned
        """
        check_preconditions(document_bytes, mime_type, api_key)

        timers = StageTimers()
        try:
            if self.mode is ExtractionMode.TWO_STAGE:
                result = self._extract_two_stage(document_bytes, mime_type, api_key, timers)
            else:
                result = self._extract_multimodal(document_bytes, mime_type, api_key, timers)
        except ClassifiedError as e:
            logger.warning(
                f"Extraction failed: {e.message}",
                extra={
                    "error_kind": e.kind.value,
                    "error_code": e.error_code,
                    "http_status": e.http_status,
                    "stage_durations_ms": timers.totals_ms,
                },
            )
            raise

        logger.info(
            "Extraction complete: mode=%s, %d test result(s), %d prescription(s)",
            self.mode.value,
            len(result.structured_fields.test_results),
            len(result.structured_fields.prescriptions),
            extra={
                "duration_ms": round(sum(timers.totals_ms.values()), 1),
                "stage_durations_ms": timers.totals_ms,
            },
        )
        return result

    def _extract_multimodal(
        self,
        document_bytes: bytes,
        mime_type: str,
        api_key: str,
        timers: StageTimers,
    ) -> ExtractedResult:
        request = build_multimodal_request(document_bytes, mime_type)
        parts = multimodal_parts(request, encode_base64(request.document_bytes))

        with timers.timer("generate"):
            raw = self.gemini.generate_json(parts, api_key)
        transcription, record = parse_multimodal_output(raw)

        return ExtractedResult(transcribed_text=transcription, structured_fields=record)

    def _extract_two_stage(
        self,
        document_bytes: bytes,
        mime_type: str,
        api_key: str,
        timers: StageTimers,
    ) -> ExtractedResult:
        request = build_two_stage_request(document_bytes, mime_type)

        # Stage 1 errors propagate here, so stage 2 never runs on a failed OCR
        with timers.timer("ocr"):
            transcription = self.vision.detect_document_text(
                encode_base64(request.document_bytes), api_key
            )

        with timers.timer("structure"):
            raw = self.gemini.generate_json(structuring_parts(request, transcription), api_key)
        record = parse_structured_output(raw)

        return ExtractedResult(transcribed_text=transcription, structured_fields=record)


def extract(
    image_bytes: bytes,
    mime_type: str,
    api_key: str,
    *,
    mode: Optional[ExtractionMode] = None,
    transport: Optional[ResilientTransport] = None,
) -> ExtractedResult:
    """Extract transcription and structured fields from one document image.

    A transport is created (and closed) per call when none is supplied.

    Raises:
        ClassifiedError: See ``ExtractionOrchestrator.extract``
    """
    if transport is not None:
        return ExtractionOrchestrator(transport, mode=mode).extract(image_bytes, mime_type, api_key)

    with ResilientTransport() as owned:
        return ExtractionOrchestrator(owned, mode=mode).extract(image_bytes, mime_type, api_key)
