"""Document extraction endpoint."""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from medextract.api.file_validation import read_upload_file
from medextract.api.schemas import ExtractResponse, ProblemDetail
from medextract.core.dependencies import get_api_key, get_transport
from medextract.pipeline.clients.transport import ResilientTransport
from medextract.pipeline.models.dto import ExtractionMode
from medextract.pipeline.orchestrator import default_mode
from medextract.services.processor import DocumentExtractor

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/v1/extract",
    response_model=ExtractResponse,
    tags=["extraction"],
    responses={
        400: {"description": "Missing or invalid input", "model": ProblemDetail},
        422: {"description": "Validation Error", "model": ProblemDetail},
        502: {"description": "Backend rejected the request or returned unexpected output", "model": ProblemDetail},
        503: {"description": "Backend temporarily unavailable", "model": ProblemDetail},
    },
)
async def extract_document(
    request: Request,
    file: UploadFile = File(..., description="PNG or JPEG image of a medical document"),
    mode: Optional[ExtractionMode] = Form(None, description="multimodal or two_stage"),
    api_key: str = Depends(get_api_key),
    transport: ResilientTransport = Depends(get_transport),
):
    start_time = time.time()
    trace_id = getattr(request.state, "trace_id", None)

    logger.info(
        "[NEW REQUEST] file=%s content_type=%s",
        file.filename,
        file.content_type,
        extra={"trace_id": trace_id},
    )

    content, mime_type = await read_upload_file(file)
    mode = mode or default_mode()

    extractor = DocumentExtractor(transport)
    result = await extractor.process_document(content, mime_type, api_key, mode=mode)

    response = ExtractResponse(
        transcribed_text=result.transcribed_text,
        structured_fields=result.structured_fields,
        mode=mode,
        processing_time_seconds=round(time.time() - start_time, 3),
        trace_id=trace_id,
    )

    logger.info(
        "[RESPONSE] time=%.2fs",
        response.processing_time_seconds,
        extra={"trace_id": trace_id, "duration_ms": response.processing_time_seconds * 1000},
    )
    return response
