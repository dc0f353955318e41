"""Async wrapper around the blocking extraction orchestrator for FastAPI."""

import asyncio
import logging
from typing import Optional

from medextract.pipeline.clients.transport import ResilientTransport
from medextract.pipeline.models.dto import ExtractedResult, ExtractionMode
from medextract.pipeline.orchestrator import ExtractionOrchestrator

logger = logging.getLogger(__name__)


class DocumentExtractor:
    """Runs one extraction per call in the default thread pool executor."""

    def __init__(self, transport: ResilientTransport):
        self.transport = transport

    async def process_document(
        self,
        document_bytes: bytes,
        mime_type: str,
        api_key: str,
        mode: Optional[ExtractionMode] = None,
    ) -> ExtractedResult:
        orchestrator = ExtractionOrchestrator(self.transport, mode=mode)
        logger.info(
            f"Processing {len(document_bytes)} bytes ({mime_type}) in {orchestrator.mode.value} mode"
        )

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            lambda: orchestrator.extract(document_bytes, mime_type, api_key),
        )
