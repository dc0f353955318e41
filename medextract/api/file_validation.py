"""File upload validation utilities.

Checks content type, size and magic bytes of an uploaded document image.
"""

import logging
from typing import Final

from fastapi import UploadFile

from medextract.pipeline.core.config import ALLOWED_MIME_TYPES, MAX_FILE_SIZE_MB
from medextract.pipeline.errors.codes import make_error
from medextract.pipeline.utils.file_detection import detect_image_mime_type

logger = logging.getLogger(__name__)

MAX_FILE_SIZE_BYTES: Final = MAX_FILE_SIZE_MB * 1024 * 1024


async def read_upload_file(file: UploadFile) -> tuple[bytes, str]:
    """Read and validate an uploaded image.

    Returns:
        (content, mime_type) where mime_type comes from the magic bytes

    Raises:
        PreconditionError: Wrong content type, empty, too large or not an image
    """
    if file.content_type not in ALLOWED_MIME_TYPES:
        raise make_error(
            "UNSUPPORTED_MIME_TYPE",
            details={"content_type": file.content_type},
        )

    content = await file.read()
    if not content:
        raise make_error("MISSING_DOCUMENT", message="File is empty (0 bytes)")

    if len(content) > MAX_FILE_SIZE_BYTES:
        raise make_error(
            "FILE_TOO_LARGE",
            message=f"File too large: {len(content) / (1024 * 1024):.2f}MB (max: {MAX_FILE_SIZE_MB}MB)",
        )

    detected = detect_image_mime_type(content[:8])
    if detected is None:
        raise make_error(
            "UNSUPPORTED_MIME_TYPE",
            message="Unsupported file type (invalid magic bytes)",
            details={"magic_bytes": content[:8].hex()},
        )

    if detected != file.content_type:
        logger.warning(
            "Content-Type mismatch: header=%s detected=%s",
            file.content_type,
            detected,
        )

    logger.info("File validated: size=%d content_type=%s", len(content), detected)
    return content, detected
