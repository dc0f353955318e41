"""Application startup validation checks.

Validates critical settings before the application starts serving.
"""

import logging
import re

from medextract.core.settings import app_settings, gemini_settings, vision_settings
from medextract.pipeline.models.dto import ExtractionMode

logger = logging.getLogger(__name__)


def validate_all_settings() -> None:
    """Fail fast on a misconfigured environment.

    Raises:
        RuntimeError: If any setting is invalid
    """
    problems = []

    url_pattern = re.compile(r"^https?://.+")
    for url, name in [
        (gemini_settings.GEMINI_BASE_URL, "GEMINI_BASE_URL"),
        (vision_settings.VISION_ENDPOINT_URL, "VISION_ENDPOINT_URL"),
    ]:
        if not url_pattern.match(url or ""):
            problems.append(f"  - {name}={url} (must start with http:// or https://)")

    if not gemini_settings.GEMINI_MODEL.strip():
        problems.append("  - GEMINI_MODEL must not be empty")

    allowed_modes = [mode.value for mode in ExtractionMode]
    if app_settings.EXTRACTION_MODE not in allowed_modes:
        problems.append(
            f"  - EXTRACTION_MODE={app_settings.EXTRACTION_MODE} (expected one of {allowed_modes})"
        )

    if problems:
        error_msg = "Invalid configuration:\n" + "\n".join(problems)
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    logger.info("All settings validated successfully")
    logger.info(f"  - Gemini: {gemini_settings.generate_content_url}")
    logger.info(f"  - Vision: {vision_settings.VISION_ENDPOINT_URL}")
    logger.info(f"  - Mode: {app_settings.EXTRACTION_MODE}")
    if gemini_settings.GEMINI_API_KEY is None:
        logger.info("  - No server-side GEMINI_API_KEY; callers must send their own")
