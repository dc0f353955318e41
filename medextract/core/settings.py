"""
Centralized application settings using Pydantic.

All environment variables are read once at startup and validated.
Use this instead of scattered os.getenv() calls throughout the codebase.
"""

from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings


class GeminiSettings(BaseSettings):
    """Gemini generateContent endpoint configuration."""

    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_MODEL: str = "gemini-1.5-flash-latest"
    # Server-side fallback; callers normally send their own key per request
    GEMINI_API_KEY: Optional[SecretStr] = None

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}

    @property
    def generate_content_url(self) -> str:
        return f"{self.GEMINI_BASE_URL.rstrip('/')}/models/{self.GEMINI_MODEL}:generateContent"


class VisionSettings(BaseSettings):
    """Cloud Vision OCR configuration."""

    VISION_ENDPOINT_URL: str = "https://vision.googleapis.com/v1/images:annotate"

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class AppSettings(BaseSettings):
    """General application settings."""

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    EXTRACTION_MODE: str = "multimodal"

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


# Singleton instances - loaded once at module import
gemini_settings = GeminiSettings()
vision_settings = VisionSettings()
app_settings = AppSettings()
