"""FastAPI dependency injection functions."""

from typing import Optional

from fastapi import Form, Header, HTTPException, Request, status

from medextract.core.settings import gemini_settings
from medextract.pipeline.clients.transport import ResilientTransport


async def get_transport(request: Request) -> ResilientTransport:
    """Get the shared backend transport from app state.

    Raises:
        HTTPException: 503 if the transport is not initialized
    """
    transport = getattr(request.app.state, "transport", None)

    if transport is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Backend transport unavailable",
        )

    return transport


async def get_api_key(
    api_key: Optional[str] = Form(None, description="Google AI API key"),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key"),
) -> str:
    """Resolve the caller's key: form field, then header, then server default.

    An empty string is returned when none is available; the orchestrator
    reports it as a precondition failure.
    """
    for candidate in (api_key, x_api_key):
        if candidate and candidate.strip():
            return candidate.strip()
    if gemini_settings.GEMINI_API_KEY is not None:
        return gemini_settings.GEMINI_API_KEY.get_secret_value()
    return ""
