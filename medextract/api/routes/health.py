from fastapi import APIRouter

from medextract import __version__
from medextract.api.schemas import HealthResponse
from medextract.core.settings import app_settings

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    return HealthResponse(
        status="healthy",
        service="medextract-api",
        version=__version__,
        mode=app_settings.EXTRACTION_MODE,
    )
