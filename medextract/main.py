"""FastAPI application entry point."""

from dotenv import load_dotenv

load_dotenv()

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from medextract import __version__
from medextract.api.routes import extract, health
from medextract.core.error_handlers import (
    handle_classified_error,
    handle_http_error,
    handle_unknown_error,
    handle_validation_error,
)
from medextract.core.lifespan import lifespan
from medextract.core.middleware import trace_id_middleware
from medextract.core.settings import app_settings
from medextract.core.validation import validate_all_settings
from medextract.pipeline.core.exceptions import ClassifiedError
from medextract.pipeline.core.logging_config import configure_structured_logging

configure_structured_logging(level=app_settings.LOG_LEVEL, json_format=app_settings.LOG_JSON)
logger = logging.getLogger(__name__)

# Validate environment before starting application
validate_all_settings()

app = FastAPI(
    title="Medical Document Extractor API",
    version=__version__,
    description="Transcribes medical document images and extracts structured clinical fields",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# 1. Register Middleware
app.middleware("http")(trace_id_middleware)

# 2. Register Exception Handlers
app.add_exception_handler(RequestValidationError, handle_validation_error)
app.add_exception_handler(StarletteHTTPException, handle_http_error)
app.add_exception_handler(ClassifiedError, handle_classified_error)
app.add_exception_handler(Exception, handle_unknown_error)

# Routes
app.include_router(health.router)
app.include_router(extract.router)
