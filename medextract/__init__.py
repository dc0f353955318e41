"""Medical document transcription and structured extraction."""

__version__ = "1.0.0"

from medextract.pipeline.core.exceptions import (  # noqa: E402
    ClassifiedError,
    ErrorKind,
    MalformedResponseError,
    PermanentServiceError,
    PreconditionError,
    TransientServiceError,
)
from medextract.pipeline.models.dto import (  # noqa: E402
    ExtractedResult,
    ExtractionMode,
    MedicalRecord,
)
from medextract.pipeline.orchestrator import ExtractionOrchestrator, extract  # noqa: E402

__all__ = [
    "ClassifiedError",
    "ErrorKind",
    "ExtractedResult",
    "ExtractionMode",
    "ExtractionOrchestrator",
    "MalformedResponseError",
    "MedicalRecord",
    "PermanentServiceError",
    "PreconditionError",
    "TransientServiceError",
    "extract",
]
