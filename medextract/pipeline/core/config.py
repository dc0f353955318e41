# =============================================================================
# Retry Configuration
# =============================================================================

MAX_ATTEMPTS = 4  # Total attempts, including the first one
INITIAL_BACKOFF_SECONDS = 1.0  # Delay before the first retry
BACKOFF_MULTIPLIER = 2.0  # delay = initial * multiplier ** attempt_index
JITTER_SECONDS = 1.0  # Uniform random jitter added on top of each delay
MAX_BACKOFF_SECONDS = 60.0


# =============================================================================
# External Service Timeouts (seconds)
# =============================================================================

REQUEST_TIMEOUT_SECONDS = 60  # Timeout for a single Gemini / Vision request


# =============================================================================
# Validation Limits
# =============================================================================

ALLOWED_MIME_TYPES = frozenset({"image/png", "image/jpeg"})
# generateContent caps the whole request at 20 MB and base64 inflates bytes by 4/3
MAX_FILE_SIZE_MB = 14


# =============================================================================
# Error Handling
# =============================================================================

ERROR_BODY_MAX_CHARS = 200  # Maximum chars from error response bodies
