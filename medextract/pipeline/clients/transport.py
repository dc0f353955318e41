"""
Resilient JSON-over-HTTP caller shared by the Gemini and Vision clients.

Every response status is classified:

- 5xx and 429: transient, retried with exponential backoff plus jitter until
  the attempt budget is spent, then raised as ``TransientServiceError``.
- any other non-2xx: permanent, raised on the first attempt as
  ``PermanentServiceError`` carrying the server message when there is one.
- 2xx: the raw ``httpx.Response`` is returned for the caller to decode.

Connection resets, DNS failures and timeouts never get a status code and are
not retried: they surface immediately as ``PermanentServiceError`` with
``http_status=None``. Only status-classified failures consume retry budget.
"""

import logging
import random
from http import HTTPStatus
from typing import Any, Callable, Optional

import httpx

from medextract.pipeline.core.config import ERROR_BODY_MAX_CHARS, REQUEST_TIMEOUT_SECONDS
from medextract.pipeline.core.exceptions import (
    PermanentServiceError,
    TransientServiceError,
)
from medextract.pipeline.resilience.retry import RetryConfig, retry_with_backoff

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "Unknown error"


def is_transient_status(status_code: int) -> bool:
    """True for statuses worth retrying unchanged (server errors, rate limiting)."""
    return (
        status_code >= HTTPStatus.INTERNAL_SERVER_ERROR
        or status_code == HTTPStatus.TOO_MANY_REQUESTS
    )


def _read_error_body(response: httpx.Response) -> str:
    try:
        return response.text[:ERROR_BODY_MAX_CHARS]
    except UnicodeDecodeError:
        return ""


def _server_message(response: httpx.Response) -> str:
    """Pull ``error.message`` out of a Google-style error body."""
    try:
        body = response.json()
    except (ValueError, RecursionError):
        return UNKNOWN_ERROR_MESSAGE
    if not isinstance(body, dict):
        return UNKNOWN_ERROR_MESSAGE
    error = body.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"] or UNKNOWN_ERROR_MESSAGE
    if isinstance(error, str) and error:
        return error
    return UNKNOWN_ERROR_MESSAGE


class ResilientTransport:
    """POST JSON payloads with status classification and bounded retries.

    Args:
        client: Shared ``httpx.Client``; one is created (and owned) when omitted
        retry_config: Attempt budget and backoff parameters
        timeout: Per-request timeout for an owned client
        transport: Optional httpx transport for an owned client (tests)
        sleep: Blocking sleep used between attempts
        rng: Random source for jitter
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        retry_config: Optional[RetryConfig] = None,
        *,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Optional[Callable[[float], None]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout, transport=transport)
        self.retry_config = retry_config or RetryConfig()
        self._sleep = sleep
        self._rng = rng

    def __enter__(self) -> "ResilientTransport":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def send(
        self,
        url: str,
        payload: dict[str, Any],
        *,
        service_name: str = "Backend",
        params: Optional[dict[str, str]] = None,
        headers: Optional[dict[str, str]] = None,
        max_attempts: Optional[int] = None,
    ) -> httpx.Response:
        """POST ``payload`` as JSON to ``url`` and return the successful response.

        Args:
            url: Target endpoint (credentials go in ``params``, never in the URL)
            payload: JSON-serializable request body
            service_name: Label used in error codes, messages and logs
            params: Query parameters, e.g. ``{"key": api_key}``
            headers: Extra request headers
            max_attempts: Overrides the configured attempt budget

        Raises:
            TransientServiceError: 5xx/429 on every attempt
            PermanentServiceError: Other non-2xx status or network failure
        """
        config = self.retry_config
        if max_attempts is not None:
            config = RetryConfig(
                max_attempts=max_attempts,
                initial_delay_seconds=config.initial_delay_seconds,
                max_delay_seconds=config.max_delay_seconds,
                exponential_base=config.exponential_base,
                jitter_seconds=config.jitter_seconds,
            )

        attempts = 0

        def attempt_once() -> httpx.Response:
            nonlocal attempts
            attempts += 1
            return self._send_once(url, payload, service_name, params, headers, attempts)

        try:
            return retry_with_backoff(
                attempt_once,
                config,
                (TransientServiceError,),
                sleep=self._sleep,
                rng=self._rng,
            )
        except TransientServiceError as e:
            e.details["attempts"] = attempts
            raise

    def _send_once(
        self,
        url: str,
        payload: dict[str, Any],
        service_name: str,
        params: Optional[dict[str, str]],
        headers: Optional[dict[str, str]],
        attempt: int,
    ) -> httpx.Response:
        try:
            response = self._client.post(
                url,
                json=payload,
                params=params,
                headers={"Content-Type": "application/json", **(headers or {})},
            )
        except httpx.TransportError as e:
            logger.error(
                f"{service_name} request failed without a response: {type(e).__name__}",
                extra={"service": service_name, "attempt": attempt},
            )
            raise PermanentServiceError(
                service_name,
                f"{service_name} API error: network failure ({type(e).__name__})",
                details={"reason": str(e)},
            ) from e

        status = response.status_code
        logger.info(
            f"{service_name} attempt {attempt} -> HTTP {status}",
            extra={"service": service_name, "attempt": attempt, "http_status": status},
        )

        if is_transient_status(status):
            raise TransientServiceError(
                service_name,
                status,
                details={"body": _read_error_body(response)},
            )

        if not response.is_success:
            raise PermanentServiceError(
                service_name,
                f"{service_name} API error: {_server_message(response)}",
                http_status=status,
                details={"body": _read_error_body(response)},
            )

        return response
