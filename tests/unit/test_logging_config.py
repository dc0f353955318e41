import json
import logging

from medextract.pipeline.core.logging_config import StructuredFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="medextract.pipeline.resilience.retry",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="Retrying %s",
        args=("Gemini",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_retry_fields_rendered():
    line = StructuredFormatter().format(
        _record(service="Gemini", attempt=2, max_attempts=4, delay_seconds=2.4)
    )
    data = json.loads(line)

    assert data["level"] == "WARNING"
    assert data["message"] == "Retrying Gemini"
    assert data["attempt"] == 2
    assert data["delay_seconds"] == 2.4
    assert data["timestamp"].endswith("Z")


def test_unknown_extras_skipped():
    data = json.loads(StructuredFormatter().format(_record(api_key="secret")))

    assert "api_key" not in data
