"""Unit tests for the Gemini and Vision clients."""

import logging
from types import SimpleNamespace

import httpx
import pytest

from medextract.pipeline.clients import gemini_client
from medextract.pipeline.clients.gemini_client import (
    GeminiClient,
    build_generate_payload,
    extract_candidate_text,
    inline_data_part,
    text_part,
)
from medextract.pipeline.clients.vision_client import (
    VisionClient,
    build_annotate_payload,
    parse_annotate_response,
)
from medextract.pipeline.core.exceptions import MalformedResponseError, PermanentServiceError
from tests.helpers import (
    DEEPLY_NESTED_JSON,
    ScriptedBackend,
    gemini_envelope,
    reply,
    vision_envelope,
)


def _response(status: int, body) -> httpx.Response:
    request = httpx.Request("POST", "https://example.test")
    return reply(status, body)(request)


class TestGeminiPayload:
    def test_json_only_directive(self):
        payload = build_generate_payload([text_part("prompt")])

        assert payload == {
            "contents": [{"parts": [{"text": "prompt"}]}],
            "generationConfig": {"response_mime_type": "application/json"},
        }

    def test_inline_data_part(self):
        assert inline_data_part("image/png", "AAAA") == {
            "inline_data": {"mime_type": "image/png", "data": "AAAA"}
        }


class TestCandidateText:
    def test_extracts_nested_text(self):
        assert extract_candidate_text(_response(200, gemini_envelope('{"a": 1}'))) == '{"a": 1}'

    @pytest.mark.parametrize(
        "envelope",
        [
            {},
            {"candidates": []},
            {"candidates": [{}]},
            {"candidates": [{"content": {"parts": []}}]},
            {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
            {"candidates": [{"content": {"parts": [{"inline_data": {}}]}}]},
            {"promptFeedback": {"blockReason": "SAFETY"}},
        ],
    )
    def test_invalid_structure(self, envelope):
        with pytest.raises(MalformedResponseError) as exc_info:
            extract_candidate_text(_response(200, envelope))

        assert exc_info.value.error_code == "INVALID_RESPONSE_STRUCTURE"
        assert exc_info.value.message == "Invalid response structure"
        assert exc_info.value.raw_payload is not None

    def test_finish_reason_kept(self):
        envelope = {"candidates": [{"finishReason": "SAFETY"}]}

        with pytest.raises(MalformedResponseError) as exc_info:
            extract_candidate_text(_response(200, envelope))

        assert exc_info.value.details["finish_reason"] == "SAFETY"

    def test_body_not_json(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            extract_candidate_text(_response(200, "<html>proxy error</html>"))

        assert exc_info.value.error_code == "INVALID_JSON"
        assert exc_info.value.raw_payload == "<html>proxy error</html>"

    def test_body_nested_too_deep(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            extract_candidate_text(_response(200, DEEPLY_NESTED_JSON))

        assert exc_info.value.error_code == "INVALID_JSON"
        assert exc_info.value.raw_payload == DEEPLY_NESTED_JSON


class TestGeminiClient:
    def test_generate_json(self, make_transport):
        backend = ScriptedBackend(reply(200, gemini_envelope('{"diagnosis": null}')))
        client = GeminiClient(make_transport(backend), endpoint_url="https://g.test/gen")

        text = client.generate_json([text_part("hello")], api_key="k-123")

        assert text == '{"diagnosis": null}'
        request = backend.requests[0]
        assert request.url.path == "/gen"
        assert request.url.params["key"] == "k-123"
        assert backend.json_body(0)["generationConfig"]["response_mime_type"] == "application/json"

    def test_payload_size_only_measured_for_debug(self, make_transport, monkeypatch, caplog):
        def fail_dumps(*args, **kwargs):
            raise AssertionError("payload serialized for a disabled debug log")

        monkeypatch.setattr(gemini_client, "json", SimpleNamespace(dumps=fail_dumps))
        caplog.set_level(logging.INFO, logger=gemini_client.logger.name)
        backend = ScriptedBackend(reply(200, gemini_envelope("{}")))
        client = GeminiClient(make_transport(backend), endpoint_url="https://g.test/gen")

        assert client.generate_json([text_part("hello")], api_key="k") == "{}"

    def test_payload_size_logged_at_debug(self, make_transport, caplog):
        caplog.set_level(logging.DEBUG, logger=gemini_client.logger.name)
        backend = ScriptedBackend(reply(200, gemini_envelope("{}")))
        client = GeminiClient(make_transport(backend), endpoint_url="https://g.test/gen")

        client.generate_json([text_part("hello")], api_key="k")

        assert any("1 part(s)" in record.getMessage() for record in caplog.records)


class TestVision:
    def test_annotate_payload(self):
        assert build_annotate_payload("QUJD") == {
            "requests": [
                {
                    "image": {"content": "QUJD"},
                    "features": [{"type": "DOCUMENT_TEXT_DETECTION"}],
                }
            ]
        }

    def test_first_annotation_is_full_text(self):
        text = parse_annotate_response(_response(200, vision_envelope("Patient: Jane Doe")))
        assert text == "Patient: Jane Doe"

    @pytest.mark.parametrize(
        "envelope",
        [{"responses": [{}]}, {"responses": [{"textAnnotations": []}]}],
    )
    def test_no_text(self, envelope):
        with pytest.raises(MalformedResponseError) as exc_info:
            parse_annotate_response(_response(200, envelope))

        assert exc_info.value.error_code == "NO_TEXT_FOUND"

    @pytest.mark.parametrize("envelope", [{}, {"responses": []}, {"responses": "x"}])
    def test_invalid_structure(self, envelope):
        with pytest.raises(MalformedResponseError) as exc_info:
            parse_annotate_response(_response(200, envelope))

        assert exc_info.value.error_code == "INVALID_RESPONSE_STRUCTURE"

    def test_per_image_error(self):
        envelope = {"responses": [{"error": {"code": 3, "message": "Bad image data."}}]}

        with pytest.raises(PermanentServiceError) as exc_info:
            parse_annotate_response(_response(200, envelope))

        assert exc_info.value.message == "Vision API error: Bad image data."

    def test_body_nested_too_deep(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            parse_annotate_response(_response(200, DEEPLY_NESTED_JSON))

        assert exc_info.value.error_code == "INVALID_JSON"
        assert exc_info.value.raw_payload == DEEPLY_NESTED_JSON

    def test_detect_document_text(self, make_transport):
        backend = ScriptedBackend(reply(200, vision_envelope("HbA1c 7.2 %")))
        client = VisionClient(make_transport(backend), endpoint_url="https://v.test/annotate")

        assert client.detect_document_text("QUJD", api_key="k") == "HbA1c 7.2 %"
        assert backend.json_body(0)["requests"][0]["image"]["content"] == "QUJD"
