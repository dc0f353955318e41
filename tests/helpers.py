"""Shared fakes for backend-facing tests."""

import json
from typing import Any, Callable, Union

import httpx

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 16
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF" + b"\x00" * 16

GEMINI_HOST = "generativelanguage.googleapis.com"
VISION_HOST = "vision.googleapis.com"

FULL_RECORD = {
    "patientInfo": {"name": "Jane Doe", "dob": "1980-02-14", "reportDate": "2024-05-02"},
    "diagnosis": "Type 2 diabetes mellitus",
    "prescriptions": [
        {"medication": "Metformin", "dosage": "500 mg twice daily", "duration": "90 days"}
    ],
    "testResults": [
        {"testName": "Hemoglobin A1c", "value": "7.2", "unit": "%", "referenceRange": "4.0 - 5.6"}
    ],
}


def gemini_envelope(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


def vision_envelope(text: str) -> dict:
    return {
        "responses": [
            {"textAnnotations": [{"description": text}, {"description": text.split()[0]}]}
        ]
    }


def reply(status: int, body: Union[dict, str, None] = None) -> Callable[[httpx.Request], httpx.Response]:
    """Factory building a fresh response per call."""

    def build(request: httpx.Request) -> httpx.Response:
        if isinstance(body, dict):
            return httpx.Response(status, json=body, request=request)
        return httpx.Response(status, text=body or "", request=request)

    return build


def gemini_json_reply(obj: Any) -> Callable[[httpx.Request], httpx.Response]:
    return reply(200, gemini_envelope(json.dumps(obj)))


class ScriptedBackend:
    """Replays a fixed script of replies and records every request.

    Script items are reply factories or exception classes (raised as network
    failures). The last item repeats once the script runs out.
    """

    def __init__(self, *script):
        self.script = list(script)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        item = self.script[min(len(self.requests), len(self.script)) - 1]
        if isinstance(item, type) and issubclass(item, Exception):
            raise item("Connection reset by peer", request=request)
        return item(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def json_body(self, index: int) -> dict:
        return json.loads(self.requests[index].content)


class RoutedBackend:
    """Dispatches to a scripted backend per host (Gemini vs Vision)."""

    def __init__(self, gemini: ScriptedBackend, vision: ScriptedBackend):
        self.gemini = gemini
        self.vision = vision
        self.hosts: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.hosts.append(request.url.host)
        if request.url.host == VISION_HOST:
            return self.vision(request)
        return self.gemini(request)


class SleepRecorder:
    """Stands in for time.sleep; records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.delays)


# Deep enough to exhaust the JSON decoder's recursion limit
DEEPLY_NESTED_JSON = "[" * 100000 + "]" * 100000
