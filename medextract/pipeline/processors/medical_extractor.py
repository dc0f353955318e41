"""
Prompt templates and request parts for medical document extraction.

A request carries its prompt template together with the output schema. The
schema fills the first ``{}`` placeholder of the template when the prompt is
rendered, so the backend is told exactly the shape ``MedicalRecord`` accepts.
The structuring template has a second placeholder for the OCR transcription.
"""

import json
from typing import Any, Optional

from medextract.pipeline.clients.gemini_client import inline_data_part, text_part
from medextract.pipeline.models.dto import ExtractionRequest

OUTPUT_SCHEMA: dict[str, Any] = {
    "patientInfo": {
        "name": "The patient's full name. If not present, use null.",
        "dob": "The patient's date of birth. If not present, use null.",
        "reportDate": "The date the report was generated. If not present, use null.",
    },
    "diagnosis": "The primary diagnosis or clinical impression. If not present, use null.",
    "prescriptions": [
        {
            "medication": "Name of the prescribed medication.",
            "dosage": "Dose and frequency (e.g., '500 mg twice daily'). If not present, use null.",
            "duration": "How long to take it (e.g., '7 days'). If not present, use null.",
        }
    ],
    "testResults": [
        {
            "testName": "The name of the test (e.g., 'Hemoglobin A1c', 'Total Cholesterol').",
            "value": "The numerical or text result of the test.",
            "unit": "The unit of measurement (e.g., '%', 'mg/dL'). If not present, use null.",
            "referenceRange": "The normal or reference range for the test (e.g., '4.0 - 5.6'). If not present, use null.",
        }
    ],
}

MULTIMODAL_PROMPT_V1 = """You are a highly intelligent medical data extraction assistant.
Analyze the attached image of a medical document and do two things:

STEP 1: TRANSCRIBE
Transcribe all legible text of the document, preserving line breaks.

STEP 2: STRUCTURE
Extract the key information into an object with the following structure:
{}

RULES
- If a value is not found for any field, use null. Use an empty array when no
  prescriptions or test results are present.
- Do not invent or assume missing data.

OUTPUT STRICTLY THIS JSON OBJECT (no explanations, no Markdown formatting):
{"transcription": string, "structuredData": object}
"""

STRUCTURING_PROMPT_V1 = """You are a highly intelligent medical data extraction assistant.
Analyze the following text from a medical document.
Extract the key information and return it as a valid JSON object.

The JSON object should have the following structure:
{}

If a value is not found for any field, use null.
Do not include any text or explanations outside of the JSON object.

Here is the text to analyze:
---
{}
---
"""


def render_prompt(request: ExtractionRequest, transcription: Optional[str] = None) -> str:
    """
    Fill the request's template with its schema, then with the transcription.

    Each placeholder is filled in its own slice of the template, so braces
    inside the schema or the transcription are never taken for placeholders.
    """
    before, _, after = request.prompt_template.partition("{}")
    if transcription is not None:
        after = after.replace("{}", transcription, 1)
    schema = json.dumps(request.output_schema, indent=2, ensure_ascii=False)
    return before + schema + after


def build_multimodal_request(document_bytes: bytes, mime_type: str) -> ExtractionRequest:
    return ExtractionRequest(
        document_bytes=document_bytes,
        mime_type=mime_type,
        prompt_template=MULTIMODAL_PROMPT_V1,
        output_schema=OUTPUT_SCHEMA,
    )


def build_two_stage_request(document_bytes: bytes, mime_type: str) -> ExtractionRequest:
    return ExtractionRequest(
        document_bytes=document_bytes,
        mime_type=mime_type,
        prompt_template=STRUCTURING_PROMPT_V1,
        output_schema=OUTPUT_SCHEMA,
    )


def multimodal_parts(request: ExtractionRequest, data_b64: str) -> list[dict[str, Any]]:
    """Prompt followed by the document as inline data tagged with its MIME type."""
    return [
        text_part(render_prompt(request)),
        inline_data_part(request.mime_type, data_b64),
    ]


def structuring_parts(request: ExtractionRequest, transcription: str) -> list[dict[str, Any]]:
    return [text_part(render_prompt(request, transcription))]
