"""
Typed contracts flowing through the extraction pipeline.

Field names are snake_case in Python and camelCase on the wire
(``model_dump(mode="json", by_alias=True)``), matching the JSON the model is
asked to emit.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExtractionMode(str, Enum):
    """How many backend calls one extraction takes."""

    MULTIMODAL = "multimodal"  # One Gemini call on the image
    TWO_STAGE = "two_stage"  # Vision OCR, then a text-only Gemini call


class _RecordModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    @field_validator("*", mode="before")
    @classmethod
    def numbers_to_text(cls, value: Any) -> Any:
        # Models often emit lab values and dosages as bare numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class PatientInfo(_RecordModel):
    name: Optional[str] = None
    dob: Optional[str] = None
    report_date: Optional[str] = Field(None, alias="reportDate")


class Prescription(_RecordModel):
    medication: Optional[str] = None
    dosage: Optional[str] = None
    duration: Optional[str] = None


class TestResult(_RecordModel):
    __test__ = False  # keep pytest from collecting this model

    test_name: Optional[str] = Field(None, alias="testName")
    value: Optional[str] = None
    unit: Optional[str] = None
    reference_range: Optional[str] = Field(None, alias="referenceRange")


class MedicalRecord(_RecordModel):
    """
    Structured fields extracted from a medical document.

    Absent scalars are None and absent arrays are empty, so every key of the
    schema is present after ``model_dump(mode="json", by_alias=True)``.
    Item sequences are tuples so a returned record cannot be edited in place.
    """

    patient_info: PatientInfo = Field(default_factory=PatientInfo, alias="patientInfo")
    diagnosis: Optional[str] = None
    prescriptions: tuple[Prescription, ...] = ()
    test_results: tuple[TestResult, ...] = Field((), alias="testResults")

    @field_validator("patient_info", mode="before")
    @classmethod
    def null_patient_info(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("prescriptions", "test_results", mode="before")
    @classmethod
    def null_list(cls, value: Any) -> Any:
        return () if value is None else value


class ExtractionRequest(BaseModel):
    """
    Everything needed to ask the backend for one extraction.

    Built by the orchestrator per call and discarded once the call resolves.
    """

    model_config = ConfigDict(frozen=True)

    document_bytes: bytes
    mime_type: str
    prompt_template: str
    output_schema: dict[str, Any]


class ExtractedResult(BaseModel):
    """
    Successful outcome of one extraction call.
    """

    model_config = ConfigDict(frozen=True)

    transcribed_text: str
    structured_fields: MedicalRecord
