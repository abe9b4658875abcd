"""Records produced by the validity gate and the analysis services.

Wire JSON uses camelCase keys; Python code reads the snake_case attributes.
Unknown keys and out-of-range values are rejected so a malformed reply never
becomes a partially populated record.
"""

from __future__ import annotations

from typing import Annotated, List, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

Severity = Literal["Normal", "Mild", "Moderate", "Severe", "Critical"]
AssessmentStatus = Literal["Normal", "Attention Needed", "Urgent Care Required"]
UrgencyLevel = Literal["Low", "Medium", "High"]
MedicineSeverity = Literal["Low", "Medium", "High"]
FoodTiming = Literal["Before", "After", "With", "Doesn't matter"]

Confidence = Annotated[int, Field(strict=True, ge=0, le=100)]


class _Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)


class ValidationResult(_Record):
    """Outcome of a single validity check."""

    is_valid: StrictBool = Field(alias="isValid")
    message: StrictStr = ""


class Finding(_Record):
    finding: StrictStr
    location: StrictStr
    severity: Severity
    significance: StrictStr


class OverallAssessment(_Record):
    status: AssessmentStatus
    summary: StrictStr
    urgency_level: UrgencyLevel = Field(alias="urgencyLevel")


class ImageRecommendations(_Record):
    immediate: List[StrictStr]
    follow_up: List[StrictStr] = Field(alias="followUp")
    lifestyle: List[StrictStr]


class MedicalImageAnalysis(_Record):
    """Structured reading of an X-ray, CT, MRI, ultrasound, or ECG image."""

    image_type: StrictStr = Field(alias="imageType")
    body_part: StrictStr = Field(alias="bodyPart")
    key_findings: List[Finding] = Field(alias="keyFindings")
    overall_assessment: OverallAssessment = Field(alias="overallAssessment")
    recommendations: ImageRecommendations
    differential_diagnosis: List[StrictStr] = Field(alias="differentialDiagnosis")
    red_flags: List[StrictStr] = Field(alias="redFlags")
    next_steps: List[StrictStr] = Field(alias="nextSteps")
    confidence: Confidence


class WhenToTake(_Record):
    timing: List[StrictStr]
    with_food: FoodTiming = Field(alias="withFood")
    frequency: StrictStr


class SideEffects(_Record):
    common: List[StrictStr]
    serious: List[StrictStr]
    patient_specific: List[StrictStr] = Field(alias="patientSpecific")


class MedicineAnalysis(_Record):
    """Structured description of a medicine identified from its packaging or pills."""

    medicine_name: StrictStr = Field(alias="medicineName")
    active_ingredients: List[StrictStr] = Field(alias="activeIngredients")
    what_it_helps: List[StrictStr] = Field(alias="whatItHelps")
    severity: MedicineSeverity
    doctor_consultation_required: StrictBool = Field(alias="doctorConsultationRequired")
    when_to_take: WhenToTake = Field(alias="whenToTake")
    side_effects: SideEffects = Field(alias="sideEffects")
    precautions: List[StrictStr]
    interactions: List[StrictStr]
    confidence: Confidence


class TextAnalysis(_Record):
    """Free-form Markdown produced by the text analyzers."""

    kind: Literal["drug_interaction", "term_explanation"]
    content: StrictStr = Field(min_length=1)
