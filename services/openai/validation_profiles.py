"""Domain predicates checked by the validity gate before any analysis runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Literal, Tuple

VALIDATION_FUNCTION_NAME = "report_input_validity"

VALIDATION_FUNCTION: Dict[str, Any] = {
    "type": "function",
    "name": VALIDATION_FUNCTION_NAME,
    "description": "Report whether the input belongs to the accepted category.",
    "parameters": {
        "type": "object",
        "properties": {
            "isValid": {
                "type": "boolean",
                "description": "True only when the input clearly belongs to the accepted category.",
            },
            "message": {
                "type": "string",
                "description": "One short sentence for the user explaining the decision.",
            },
        },
        "required": ["isValid", "message"],
        "additionalProperties": False,
    },
    "strict": True,
}


@dataclass(frozen=True)
class ValidationProfile:
    """A narrow predicate such as "is a medical image" plus its user-facing wording."""

    name: str
    input_kind: Literal["text", "image"]
    subject: str
    criteria: str
    accepted_categories: Tuple[str, ...]
    rejection_hint: str
    unavailable_message: str

    def system_prompt(self) -> str:
        return (
            "You are a strict input classifier for a health information service. "
            f"Decide whether the input is a {self.subject}. {self.criteria} "
            "Do not analyze the input beyond this decision."
        )

    def user_prompt(self, text: str | None = None) -> str:
        if self.input_kind == "text":
            return f'Is the following input a {self.subject}?\n\nInput: "{text or ""}"'
        return f"Is the attached image a {self.subject}?"

    def rejection_message(self, model_message: str) -> str:
        """Compose the message shown when the checkpoint rejects an input."""
        parts = [model_message.strip(), self.rejection_hint]
        parts.append("Accepted inputs: " + ", ".join(self.accepted_categories) + ".")
        return "\n\n".join(part for part in parts if part)


MEDICAL_IMAGE = ValidationProfile(
    name="medical_image",
    input_kind="image",
    subject="medical image",
    criteria=(
        "Accept diagnostic imaging and recordings such as X-rays, CT scans, MRI scans, "
        "ultrasound images, and ECG/EKG strips. Reject photos of people, objects, documents, "
        "screenshots, and anything else."
    ),
    accepted_categories=("X-rays", "CT scans", "MRI scans", "Ultrasound", "ECG/EKG"),
    rejection_hint=(
        "Please upload a valid medical image such as X-rays, CT scans, MRI, ultrasound, or ECG images."
    ),
    unavailable_message="Unable to confirm this is a medical image. Please try again.",
)

MEDICINE_IMAGE = ValidationProfile(
    name="medicine_image",
    input_kind="image",
    subject="medicine image",
    criteria=(
        "Accept photos of tablets, capsules, medicine bottles or containers, medicine packaging "
        "or boxes, and prescription labels. Reject everything else."
    ),
    accepted_categories=("Tablets/Capsules", "Bottles/Containers", "Packaging/Boxes", "Prescription Labels"),
    rejection_hint=(
        "Please upload a clear image of medicine packaging, tablets, capsules, or medicine bottles."
    ),
    unavailable_message="Unable to confirm this is a medicine image. Please try again.",
)

MEDICAL_TERM = ValidationProfile(
    name="medical_term",
    input_kind="text",
    subject="medical term",
    criteria=(
        "Accept medical terminology: conditions, symptoms, anatomy, procedures, tests, "
        "abbreviations, and diagnosis or procedure codes. Reject greetings, questions unrelated "
        "to medicine, gibberish, and general words."
    ),
    accepted_categories=("Medical terms", "Conditions", "Procedures", "Abbreviations", "Medical codes"),
    rejection_hint="⚠️ The input you provided is not recognized as a valid medical term. Please enter a valid term or code.",
    unavailable_message="Error explaining term. Please try again.",
)

MEDICATION_NAME = ValidationProfile(
    name="medication_name",
    input_kind="text",
    subject="medication name",
    criteria=(
        "Accept brand or generic names of drugs, supplements, and vaccines, allowing minor "
        "misspellings. Reject everything else."
    ),
    accepted_categories=("Brand medication names", "Generic medication names"),
    rejection_hint="⚠️ Invalid input. Please enter a valid medication name.",
    unavailable_message="Error validating medication name. Please try again.",
)
