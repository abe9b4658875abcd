"""Function tool definitions for the structured analyzers.

Each definition mirrors a record in `models.analysis_models`; the strict flag
makes the model fill every field, and the pydantic record re-checks the reply.
"""

from typing import Any, Dict, List

MEDICAL_IMAGE_FUNCTION_NAME = "report_medical_image_analysis"
MEDICINE_FUNCTION_NAME = "report_medicine_analysis"


def _object(properties: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


def _string(description: str) -> Dict[str, Any]:
    return {"type": "string", "description": description}


def _enum(values: List[str], description: str) -> Dict[str, Any]:
    return {"type": "string", "enum": values, "description": description}


def _string_list(description: str) -> Dict[str, Any]:
    return {"type": "array", "items": {"type": "string"}, "description": description}


_CONFIDENCE = {
    "type": "integer",
    "minimum": 0,
    "maximum": 100,
    "description": "Confidence in the analysis as a whole number between 0 and 100.",
}

MEDICAL_IMAGE_FUNCTION: Dict[str, Any] = {
    "type": "function",
    "name": MEDICAL_IMAGE_FUNCTION_NAME,
    "description": "Return the structured analysis of a medical image.",
    "parameters": _object(
        {
            "imageType": _string("Imaging modality, e.g. X-ray, CT scan, MRI, Ultrasound, ECG."),
            "bodyPart": _string("Body part or organ system shown."),
            "keyFindings": {
                "type": "array",
                "items": _object(
                    {
                        "finding": _string("What was observed."),
                        "location": _string("Where in the image it was observed."),
                        "severity": _enum(["Normal", "Mild", "Moderate", "Severe", "Critical"], "Severity of the finding."),
                        "significance": _string("Clinical significance in plain language."),
                    }
                ),
            },
            "overallAssessment": _object(
                {
                    "status": _enum(["Normal", "Attention Needed", "Urgent Care Required"], "Overall status."),
                    "summary": _string("Two or three sentence summary for a patient."),
                    "urgencyLevel": _enum(["Low", "Medium", "High"], "How soon medical attention is needed."),
                }
            ),
            "recommendations": _object(
                {
                    "immediate": _string_list("Actions to take now."),
                    "followUp": _string_list("Follow-up care."),
                    "lifestyle": _string_list("Lifestyle advice."),
                }
            ),
            "differentialDiagnosis": _string_list("Possible conditions consistent with the findings."),
            "redFlags": _string_list("Warning signs that need urgent care."),
            "nextSteps": _string_list("Suggested next steps, such as tests or specialist visits."),
            "confidence": _CONFIDENCE,
        }
    ),
    "strict": True,
}

MEDICINE_FUNCTION: Dict[str, Any] = {
    "type": "function",
    "name": MEDICINE_FUNCTION_NAME,
    "description": "Return the structured description of the medicine shown in the image.",
    "parameters": _object(
        {
            "medicineName": _string("Brand or generic name of the medicine."),
            "activeIngredients": _string_list("Active ingredients with strengths when visible."),
            "whatItHelps": _string_list("Conditions or symptoms it treats."),
            "severity": _enum(["Low", "Medium", "High"], "Risk level of self-administration."),
            "doctorConsultationRequired": {
                "type": "boolean",
                "description": "Whether a doctor should be consulted before use.",
            },
            "whenToTake": _object(
                {
                    "timing": _string_list("Times of day to take it."),
                    "withFood": _enum(["Before", "After", "With", "Doesn't matter"], "Relation to meals."),
                    "frequency": _string("How often to take it."),
                }
            ),
            "sideEffects": _object(
                {
                    "common": _string_list("Common side effects."),
                    "serious": _string_list("Serious side effects."),
                    "patientSpecific": _string_list("Side effects relevant to the user's context."),
                }
            ),
            "precautions": _string_list("Precautions and contraindications."),
            "interactions": _string_list("Notable drug or food interactions."),
            "confidence": _CONFIDENCE,
        }
    ),
    "strict": True,
}
