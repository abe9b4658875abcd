"""Prompt builders for the analysis services."""

from typing import Sequence

DISCLAIMER = "Always remind the user that this is not a substitute for professional medical advice."


def medical_image_system_prompt() -> str:
    """Return the system prompt for medical image analysis."""
    return (
        "You are an experienced radiologist and clinician explaining imaging results to patients. "
        "You are careful, conservative, and avoid over-calling pathology. "
        "Report only what the image supports and state uncertainty through the confidence score."
    )


def medical_image_user_prompt(context_present: bool) -> str:
    """Return the user prompt tailored to whether extra context was supplied."""
    supplement = " together with the additional context provided" if context_present else ""
    return (
        "Analyze the attached medical image" + supplement + ". "
        "Identify the modality and body part, list key findings with severity, give an overall "
        "assessment with urgency, recommendations, differential diagnosis, red flags, and next steps."
    )


def medicine_system_prompt() -> str:
    """Return the system prompt for medicine identification."""
    return (
        "You are a clinical pharmacist. Identify medicines from photos of pills, bottles, packaging, "
        "or prescription labels and describe their use in plain language for patients."
    )


def medicine_user_prompt(context_present: bool) -> str:
    """Return the user prompt for medicine identification."""
    supplement = (
        " Tailor the patient-specific side effects to the additional context provided."
        if context_present
        else " Leave patient-specific side effects empty when no patient context is given."
    )
    return (
        "Identify the medicine in the attached image and describe its active ingredients, uses, "
        "when to take it, side effects, precautions, and interactions." + supplement
    )


def interaction_system_prompt() -> str:
    """Return the system prompt for the drug interaction checker."""
    return (
        "You are a clinical pharmacist reviewing a patient's medication list. "
        "Respond in Markdown with sections for each interaction found, its severity, the mechanism, "
        f"and practical advice. {DISCLAIMER}"
    )


def interaction_user_prompt(names: Sequence[str]) -> str:
    """Return the user prompt listing the medications to check."""
    listing = "\n".join(f"- {name}" for name in names)
    if len(names) == 1:
        return (
            "Review this medication for common interactions with other drugs, foods, and alcohol, "
            f"and summarize key safety notes:\n{listing}"
        )
    return f"Check these medications for interactions with each other:\n{listing}"


def term_system_prompt() -> str:
    """Return the system prompt for the medical term explainer."""
    return (
        "You explain medical terminology in simple language for patients. "
        "Respond in Markdown with a short definition, a plain-language explanation, "
        f"common causes or uses, and related terms. {DISCLAIMER}"
    )


def term_user_prompt(term: str) -> str:
    """Return the user prompt for a single term."""
    return f'Explain the medical term "{term}".'
