"""Validate-then-analyze sequencing shared by the analyzer features.

Every analysis re-runs the validity gate's checkpoint first; the invoker is
only reached when that checkpoint reports a valid input.
"""

from __future__ import annotations

import logging
from typing import Optional

from models.analysis_models import MedicalImageAnalysis, MedicineAnalysis, TextAnalysis, ValidationResult
from services.openai.analysis_invoker import AnalysisInvoker
from services.openai.validation_profiles import MEDICAL_IMAGE, MEDICAL_TERM, MEDICINE_IMAGE
from services.openai.validity_gate import ValidityGate

LOGGER = logging.getLogger(__name__)


class AnalysisPipeline:
    """Gate each analyzer behind its validity checkpoint."""

    def __init__(self, gate: ValidityGate, invoker: AnalysisInvoker) -> None:
        self.gate = gate
        self.invoker = invoker

    async def precheck_medical_image(self, image_b64: bytes, mime_type: str) -> ValidationResult:
        return await self.gate.precheck(MEDICAL_IMAGE, image_b64, mime_type=mime_type)

    async def analyze_medical_image(
        self, image_b64: bytes, mime_type: str, context: Optional[str] = None
    ) -> MedicalImageAnalysis:
        await self.gate.checkpoint(MEDICAL_IMAGE, image_b64, mime_type=mime_type)
        return await self.invoker.analyze_medical_image(image_b64, mime_type=mime_type, context=_clean(context))

    async def precheck_medicine(self, image_b64: bytes, mime_type: str) -> ValidationResult:
        return await self.gate.precheck(MEDICINE_IMAGE, image_b64, mime_type=mime_type)

    async def analyze_medicine(
        self, image_b64: bytes, mime_type: str, context: Optional[str] = None
    ) -> MedicineAnalysis:
        await self.gate.checkpoint(MEDICINE_IMAGE, image_b64, mime_type=mime_type)
        return await self.invoker.analyze_medicine(image_b64, mime_type=mime_type, context=_clean(context))

    async def explain_term(self, term: str) -> TextAnalysis:
        cleaned = (term or "").strip()
        if not cleaned:
            raise ValueError("Please enter a medical term to explain.")
        await self.gate.checkpoint(MEDICAL_TERM, cleaned)
        LOGGER.debug("Explaining term %r", cleaned)
        return await self.invoker.explain_term(cleaned)


def _clean(context: Optional[str]) -> Optional[str]:
    cleaned = (context or "").strip()
    return cleaned or None
