"""Medication collection for the drug interaction checker."""

from __future__ import annotations

import logging
from typing import Dict
from uuid import uuid4

from models.session_models import MedicationList
from services.openai.analysis_invoker import AnalysisInvoker
from services.openai.validation_profiles import MEDICATION_NAME
from services.openai.validity_gate import ValidityGate
from utils.errors import DuplicateInputError, HealthAIError

LOGGER = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "This medication has already been added."
EMPTY_LIST_MESSAGE = "Please enter at least one medication to analyze."


class MedicationStore:
    """Keep medication lists in memory, keyed by id."""

    def __init__(self) -> None:
        self._lists: Dict[str, MedicationList] = {}

    def create(self) -> MedicationList:
        medications = MedicationList(list_id=uuid4().hex)
        self._lists[medications.list_id] = medications
        return medications

    def get(self, list_id: str) -> MedicationList:
        """Return a list or raise KeyError if missing."""
        medications = self._lists.get(list_id)
        if medications is None:
            raise KeyError(f"Medication list {list_id} not found")
        return medications

    def delete(self, list_id: str) -> None:
        self.get(list_id)
        del self._lists[list_id]


class MedicationService:
    """Add, remove, and check medications against the validity gate and analyzer."""

    def __init__(self, gate: ValidityGate, invoker: AnalysisInvoker) -> None:
        self.gate = gate
        self.invoker = invoker

    async def add(self, medications: MedicationList, name: str) -> bool:
        """Validate and append a medication name.

        Returns False when the trimmed name is empty (nothing to add).

        Raises:
            DuplicateInputError: If the name is already in the list. No network call is made.
            ValidationRejected: If the name is not a medication or could not be validated.
        """
        cleaned = (name or "").strip()
        if not cleaned:
            return False
        if cleaned in medications.names:
            raise DuplicateInputError(DUPLICATE_MESSAGE)
        await self.gate.checkpoint(MEDICATION_NAME, cleaned)
        # The list may have changed while the name was being validated.
        if cleaned in medications.names:
            raise DuplicateInputError(DUPLICATE_MESSAGE)
        medications.names.append(cleaned)
        return True

    @staticmethod
    def remove(medications: MedicationList, index: int) -> str:
        """Remove and return the medication at `index`."""
        if index < 0 or index >= len(medications.names):
            raise IndexError(f"No medication at position {index}")
        return medications.names.pop(index)

    async def check(self, medications: MedicationList) -> str:
        """Run the interaction analysis and store the report on the list."""
        if not medications.names:
            raise ValueError(EMPTY_LIST_MESSAGE)
        try:
            analysis = await self.invoker.check_interactions(list(medications.names))
        except HealthAIError:
            medications.report = None
            raise
        medications.report = analysis.content
        LOGGER.info("Interaction report generated for %d medications", len(medications.names))
        return analysis.content
