"""Controller for the drug interaction checker's medication lists."""

from typing import Any, Dict

from fastapi import HTTPException, Request

from models.session_models import MedicationList
from services.medication_service import MedicationService, MedicationStore
from services.openai.analysis_invoker import AnalysisInvoker
from services.openai.validity_gate import ValidityGate
from utils.errors import HealthAIError, http_error


def _store(request: Request) -> MedicationStore:
    return request.app.state.medication_store


def _service(request: Request) -> MedicationService:
    openai_client = request.app.state.openai_client
    settings = request.app.state.settings
    return MedicationService(
        ValidityGate(openai_client, model=settings.validation_model),
        AnalysisInvoker(openai_client, model=settings.analysis_model),
    )


def _get_list(request: Request, list_id: str) -> MedicationList:
    try:
        return _store(request).get(list_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc


async def create_list(request: Request) -> Dict[str, Any]:
    return _store(request).create().to_dict()


async def get_list(request: Request, list_id: str) -> Dict[str, Any]:
    return _get_list(request, list_id).to_dict()


async def delete_list(request: Request, list_id: str) -> Dict[str, Any]:
    try:
        _store(request).delete(list_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc
    return {"list_id": list_id, "deleted": True}


async def add_medication(request: Request, list_id: str, name: str) -> Dict[str, Any]:
    """Add a medication after the duplicate check and name validation.

    Raises:
        HTTPException(422) for duplicates or names that are not medications.
    """
    medications = _get_list(request, list_id)
    try:
        added = await _service(request).add(medications, name)
    except HealthAIError as exc:
        raise http_error(exc) from exc
    return {**medications.to_dict(), "added": added}


async def remove_medication(request: Request, list_id: str, index: int) -> Dict[str, Any]:
    medications = _get_list(request, list_id)
    try:
        MedicationService.remove(medications, index)
    except IndexError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return medications.to_dict()


async def check_interactions(request: Request, list_id: str) -> Dict[str, Any]:
    """Run the interaction analysis over every medication in the list."""
    medications = _get_list(request, list_id)
    try:
        await _service(request).check(medications)
    except HealthAIError as exc:
        raise http_error(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return medications.to_dict()
