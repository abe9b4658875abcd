import logging

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers import medication_controller
from utils.errors import INTERNAL_ERROR

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api/medications", tags=["medications"])


class MedicationPayload(BaseModel):
    name: str


@router.post("")
async def create_medication_list(request: Request):
    return await medication_controller.create_list(request)


@router.get("/{list_id}")
async def get_medication_list(request: Request, list_id: str):
    return await medication_controller.get_list(request, list_id)


@router.delete("/{list_id}")
async def delete_medication_list(request: Request, list_id: str):
    return await medication_controller.delete_list(request, list_id)


@router.post("/{list_id}/items")
async def add_medication(request: Request, list_id: str, payload: MedicationPayload):
    """Add a medication name; duplicates and non-medications are rejected."""
    try:
        return await medication_controller.add_medication(request, list_id, payload.name)
    except HTTPException:
        raise
    except Exception:
        LOGGER.exception("Unhandled error on %s", request.url.path)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.delete("/{list_id}/items/{index}")
async def remove_medication(request: Request, list_id: str, index: int):
    return await medication_controller.remove_medication(request, list_id, index)


@router.post("/{list_id}/interactions")
async def check_interactions(request: Request, list_id: str):
    """Generate the interaction report for the current medication list."""
    try:
        return await medication_controller.check_interactions(request, list_id)
    except HTTPException:
        raise
    except Exception:
        LOGGER.exception("Unhandled error on %s", request.url.path)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)
