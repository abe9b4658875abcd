"""FastAPI routes for the validate-then-analyze features."""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from pydantic import BaseModel

from controllers import analysis_controller
from utils.errors import INTERNAL_ERROR

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["analysis"])


class TermPayload(BaseModel):
    term: str


@router.post("/medical-image/validate")
async def validate_medical_image(request: Request, image: UploadFile = File(...)):
    """Check whether the upload looks like a medical image; never blocks on validator outages."""
    try:
        return await analysis_controller.precheck_medical_image(request, image)
    except HTTPException:
        raise
    except Exception:
        LOGGER.exception("Unhandled error on %s", request.url.path)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/medical-image/analyze")
async def analyze_medical_image(
    request: Request, image: UploadFile = File(...), context: Optional[str] = Form(None)
):
    """Analyze an X-ray, CT, MRI, ultrasound, or ECG image with optional patient context."""
    try:
        return await analysis_controller.analyze_medical_image(request, image, context)
    except HTTPException:
        raise
    except Exception:
        LOGGER.exception("Unhandled error on %s", request.url.path)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/medicine/validate")
async def validate_medicine(request: Request, image: UploadFile = File(...)):
    try:
        return await analysis_controller.precheck_medicine(request, image)
    except HTTPException:
        raise
    except Exception:
        LOGGER.exception("Unhandled error on %s", request.url.path)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/medicine/analyze")
async def analyze_medicine(request: Request, image: UploadFile = File(...), context: Optional[str] = Form(None)):
    """Identify a medicine from a photo of its packaging, pills, or label."""
    try:
        return await analysis_controller.analyze_medicine(request, image, context)
    except HTTPException:
        raise
    except Exception:
        LOGGER.exception("Unhandled error on %s", request.url.path)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/terms/explain")
async def explain_term(request: Request, payload: TermPayload):
    try:
        return await analysis_controller.explain_term(request, payload.term)
    except HTTPException:
        raise
    except Exception:
        LOGGER.exception("Unhandled error on %s", request.url.path)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR)
