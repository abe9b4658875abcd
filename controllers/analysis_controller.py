from fastapi import HTTPException, Request, UploadFile
from typing import Any, Dict, Optional, Tuple

from services.analysis_pipeline import AnalysisPipeline
from services.openai.analysis_invoker import AnalysisInvoker
from services.openai.validity_gate import ValidityGate
from utils.errors import HealthAIError, http_error
from utils.media_validation import detect_image_mime, ensure_base64_image


def build_pipeline(request: Request) -> AnalysisPipeline:
    """Create the validate-then-analyze pipeline from shared app state."""
    openai_client = request.app.state.openai_client
    settings = request.app.state.settings
    gate = ValidityGate(openai_client, model=settings.validation_model)
    invoker = AnalysisInvoker(openai_client, model=settings.analysis_model)
    return AnalysisPipeline(gate, invoker)


async def read_image(file: UploadFile) -> Tuple[bytes, str]:
    """Return base64 image bytes and their MIME type, rejecting non-images.

    Args:
        file: Uploaded image, either raw bytes or a base64 / data URL body.

    Raises:
        HTTPException(400) if the upload is empty or not a readable image.
    """
    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="Please upload an image")
    image_b64 = ensure_base64_image(raw)
    try:
        mime_type = detect_image_mime(image_b64)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return image_b64, mime_type


async def precheck_medical_image(request: Request, file: UploadFile) -> Dict[str, Any]:
    """Fail-open validity check run as soon as a medical image is chosen."""
    image_b64, mime_type = await read_image(file)
    result = await build_pipeline(request).precheck_medical_image(image_b64, mime_type)
    return result.model_dump(by_alias=True)


async def analyze_medical_image(request: Request, file: UploadFile, context: Optional[str] = None) -> Dict[str, Any]:
    """Re-validate the image and, if it is still a medical image, analyze it.

    Returns:
        The MedicalImageAnalysis record as camelCase JSON under `analysis`.
    """
    image_b64, mime_type = await read_image(file)
    try:
        analysis = await build_pipeline(request).analyze_medical_image(image_b64, mime_type, context)
    except HealthAIError as exc:
        raise http_error(exc) from exc
    return {"analysis": analysis.model_dump(by_alias=True)}


async def precheck_medicine(request: Request, file: UploadFile) -> Dict[str, Any]:
    """Fail-open validity check run as soon as a medicine photo is chosen."""
    image_b64, mime_type = await read_image(file)
    result = await build_pipeline(request).precheck_medicine(image_b64, mime_type)
    return result.model_dump(by_alias=True)


async def analyze_medicine(request: Request, file: UploadFile, context: Optional[str] = None) -> Dict[str, Any]:
    """Re-validate the medicine photo and, if still valid, describe the medicine."""
    image_b64, mime_type = await read_image(file)
    try:
        analysis = await build_pipeline(request).analyze_medicine(image_b64, mime_type, context)
    except HealthAIError as exc:
        raise http_error(exc) from exc
    return {"analysis": analysis.model_dump(by_alias=True)}


async def explain_term(request: Request, term: str) -> Dict[str, Any]:
    """Validate a medical term and return its plain-language explanation."""
    try:
        explanation = await build_pipeline(request).explain_term(term)
    except HealthAIError as exc:
        raise http_error(exc) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"term": term.strip(), "explanation": explanation.content}
