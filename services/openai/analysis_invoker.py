"""Structured analysis calls against OpenAI's Responses API.

Each analyzer makes a single attempt. Transport failures and replies that do
not match the analyzer's schema raise distinct errors so they can be told
apart in the logs, while both show the same retry message to the user.
"""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from models.analysis_models import MedicalImageAnalysis, MedicineAnalysis, TextAnalysis
from services.openai import analysis_prompts as prompts
from services.openai.analysis_schema import (
    MEDICAL_IMAGE_FUNCTION,
    MEDICAL_IMAGE_FUNCTION_NAME,
    MEDICINE_FUNCTION,
    MEDICINE_FUNCTION_NAME,
)
from services.openai.media_inputs import build_inputs, to_image_data_url
from services.openai.response_parser import extract_text, extract_usage, parse_function_call
from utils.errors import AnalysisParseError, AnalysisTransportError

LOGGER = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

MEDICAL_IMAGE_FAILURE = "Failed to analyze medical image. Please try again."
MEDICINE_FAILURE = "Failed to analyze medicine. Please try again."
INTERACTION_FAILURE = "Error analyzing medications. Please try again."
TERM_FAILURE = "Error explaining term. Please try again."


class AnalysisInvoker:
    """Send validated inputs to the model and parse the replies into records."""

    def __init__(self, client: AsyncOpenAI, *, model: str = "gpt-5") -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model

    async def analyze_medical_image(
        self,
        image_b64: bytes,
        *,
        mime_type: str = "image/jpeg",
        context: Optional[str] = None,
    ) -> MedicalImageAnalysis:
        """Return the structured analysis of a medical image."""
        inputs = build_inputs(
            prompts.medical_image_system_prompt(),
            prompts.medical_image_user_prompt(bool(context)),
            context=context,
            image_url=to_image_data_url(image_b64, mime_type),
        )
        return await self._structured(
            inputs, MEDICAL_IMAGE_FUNCTION, MedicalImageAnalysis, failure_message=MEDICAL_IMAGE_FAILURE
        )

    async def analyze_medicine(
        self,
        image_b64: bytes,
        *,
        mime_type: str = "image/jpeg",
        context: Optional[str] = None,
    ) -> MedicineAnalysis:
        """Return the structured description of a medicine photo."""
        inputs = build_inputs(
            prompts.medicine_system_prompt(),
            prompts.medicine_user_prompt(bool(context)),
            context=context,
            image_url=to_image_data_url(image_b64, mime_type),
        )
        return await self._structured(inputs, MEDICINE_FUNCTION, MedicineAnalysis, failure_message=MEDICINE_FAILURE)

    async def check_interactions(self, names: Sequence[str]) -> TextAnalysis:
        """Return a Markdown interaction report for one or more medications."""
        if not names:
            raise ValueError("Please enter at least one medication to analyze.")
        inputs = build_inputs(prompts.interaction_system_prompt(), prompts.interaction_user_prompt(names))
        return await self._text(inputs, "drug_interaction", failure_message=INTERACTION_FAILURE)

    async def explain_term(self, term: str) -> TextAnalysis:
        """Return a plain-language Markdown explanation of a medical term."""
        inputs = build_inputs(prompts.term_system_prompt(), prompts.term_user_prompt(term))
        return await self._text(inputs, "term_explanation", failure_message=TERM_FAILURE)

    async def _structured(
        self,
        inputs: List[Dict[str, Any]],
        tool: Dict[str, Any],
        record_type: Type[RecordT],
        *,
        failure_message: str,
    ) -> RecordT:
        tool_name = tool["name"]
        response = await self._create_response(
            inputs,
            failure_message=failure_message,
            tools=[tool],
            tool_choice={"type": "function", "name": tool_name},
        )
        try:
            args = parse_function_call(response, tool_name=tool_name)
            return record_type.model_validate(args)
        except (ValueError, ValidationError) as exc:
            LOGGER.error("Reply for %s does not match %s: %s", tool_name, record_type.__name__, exc)
            raise AnalysisParseError(failure_message, detail=str(exc)) from exc

    async def _text(self, inputs: List[Dict[str, Any]], kind: str, *, failure_message: str) -> TextAnalysis:
        response = await self._create_response(inputs, failure_message=failure_message)
        try:
            return TextAnalysis(kind=kind, content=extract_text(response).strip())
        except ValidationError as exc:
            LOGGER.error("Empty %s reply from OpenAI: %s", kind, exc)
            raise AnalysisParseError(failure_message, detail=str(exc)) from exc

    async def _create_response(self, inputs: List[Dict[str, Any]], *, failure_message: str, **kwargs: Any) -> Any:
        """Send one request to the Responses API; no retries."""
        start = time.time()
        try:
            response = await self.client.responses.create(model=self.model, input=inputs, **kwargs)
        except Exception as exc:
            LOGGER.error("Error during OpenAI Responses API call: %s", exc)
            raise AnalysisTransportError(failure_message, detail=str(exc)) from exc
        usage = extract_usage(response)
        LOGGER.info(
            "Analysis call finished in %.3fs (input_tokens=%s, output_tokens=%s)",
            time.time() - start,
            usage["input_tokens"],
            usage["output_tokens"],
        )
        return response
