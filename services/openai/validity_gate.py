"""Validity gate: cheap domain checks that run before an expensive analysis.

The gate exposes two named steps on purpose. `precheck` runs as soon as an
input arrives and is fail-open: if the validation service is unreachable the
caller may proceed. `checkpoint` runs again immediately before the analysis
and is fail-closed, because the input may have changed since the precheck.
Results are never cached between calls.
"""

import logging
from typing import Any, Optional

from openai import AsyncOpenAI
from pydantic import ValidationError

from models.analysis_models import ValidationResult
from services.openai.media_inputs import build_inputs, to_image_data_url
from services.openai.response_parser import parse_function_call
from services.openai.validation_profiles import (
    VALIDATION_FUNCTION,
    VALIDATION_FUNCTION_NAME,
    ValidationProfile,
)
from utils.errors import ValidationRejected, ValidationTransportError

LOGGER = logging.getLogger(__name__)

PRECHECK_SKIPPED_MESSAGE = "Validation is temporarily unavailable; the input will be checked again before analysis."


class ValidityGate:
    """Classify text or base64 images against a `ValidationProfile`."""

    def __init__(self, client: AsyncOpenAI, *, model: str = "gpt-5-mini") -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.model = model

    async def validate(
        self,
        profile: ValidationProfile,
        payload: Any,
        *,
        mime_type: str = "image/jpeg",
    ) -> ValidationResult:
        """Run one validity call.

        Raises:
            ValidationTransportError: If the call fails or its reply cannot be read.
        """
        inputs = self._build_inputs(profile, payload, mime_type)
        try:
            response = await self.client.responses.create(
                model=self.model,
                input=inputs,
                tools=[VALIDATION_FUNCTION],
                tool_choice={"type": "function", "name": VALIDATION_FUNCTION_NAME},
            )
        except Exception as exc:
            LOGGER.error("Validation request for %s failed: %s", profile.name, exc)
            raise ValidationTransportError(detail=str(exc)) from exc

        try:
            args = parse_function_call(response, tool_name=VALIDATION_FUNCTION_NAME)
            return ValidationResult.model_validate(args)
        except (ValueError, ValidationError) as exc:
            LOGGER.error("Unreadable validation reply for %s: %s", profile.name, exc)
            raise ValidationTransportError(detail=str(exc)) from exc

    async def precheck(
        self,
        profile: ValidationProfile,
        payload: Any,
        *,
        mime_type: str = "image/jpeg",
    ) -> ValidationResult:
        """Validate as soon as an input is supplied; transport failures let the input through."""
        try:
            return await self.validate(profile, payload, mime_type=mime_type)
        except ValidationTransportError as exc:
            LOGGER.warning("Pre-check for %s skipped after failure: %s", profile.name, exc.detail)
            return ValidationResult(is_valid=True, message=PRECHECK_SKIPPED_MESSAGE)

    async def checkpoint(
        self,
        profile: ValidationProfile,
        payload: Any,
        *,
        mime_type: str = "image/jpeg",
    ) -> ValidationResult:
        """Validate right before analysis; anything but a valid result raises.

        Raises:
            ValidationRejected: If the input is invalid or could not be validated.
        """
        try:
            result = await self.validate(profile, payload, mime_type=mime_type)
        except ValidationTransportError as exc:
            raise ValidationRejected(
                profile.unavailable_message,
                accepted_categories=profile.accepted_categories,
                detail=exc.detail,
            ) from exc

        if not result.is_valid:
            LOGGER.info("Checkpoint rejected %s input: %s", profile.name, result.message)
            raise ValidationRejected(
                profile.rejection_message(result.message),
                accepted_categories=profile.accepted_categories,
            )
        return result

    @staticmethod
    def _build_inputs(profile: ValidationProfile, payload: Any, mime_type: str) -> list:
        image_url: Optional[str] = None
        if profile.input_kind == "image":
            image_url = to_image_data_url(payload, mime_type)
            user_prompt = profile.user_prompt()
        else:
            user_prompt = profile.user_prompt(str(payload))
        return build_inputs(profile.system_prompt(), user_prompt, image_url=image_url)
