"""Utilities to build input payloads for the Responses API."""

import logging
from typing import Any, Dict, List, Optional

LOGGER = logging.getLogger(__name__)


def to_image_data_url(image_b64: bytes | str, mime_type: str = "image/jpeg") -> str:
    """Convert base64 image bytes into a data URL suitable for vision input."""
    if isinstance(image_b64, bytes):
        try:
            image_b64 = image_b64.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValueError("Image bytes must be base64-encoded UTF-8.") from exc
    return f"data:{mime_type};base64,{image_b64}"


def text_message(role: str, text: str) -> Dict[str, Any]:
    """Return a single input message carrying one text part."""
    return {"type": "message", "role": role, "content": [{"type": "input_text", "text": text}]}


def image_message(image_url: str) -> Dict[str, Any]:
    """Return a user input message carrying one image part."""
    return {"type": "message", "role": "user", "content": [{"type": "input_image", "image_url": image_url}]}


def build_inputs(
    system_prompt: str,
    user_prompt: str,
    *,
    context: Optional[str] = None,
    image_url: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Build the Responses API input array with each modality as its own entry."""
    inputs: List[Dict[str, Any]] = [
        text_message("system", system_prompt),
        text_message("user", user_prompt),
    ]
    if context:
        LOGGER.debug("Additional context attached (%d chars)", len(context))
        inputs.append(text_message("user", f"Additional context from the user: {context}"))
    if image_url:
        inputs.append(image_message(image_url))
    return inputs
