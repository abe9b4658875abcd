"""Stream assistant replies from OpenAI's Responses API."""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Sequence

from openai import AsyncOpenAI

from services.chat.prompts import chat_system_prompt
from utils.errors import StreamTransportError

LOGGER = logging.getLogger(__name__)

TEXT_DELTA_EVENT = "response.output_text.delta"
FAILURE_EVENTS = {"error", "response.failed"}


def build_chat_inputs(text: str, history: Sequence[Dict[str, str]]) -> List[Dict[str, Any]]:
	"""Return the system prompt, prior turns in order, and the current user text."""
	inputs: List[Dict[str, Any]] = [{"role": "system", "content": chat_system_prompt()}]
	inputs.extend({"role": turn["role"], "content": turn["content"]} for turn in history)
	inputs.append({"role": "user", "content": text})
	return inputs


class ChatStreamer:
	"""Yield text fragments for one user turn, in arrival order."""

	def __init__(self, client: AsyncOpenAI, *, model: str = "gpt-5-mini") -> None:
		if client is None:
			raise ValueError("AsyncOpenAI client is required.")
		self.client = client
		self.model = model

	async def stream(self, text: str, history: Sequence[Dict[str, str]]) -> AsyncIterator[str]:
		"""Yield output text deltas until the response ends.

		Closing the generator (or cancelling the task consuming it) exits the
		stream context, which closes the underlying HTTP response.

		Raises:
			StreamTransportError: If the request fails or the stream reports an error.
		"""
		inputs = build_chat_inputs(text, history)
		try:
			async with self.client.responses.stream(model=self.model, input=inputs) as stream:
				async for event in stream:
					event_type = getattr(event, "type", None)
					if event_type == TEXT_DELTA_EVENT:
						delta = getattr(event, "delta", "") or ""
						if delta:
							yield delta
					elif event_type in FAILURE_EVENTS:
						raise StreamTransportError(detail=f"Stream reported {event_type}")
		except StreamTransportError:
			raise
		except Exception as exc:
			LOGGER.error("OpenAI streaming request failed: %s", exc)
			raise StreamTransportError(detail=str(exc)) from exc
