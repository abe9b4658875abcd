"""Dispatch chat websocket events to the session and push session events back."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Dict, Optional

from fastapi import WebSocket

from services.chat.chat_session import ChatSession
from services.chat.dictation_transcriber import DictationTranscriber
from utils.errors import HealthAIError, SessionBusyError

LOGGER = logging.getLogger(__name__)

UNEXPECTED_ERROR = "Something went wrong. Please try again."
TEXT_REQUIRED = "Message text is required."


class ChatSocketHandler:
	"""Route websocket messages for one chat session.

	Replies and session events share one outbox so the client sees them in
	the order they happened.
	"""

	def __init__(self, session: ChatSession, transcriber: DictationTranscriber) -> None:
		self.session = session
		self.transcriber = transcriber
		self._outbox: asyncio.Queue = asyncio.Queue()
		self._unsubscribe: Optional[Callable[[], None]] = None
		self._pump: Optional[asyncio.Task] = None

	def open(self, websocket: WebSocket) -> None:
		"""Start forwarding session events to the websocket."""
		self._unsubscribe = self.session.subscribe(self._outbox.put_nowait)
		self._pump = asyncio.create_task(self._drain(websocket))
		self._outbox.put_nowait({"type": "session.snapshot", **self.session.snapshot()})

	async def close(self) -> None:
		if self._unsubscribe is not None:
			self._unsubscribe()
		if self._pump is not None:
			self._pump.cancel()
			await asyncio.wait({self._pump})

	async def handle(self, payload: Dict[str, Any]) -> None:
		"""Process a single inbound websocket payload."""
		request_id = payload.get("request_id")
		message_type = payload.get("type")
		try:
			if message_type == "message.send":
				result = self._send_message(payload)
			elif message_type == "message.edit":
				result = self._edit_message(payload)
			elif message_type == "request.cancel":
				result = {"type": "request.cancel.ack", "cancelled": self.session.cancel()}
			elif message_type == "dictation.audio":
				result = await self._transcribe(payload)
			else:
				raise ValueError("Unsupported message type.")
		except HealthAIError as exc:
			result = self._error(exc.user_message)
		except KeyError as exc:
			result = self._error(str(exc.args[0]) if exc.args else "Not found")
		except (ValueError, RuntimeError) as exc:
			result = self._error(str(exc))
		except Exception:
			LOGGER.exception("Unhandled %r frame in session %s", message_type, self.session.session_id)
			result = self._error(UNEXPECTED_ERROR)
		result["request_id"] = request_id
		self._outbox.put_nowait(result)

	def _send_message(self, payload: Dict[str, Any]) -> Dict[str, Any]:
		if self.session.in_flight:
			raise SessionBusyError()
		text = payload.get("text")
		if text is None:
			text = self.session.take_draft()
		if not isinstance(text, str):
			raise ValueError(TEXT_REQUIRED)
		handle = self.session.submit(text)
		if handle is None:
			raise ValueError(TEXT_REQUIRED)
		return {"type": "request.started", "handle_id": handle.request_id, "message_id": handle.message_id}

	def _edit_message(self, payload: Dict[str, Any]) -> Dict[str, Any]:
		message_id = payload.get("message_id") or ""
		text = payload.get("text")
		if not isinstance(message_id, str) or not isinstance(text, str):
			raise ValueError("Edits need a message_id and the new text.")
		handle = self.session.edit_message(message_id, text)
		return {"type": "request.started", "handle_id": handle.request_id, "message_id": handle.message_id}

	async def _transcribe(self, payload: Dict[str, Any]) -> Dict[str, Any]:
		audio_b64 = payload.get("audio_b64") or ""
		if not audio_b64:
			raise ValueError("Audio payload is required for dictation.")
		transcript = await self.transcriber.transcribe(audio_b64, payload.get("mime_type") or "audio/webm")
		draft = self.session.append_dictation(transcript)
		return {"type": "dictation.transcript", "text": transcript, "draft": draft}

	def send_error(self, detail: str, request_id: Any = None) -> None:
		"""Queue an error frame behind any pending session events."""
		self._outbox.put_nowait({**self._error(detail), "request_id": request_id})

	@staticmethod
	def _error(detail: str) -> Dict[str, Any]:
		return {"type": "error", "detail": detail}

	async def _drain(self, websocket: WebSocket) -> None:
		while True:
			event = await self._outbox.get()
			try:
				await websocket.send_text(json.dumps(event))
			except Exception as exc:
				LOGGER.warning("Dropping chat event for session %s: %s", self.session.session_id, exc)
				return
