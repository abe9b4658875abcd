"""Streaming chat session: transcript, single-flight requests, cancel, and edit.

All mutation happens on the event loop. Requests run as asyncio tasks, and
every write a task makes is guarded by its handle's liveness flag, so a
cancelled or superseded request can never touch the transcript again.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextlib import aclosing
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Protocol, Sequence
from uuid import uuid4

from models.session_models import ChatMessage, SessionStatus
from services.chat.request_handle import RequestHandle
from utils.errors import SessionBusyError

LOGGER = logging.getLogger(__name__)

FAILURE_NOTICE = "⚠️ Sorry, I encountered an error. Please try again."
CANCELLED_MARKER = "❌ Response cancelled"

SessionListener = Callable[[Dict[str, Any]], None]


class Streamer(Protocol):
	def stream(self, text: str, history: Sequence[Dict[str, str]]) -> AsyncIterator[str]: ...


class ChatSession:
	"""Own one conversation transcript and at most one in-flight request."""

	def __init__(
		self,
		streamer: Streamer,
		*,
		session_id: Optional[str] = None,
		history_limit: int = 20,
	) -> None:
		self.session_id = session_id or uuid4().hex
		self.streamer = streamer
		self.history_limit = history_limit
		self.messages: List[ChatMessage] = []
		self.status = SessionStatus.IDLE
		self.last_outcome: Optional[SessionStatus] = None
		self.draft = ""
		self.created_at = time.time()
		self._handle: Optional[RequestHandle] = None
		self._listeners: List[SessionListener] = []

	@property
	def in_flight(self) -> bool:
		return self._handle is not None

	def subscribe(self, listener: SessionListener) -> Callable[[], None]:
		"""Register a callback for session events; returns an unsubscribe function."""
		self._listeners.append(listener)

		def unsubscribe() -> None:
			if listener in self._listeners:
				self._listeners.remove(listener)

		return unsubscribe

	def submit(self, text: str) -> Optional[RequestHandle]:
		"""Append a user turn and start streaming the reply.

		Returns None, without touching the transcript, when the trimmed text is
		empty or a request is already in flight.
		"""
		content = (text or "").strip()
		if not content:
			return None
		if self.in_flight:
			LOGGER.info("Session %s rejected a submission while busy", self.session_id)
			return None

		history = self._history(self.messages)
		message = ChatMessage(role="user", content=content)
		self.messages.append(message)
		self._emit_message(message)
		return self._start(content, history)

	def edit_message(self, message_id: str, new_content: str) -> RequestHandle:
		"""Rewrite a past user turn, drop everything after it, and regenerate.

		Raises:
			SessionBusyError: If a request is in flight.
			KeyError: If no message has `message_id`.
			ValueError: If the message is not a user turn or the new content is empty.
		"""
		if self.in_flight:
			raise SessionBusyError()
		content = (new_content or "").strip()
		if not content:
			raise ValueError("Edited message cannot be empty.")
		index = self._index_of(message_id)
		message = self.messages[index]
		if message.role != "user":
			raise ValueError("Only user messages can be edited.")

		dropped = len(self.messages) - index - 1
		del self.messages[index + 1:]
		message.content = content
		message.created_at = time.time()
		LOGGER.info("Session %s edited message %s, discarded %d later messages", self.session_id, message_id, dropped)
		self._emit_transcript()
		return self._start(content, self._history(self.messages[:index]))

	def cancel(self) -> bool:
		"""Stop the in-flight request, keeping any partial reply. No-op when idle."""
		handle = self._handle
		if handle is None:
			return False
		handle.cancel()
		self._handle = None
		message = self._find(handle.message_id)
		if message is not None:
			if not message.content:
				message.content = CANCELLED_MARKER
			message.streaming = False
			self._emit_message(message)
		self._finish(handle, SessionStatus.CANCELLED)
		return True

	def reset(self) -> None:
		"""Start a new session: cancel any request and clear the transcript and draft."""
		self.cancel()
		self.messages.clear()
		self.draft = ""
		self.last_outcome = None
		self._emit_transcript()

	def append_dictation(self, transcript: str) -> str:
		"""Add a final dictation transcript to the draft input and return the draft."""
		text = (transcript or "").strip()
		if text:
			self.draft += text + " "
		return self.draft

	def take_draft(self) -> str:
		draft, self.draft = self.draft, ""
		return draft

	def snapshot(self) -> Dict[str, Any]:
		return {
			"session_id": self.session_id,
			"status": self.status.value,
			"last_outcome": self.last_outcome.value if self.last_outcome else None,
			"draft": self.draft,
			"messages": [message.to_dict() for message in self.messages],
		}

	def _start(self, content: str, history: List[Dict[str, str]]) -> RequestHandle:
		placeholder = ChatMessage(role="assistant", content="", streaming=True)
		self.messages.append(placeholder)
		handle = RequestHandle(placeholder.id)
		self._handle = handle
		self.status = SessionStatus.SENDING
		self._emit_message(placeholder)
		handle.attach(asyncio.create_task(self._run(handle, content, history)))
		return handle

	async def _run(self, handle: RequestHandle, content: str, history: List[Dict[str, str]]) -> None:
		chunks: List[str] = []
		try:
			async with aclosing(self.streamer.stream(content, history)) as fragments:
				async for chunk in fragments:
					if not handle.alive:
						LOGGER.debug("Dropping chunk for inactive request %s", handle.request_id)
						return
					chunks.append(chunk)
					message = self._find(handle.message_id)
					if message is None:
						return
					message.content = "".join(chunks)
					self.status = SessionStatus.STREAMING
					self._emit_message(message)
		except asyncio.CancelledError:
			if handle.alive:
				# Cancelled from outside the session (e.g. loop shutdown).
				self._fail(handle)
			raise
		except Exception as exc:
			if handle.alive:
				LOGGER.error("Streaming request %s failed: %s", handle.request_id, exc)
				self._fail(handle)
			return

		if handle.alive:
			message = self._find(handle.message_id)
			if message is not None:
				message.streaming = False
				self._emit_message(message)
			self._handle = None
			self._finish(handle, SessionStatus.COMPLETED)

	def _fail(self, handle: RequestHandle) -> None:
		self._handle = None
		placeholder = self._find(handle.message_id)
		if placeholder is not None:
			self.messages.remove(placeholder)
			self._emit({"type": "message.removed", "message_id": placeholder.id})
		notice = ChatMessage(role="assistant", content=FAILURE_NOTICE)
		self.messages.append(notice)
		self._emit_message(notice)
		self._finish(handle, SessionStatus.FAILED)

	def _finish(self, handle: RequestHandle, outcome: SessionStatus) -> None:
		handle.retire()
		self.status = outcome
		self.last_outcome = outcome
		self._emit(
			{
				"type": "request.finished",
				"handle_id": handle.request_id,
				"message_id": handle.message_id,
				"status": outcome.value,
			}
		)
		self.status = SessionStatus.IDLE

	def _history(self, messages: Sequence[ChatMessage]) -> List[Dict[str, str]]:
		turns = [
			{"role": message.role, "content": message.content}
			for message in messages
			if message.content and not message.streaming
		]
		if self.history_limit:
			turns = turns[-self.history_limit:]
		return turns

	def _index_of(self, message_id: str) -> int:
		for index, message in enumerate(self.messages):
			if message.id == message_id:
				return index
		raise KeyError(f"Message {message_id} not found")

	def _find(self, message_id: str) -> Optional[ChatMessage]:
		for message in self.messages:
			if message.id == message_id:
				return message
		return None

	def _emit_message(self, message: ChatMessage) -> None:
		self._emit({"type": "message.updated", "message": message.to_dict()})

	def _emit_transcript(self) -> None:
		self._emit({"type": "transcript.reset", "messages": [message.to_dict() for message in self.messages]})

	def _emit(self, event: Dict[str, Any]) -> None:
		for listener in list(self._listeners):
			listener(event)
