"""Simple in-memory store for chat sessions."""

from __future__ import annotations

from typing import Dict, List

from services.chat.chat_session import ChatSession, Streamer


class SessionStore:
	"""Create, look up, and discard chat sessions sharing one streamer."""

	def __init__(self, streamer: Streamer, *, history_limit: int = 20) -> None:
		self.streamer = streamer
		self.history_limit = history_limit
		self._sessions: Dict[str, ChatSession] = {}

	def create(self) -> ChatSession:
		"""Create a new, empty session."""
		session = ChatSession(self.streamer, history_limit=self.history_limit)
		self._sessions[session.session_id] = session
		return session

	def get(self, session_id: str) -> ChatSession:
		"""Return a session or raise KeyError if missing."""
		session = self._sessions.get(session_id)
		if session is None:
			raise KeyError(f"Session {session_id} not found")
		return session

	def delete(self, session_id: str) -> None:
		"""Cancel any in-flight request and forget the session."""
		session = self.get(session_id)
		session.cancel()
		del self._sessions[session_id]

	def list_ids(self) -> List[str]:
		return list(self._sessions)
