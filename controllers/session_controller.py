"""Session lifecycle helpers for streaming chat."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException, Request

from services.chat.chat_session import ChatSession
from services.chat.session_store import SessionStore


def _get_session(request: Request, session_id: str) -> ChatSession:
	store: SessionStore = request.app.state.session_store
	try:
		return store.get(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc


async def start_session(request: Request) -> Dict[str, Any]:
	"""Create a new chat session and return its id."""
	store: SessionStore = request.app.state.session_store
	return store.create().snapshot()


async def get_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Return the transcript and request status of a session."""
	return _get_session(request, session_id).snapshot()


async def reset_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Cancel any in-flight reply and clear the transcript."""
	session = _get_session(request, session_id)
	session.reset()
	return session.snapshot()


async def cancel_request(request: Request, session_id: str) -> Dict[str, Any]:
	"""Cancel the in-flight reply, if any."""
	session = _get_session(request, session_id)
	cancelled = session.cancel()
	return {"session_id": session_id, "cancelled": cancelled}


async def delete_session(request: Request, session_id: str) -> Dict[str, Any]:
	store: SessionStore = request.app.state.session_store
	try:
		store.delete(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc.args[0])) from exc
	return {"session_id": session_id, "deleted": True}
