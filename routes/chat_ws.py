"""WebSocket endpoint for streaming chat, cancellation, edits, and dictation."""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, HTTPException, WebSocket
from starlette.websockets import WebSocketDisconnect

from services.chat.dictation_transcriber import DictationTranscriber
from services.chat.session_store import SessionStore
from services.chat.ws_session import ChatSocketHandler

router = APIRouter()


def _require_session_store(websocket: WebSocket) -> SessionStore:
	store = getattr(websocket.app.state, "session_store", None)
	if store is None:
		raise HTTPException(status_code=500, detail="Session store unavailable")
	return store


@router.websocket("/ws/chat/{session_id}")
async def chat_socket(websocket: WebSocket, session_id: str, store: SessionStore = Depends(_require_session_store)):
	"""Stream assistant replies for one chat session over a websocket."""
	await websocket.accept()
	try:
		session = store.get(session_id)
	except KeyError:
		await websocket.send_text(json.dumps({"type": "error", "detail": "Session not found"}))
		await websocket.close()
		return

	settings = websocket.app.state.settings
	transcriber = DictationTranscriber(websocket.app.state.openai_client, model=settings.transcribe_model)
	handler = ChatSocketHandler(session, transcriber)
	handler.open(websocket)
	try:
		while True:
			try:
				raw = await websocket.receive_text()
			except WebSocketDisconnect:
				break
			try:
				payload = json.loads(raw)
			except json.JSONDecodeError:
				handler.send_error("Payload must be JSON")
				continue
			if not isinstance(payload, dict):
				handler.send_error("Payload must be a JSON object")
				continue
			await handler.handle(payload)
	finally:
		await handler.close()
