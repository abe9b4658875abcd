"""FastAPI routes for chat sessions."""

import logging

from fastapi import APIRouter, HTTPException, Request

from controllers.session_controller import (
	cancel_request,
	delete_session,
	get_session,
	reset_session,
	start_session,
)
from utils.errors import INTERNAL_ERROR

LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/chat/sessions")


@router.post("")
async def start_session_route(request: Request):
	try:
		return await start_session(request)
	except HTTPException:
		raise
	except Exception:
		LOGGER.exception("Unhandled error on %s", request.url.path)
		raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.get("/{session_id}")
async def get_session_route(request: Request, session_id: str):
	return await get_session(request, session_id)


@router.post("/{session_id}/reset")
async def reset_session_route(request: Request, session_id: str):
	try:
		return await reset_session(request, session_id)
	except HTTPException:
		raise
	except Exception:
		LOGGER.exception("Unhandled error on %s", request.url.path)
		raise HTTPException(status_code=500, detail=INTERNAL_ERROR)


@router.post("/{session_id}/cancel")
async def cancel_request_route(request: Request, session_id: str):
	return await cancel_request(request, session_id)


@router.delete("/{session_id}")
async def delete_session_route(request: Request, session_id: str):
	return await delete_session(request, session_id)
