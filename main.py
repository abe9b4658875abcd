import inspect
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from openai import AsyncOpenAI

from routes.analysis_route import router as analysis_router
from routes.chat_ws import router as chat_ws_router
from routes.medication_route import router as medication_router
from routes.session_route import router as session_router
from services.chat.chat_streamer import ChatStreamer
from services.chat.session_store import SessionStore
from services.medication_service import MedicationStore
from utils.settings import Settings, load_settings

LOGGER = logging.getLogger(__name__)


async def _close_client(client) -> None:
    """Close the OpenAI client if it exposes a close/aclose method."""
    aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
    if aclose is None:
        return
    try:
        result = aclose()
        if inspect.isawaitable(result):
            await result
    except Exception as exc:
        # Shutdown errors must not mask the reason the app is stopping.
        LOGGER.warning("Error while closing OpenAI client: %s", exc)


def create_app(openai_client: Optional[AsyncOpenAI] = None, settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.

    An injected `openai_client` is used as-is and left open on shutdown;
    otherwise one is created from OPENAI_API_KEY during startup.
    """
    settings = settings or load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Lifespan manager to initialize:
          - the OpenAI async client
          - the in-memory chat session and medication list stores
        and attach them to `app.state`.
        """
        owns_client = openai_client is None
        client = openai_client
        if client is None:
            if not settings.openai_api_key:
                raise RuntimeError("OPENAI_API_KEY environment variable is not set")
            try:
                client = AsyncOpenAI(api_key=settings.openai_api_key)
            except Exception as exc:
                raise RuntimeError("Failed to initialize OpenAI Async client") from exc

        app.state.settings = settings
        app.state.openai_client = client
        app.state.session_store = SessionStore(
            ChatStreamer(client, model=settings.chat_model),
            history_limit=settings.chat_history_limit,
        )
        app.state.medication_store = MedicationStore()

        try:
            yield
        finally:
            for session_id in app.state.session_store.list_ids():
                app.state.session_store.get(session_id).cancel()
            if owns_client:
                await _close_client(client)

    app = FastAPI(title="HealthAI Orchestrator", lifespan=lifespan)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that verifies the OpenAI client and stores are present.
        """
        has_openai = getattr(request.app.state, "openai_client", None) is not None
        has_sessions = getattr(request.app.state, "session_store", None) is not None
        return {"ok": True, "openai_available": has_openai, "sessions_available": has_sessions}

    # Register application routers
    app.include_router(analysis_router)
    app.include_router(medication_router)
    app.include_router(session_router)
    app.include_router(chat_ws_router)

    return app


app = create_app()
