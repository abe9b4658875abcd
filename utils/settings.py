"""Typed settings loaded from environment variables (and `.env` when present)."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    openai_api_key: str = Field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    analysis_model: str = Field(default_factory=lambda: os.getenv("OPENAI_MODEL", "gpt-5"))
    validation_model: str = Field(default_factory=lambda: os.getenv("OPENAI_VALIDATION_MODEL", "gpt-5-mini"))
    chat_model: str = Field(default_factory=lambda: os.getenv("OPENAI_CHAT_MODEL", "gpt-5-mini"))
    transcribe_model: str = Field(default_factory=lambda: os.getenv("OPENAI_TRANSCRIBE_MODEL", "whisper-1"))
    chat_history_limit: int = Field(default_factory=lambda: int(os.getenv("CHAT_HISTORY_LIMIT", "20")), ge=0)
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


def load_settings() -> Settings:
    """Load `.env` (if any) and return a fresh Settings instance."""
    load_dotenv()
    return Settings()
