"""Transcribe dictated audio for the chat input."""

from __future__ import annotations

import base64
import binascii
import logging

from openai import AsyncOpenAI

from utils.media_validation import normalize_audio_mime

LOGGER = logging.getLogger(__name__)

_EXTENSIONS = {
	"audio/webm": "webm",
	"audio/wav": "wav",
	"audio/x-wav": "wav",
	"audio/mpeg": "mp3",
	"audio/mp3": "mp3",
	"audio/mp4": "mp4",
	"audio/aac": "m4a",
	"audio/ogg": "oga",
	"audio/opus": "ogg",
	"audio/flac": "flac",
}


def filename_for_mime(mime_type: str) -> str:
	"""Return a filename whose extension the transcription service accepts.

	Raises:
		ValueError: If the MIME type is not a supported audio format.
	"""
	return f"dictation.{_EXTENSIONS[normalize_audio_mime(mime_type)]}"


class DictationTranscriber:
	"""Convert base64 audio chunks into text transcripts."""

	def __init__(self, client: AsyncOpenAI, *, model: str = "whisper-1") -> None:
		if client is None:
			raise ValueError("AsyncOpenAI client is required.")
		self.client = client
		self.model = model

	async def transcribe(self, audio_b64: str, mime_type: str = "audio/webm") -> str:
		"""Return a whitespace-trimmed transcript for the provided audio chunk."""
		filename = filename_for_mime(mime_type)
		try:
			audio_bytes = base64.b64decode(audio_b64, validate=True)
		except (binascii.Error, ValueError) as exc:
			raise ValueError("Audio payload must be base64-encoded.") from exc
		if not audio_bytes:
			raise ValueError("Audio payload is required for dictation.")

		try:
			response = await self.client.audio.transcriptions.create(
				model=self.model,
				file=(filename, audio_bytes),
				response_format="text",
			)
		except Exception as exc:
			LOGGER.error("OpenAI transcription request failed: %s", exc)
			raise RuntimeError("Transcription failed. Please try again.") from exc

		if not isinstance(response, str):
			response = getattr(response, "text", "") or ""
		return response.strip()
