"""Validation helpers for uploaded images and dictation audio."""

import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError

ALLOWED_AUDIO_TYPES = {
    "audio/wav",
    "audio/x-wav",
    "audio/webm",
    "audio/mpeg",
    "audio/mp3",
    "audio/mp4",
    "audio/aac",
    "audio/ogg",
    "audio/opus",
    "audio/flac",
}

INVALID_IMAGE_MESSAGE = "Please upload a valid image file"


def ensure_base64_image(raw: bytes) -> bytes:
    """Return base64-encoded image bytes, encoding binary input when necessary.

    Text input is treated as base64 already; a `data:` URL prefix is stripped.
    """
    try:
        text = raw.decode("utf-8").strip()
    except UnicodeDecodeError:
        return base64.b64encode(raw)
    if text.startswith("data:") and "," in text:
        text = text.split(",", 1)[1]
    return text.encode("utf-8")


def detect_image_mime(image_b64: bytes) -> str:
    """Return the MIME type of base64 image data.

    Raises:
        ValueError: If the data is not base64 or does not decode to an image Pillow can read.
    """
    if not image_b64:
        raise ValueError(INVALID_IMAGE_MESSAGE)
    try:
        raw = base64.b64decode(image_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(INVALID_IMAGE_MESSAGE) from exc

    try:
        with Image.open(io.BytesIO(raw)) as image:
            image.verify()
            image_format = image.format
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise ValueError(INVALID_IMAGE_MESSAGE) from exc

    mime_type = Image.MIME.get(image_format or "")
    if not mime_type or not mime_type.startswith("image/"):
        raise ValueError(INVALID_IMAGE_MESSAGE)
    return mime_type


def normalize_audio_mime(mime_type: str) -> str:
    """Strip MIME parameters (e.g. 'audio/webm;codecs=opus') and check the type is supported."""
    mime = (mime_type or "").lower().split(";", 1)[0].strip()
    if mime not in ALLOWED_AUDIO_TYPES:
        raise ValueError(f"Unsupported audio content type: {mime_type}")
    return mime
