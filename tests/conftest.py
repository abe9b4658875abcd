from __future__ import annotations

import base64

import pytest

from _openai_fakes import make_png


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def png_b64(png_bytes) -> bytes:
    return base64.b64encode(png_bytes)
