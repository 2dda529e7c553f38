from __future__ import annotations

import io

import pytest
from PIL import Image

from models import SourceBitmap

RED = (255, 0, 0)


def png_bytes(width: int, height: int, color=RED) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def make_bitmap():
    def _make(width: int = 80, height: int = 60, color=RED) -> SourceBitmap:
        return SourceBitmap.from_pil(Image.new("RGB", (width, height), color))

    return _make
