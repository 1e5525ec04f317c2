"""Pytest configuration - shared watermark fixtures and default-source reset."""
from __future__ import annotations

import io

import pytest
from PIL import Image

from tile_avatar.image.watermark import WatermarkError, set_watermark_source


class FakeWatermarkSource:
    """In-memory watermark provider that counts loads."""

    def __init__(self, image: Image.Image):
        self.image = image
        self.calls = 0

    async def aload(self) -> Image.Image:
        self.calls += 1
        return self.image.copy()


class FailingWatermarkSource:
    """Provider that simulates an unreachable watermark."""

    def __init__(self):
        self.calls = 0

    async def aload(self) -> Image.Image:
        self.calls += 1
        raise WatermarkError("simulated network error")


@pytest.fixture
def white_watermark():
    """Opaque white watermark, larger than the placement box."""
    return Image.new("RGBA", (600, 360), (255, 255, 255, 255))


@pytest.fixture
def clear_watermark():
    """Fully transparent watermark (draws nothing, casts no shadow)."""
    return Image.new("RGBA", (300, 180), (0, 0, 0, 0))


@pytest.fixture
def watermark_png_bytes(white_watermark):
    buffer = io.BytesIO()
    white_watermark.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def fake_source(white_watermark):
    return FakeWatermarkSource(white_watermark)


@pytest.fixture
def failing_source():
    return FailingWatermarkSource()


@pytest.fixture(autouse=True)
def reset_default_watermark_source():
    yield
    set_watermark_source(None)
