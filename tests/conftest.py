import sys, os
from io import BytesIO
from typing import List

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport
from PIL import Image

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from main import app
from routes.social_links import get_qr_source
from utils.qr_source import EXPORT_PROFILE, LocalQrSource, QrProfile, QrSource


def png_bytes(size=(40, 40), color=(255, 0, 0, 255), mode="RGBA") -> bytes:
    buf = BytesIO()
    Image.new(mode, size, color).save(buf, format="PNG")
    return buf.getvalue()


class FakeQrSource(QrSource):
    """Liefert ein einfarbiges Bild und zählt die Abrufe."""

    def __init__(self, color=(0, 0, 0), size=None) -> None:
        self.color = color
        self.size = size
        self.calls: List[tuple] = []

    async def fetch_qr(self, payload: str, size_px: int, profile: QrProfile = EXPORT_PROFILE) -> Image.Image:
        self.calls.append((payload, size_px, profile))
        return Image.new("RGB", self.size or (size_px, size_px), self.color)


@pytest.fixture
def fake_source():
    return FakeQrSource()


@pytest_asyncio.fixture
async def client():
    """Testclient mit lokalem QR-Renderer statt externem Dienst."""
    app.dependency_overrides[get_qr_source] = lambda: LocalQrSource()
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_qr_source, None)
