"""
utils/qr_source.py
────────────────────────────────────────────
QR-Quelle: liefert das QR-Rasterbild für einen Payload.

- QrServerSource: externer Render-Dienst (api.qrserver.com) über httpx
- LocalQrSource:  gleiches Profil lokal mit der qrcode-Bibliothek

Beide liefern ein PIL-Image oder werfen SourceUnavailable.
Es wird NIE ein leeres Ersatzbild zurückgegeben.
────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from io import BytesIO
from typing import Optional
from urllib.parse import quote

import httpx
import qrcode
from qrcode.constants import ERROR_CORRECT_H
from qrcode.exceptions import DataOverflowError
from PIL import Image, ImageOps, UnidentifiedImageError

from utils.errors import SourceUnavailable
from utils.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Zeichen, die encodeURIComponent unverändert lässt
_URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass(frozen=True)
class QrProfile:
    """Festes Renderprofil (weißer Hintergrund, ECC H)."""
    name: str
    size_px: int
    quiet_zone: int
    margin: int
    background: str = "FFFFFF"
    ecc: str = "H"
    image_format: str = "png"


# Vorschau: kleine Fläche, größere Ruhezone
PREVIEW_PROFILE = QrProfile(name="preview", size_px=200, quiet_zone=4, margin=2)
# Export: große Fläche, minimaler Rand
EXPORT_PROFILE = QrProfile(name="export", size_px=1024, quiet_zone=2, margin=0)


def encode_payload(payload: str) -> str:
    """Prozent-Kodierung wie encodeURIComponent."""
    return quote(payload, safe=_URI_COMPONENT_SAFE)


class QrSource(ABC):
    """Stabile Schnittstelle: (payload, size_px) -> Rasterbild."""

    @abstractmethod
    async def fetch_qr(self, payload: str, size_px: int, profile: QrProfile = EXPORT_PROFILE) -> Image.Image:
        ...


# ---------------------------------------------------------------------------
# 🌐 Externer Dienst
# ---------------------------------------------------------------------------

class QrServerSource(QrSource):
    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        retries: int = 1,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.retries = retries
        self._client = client

    def build_url(self, payload: str, size_px: int, profile: QrProfile) -> str:
        return (
            f"{self.base_url}?size={size_px}x{size_px}"
            f"&data={encode_payload(payload)}"
            f"&bgcolor={profile.background}"
            f"&format={profile.image_format}"
            f"&qzone={profile.quiet_zone}"
            f"&margin={profile.margin}"
            f"&ecc={profile.ecc}"
        )

    async def _download(self, url: str) -> bytes:
        if self._client is not None:
            response = await self._client.get(url, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url)
        response.raise_for_status()
        return response.content

    async def fetch_qr(self, payload: str, size_px: int, profile: QrProfile = EXPORT_PROFILE) -> Image.Image:
        url = self.build_url(payload, size_px, profile)
        attempts = 1 + self.retries
        content = b""

        for attempt in range(1, attempts + 1):
            try:
                content = await self._download(url)
                break
            except httpx.HTTPStatusError as exc:
                status = exc.response.status_code
                if attempt >= attempts:
                    logger.error(f"❌ QR-Dienst antwortete mit HTTP {status}")
                    raise SourceUnavailable(f"QR-Dienst antwortete mit HTTP {status}", status_code=status) from exc
                logger.warning(f"⚠️ QR-Dienst HTTP {status} (Versuch {attempt}/{attempts}) – erneuter Versuch")
            except httpx.HTTPError as exc:
                if attempt >= attempts:
                    logger.error(f"❌ QR-Dienst nicht erreichbar: {exc!r}")
                    raise SourceUnavailable(f"QR-Dienst nicht erreichbar: {exc!r}") from exc
                logger.warning(f"⚠️ QR-Abruf fehlgeschlagen (Versuch {attempt}/{attempts}): {exc!r}")

        try:
            image = Image.open(BytesIO(content))
            image.load()
        except (UnidentifiedImageError, OSError) as exc:
            logger.error("❌ Antwort des QR-Dienstes ist kein gültiges Bild")
            raise SourceUnavailable("Antwort des QR-Dienstes ist kein gültiges Bild") from exc

        return image


# ---------------------------------------------------------------------------
# 🧩 Lokaler Renderer (qrcode)
# ---------------------------------------------------------------------------

class LocalQrSource(QrSource):
    def __init__(self, box_size: int = 10) -> None:
        self.box_size = box_size

    def _render(self, payload: str, size_px: int, profile: QrProfile) -> Image.Image:
        qr = qrcode.QRCode(
            version=None,
            error_correction=ERROR_CORRECT_H,
            box_size=self.box_size,
            border=profile.quiet_zone,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color=f"#{profile.background}").convert("RGB")
        inner = max(1, size_px - 2 * profile.margin)
        img = img.resize((inner, inner), Image.Resampling.NEAREST)
        if profile.margin:
            img = ImageOps.expand(img, border=profile.margin, fill=f"#{profile.background}")
        return img

    async def fetch_qr(self, payload: str, size_px: int, profile: QrProfile = EXPORT_PROFILE) -> Image.Image:
        try:
            return await asyncio.to_thread(self._render, payload, size_px, profile)
        except (DataOverflowError, ValueError) as exc:
            logger.error(f"❌ Lokaler QR-Renderer fehlgeschlagen: {exc}")
            raise SourceUnavailable(f"QR-Code konnte nicht erzeugt werden: {exc}") from exc


def build_qr_source(settings: Optional[Settings] = None) -> QrSource:
    """Wählt die QR-Quelle anhand von QR_SOURCE."""
    settings = settings or get_settings()
    if settings.qr_source == "local":
        return LocalQrSource()
    return QrServerSource(
        base_url=settings.qr_api_url,
        timeout=settings.fetch_timeout,
        retries=settings.fetch_retries,
    )
