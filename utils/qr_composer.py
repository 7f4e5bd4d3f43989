"""
utils/qr_composer.py
────────────────────────────────────────────
Zentrale QR-Komposition für Social Deep-Link QR.

Ablauf pro Aufruf (immer neu, kein Cache):
  1. QR-Bild von der QR-Quelle laden (genau ein Abruf)
  2. weiße Fläche malen, QR seitenverhältnistreu zentrieren
  3. optional Badge (20 % der Kantenlänge) mittig darüberlegen
  4. als PNG serialisieren

Gibt ein ComposedImage mit den PNG-Bytes zurück.
────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Awaitable, Callable, Optional, Tuple, Union

from PIL import Image

from utils.badge import BadgeSpec, badge_geometry, render_badge_async
from utils.link_resolver import LinkPair, LinkType, artifact_filename
from utils.platforms import PlatformId, parse_platform
from utils.qr_source import EXPORT_PROFILE, PREVIEW_PROFILE, QrProfile, QrSource, build_qr_source

logger = logging.getLogger(__name__)

BADGE_RATIO = 0.2

BadgeRenderer = Callable[[BadgeSpec, int], Awaitable[Optional[Image.Image]]]


@dataclass(frozen=True)
class ComposeRequest:
    uri: str
    platform: PlatformId
    badge: BadgeSpec = None
    size_px: int = EXPORT_PROFILE.size_px
    profile: QrProfile = EXPORT_PROFILE


@dataclass(frozen=True)
class ComposedImage:
    png_bytes: bytes
    width: int
    height: int
    badge_box: Optional[Tuple[int, int, int, int]] = None
    media_type: str = "image/png"


def _fit_centered(image: Image.Image, size_px: int) -> Tuple[Image.Image, Tuple[int, int]]:
    """Skaliert seitenverhältnistreu auf size_px und liefert (bild, position)."""
    scale = min(size_px / image.width, size_px / image.height)
    width = max(1, round(image.width * scale))
    height = max(1, round(image.height * scale))
    scaled = image.resize((width, height), Image.Resampling.NEAREST)
    return scaled, ((size_px - width) // 2, (size_px - height) // 2)


def _to_png(canvas: Image.Image) -> bytes:
    buffer = BytesIO()
    canvas.save(buffer, format="PNG")
    return buffer.getvalue()


async def compose(
    uri: str,
    platform: Union[str, PlatformId],
    badge: BadgeSpec,
    size_px: int,
    profile: Optional[QrProfile] = None,
    source: Optional[QrSource] = None,
    badge_renderer: Optional[BadgeRenderer] = None,
) -> ComposedImage:
    """
    Erstellt das fertige QR-Bild (PNG) für einen Link.
    SourceUnavailable und BadgeDecodeFailed werden unverändert weitergereicht.
    """
    platform_id = parse_platform(platform)
    profile = profile or EXPORT_PROFILE
    source = source or build_qr_source()
    renderer = badge_renderer or render_badge_async

    # 1️⃣ QR-Bild laden
    qr_image = await source.fetch_qr(uri, size_px, profile)

    # 2️⃣ weiße Fläche + QR zentriert
    canvas = Image.new("RGB", (size_px, size_px), (255, 255, 255))
    qr_rgba = qr_image.convert("RGBA")
    scaled, position = _fit_centered(qr_rgba, size_px)
    canvas.paste(scaled, position, scaled)

    # 3️⃣ Badge mittig darüber
    badge_box = None
    if badge is not None:
        logo_size = round(size_px * BADGE_RATIO)
        patch = await renderer(badge, logo_size)
        if patch is not None:
            padding, total, _ = badge_geometry(logo_size)
            start = (size_px - total) // 2
            canvas.paste(patch, (start, start), patch)
            inner = start + padding
            badge_box = (inner, inner, inner + logo_size, inner + logo_size)

    # 4️⃣ PNG serialisieren
    png_bytes = await asyncio.to_thread(_to_png, canvas)

    logger.info(f"✅ QR-Bild erstellt: {platform_id.value}, {size_px}px, Profil={profile.name}")
    return ComposedImage(png_bytes=png_bytes, width=size_px, height=size_px, badge_box=badge_box)


async def compose_request(
    request: ComposeRequest,
    source: Optional[QrSource] = None,
    badge_renderer: Optional[BadgeRenderer] = None,
) -> ComposedImage:
    return await compose(
        request.uri,
        request.platform,
        request.badge,
        request.size_px,
        profile=request.profile,
        source=source,
        badge_renderer=badge_renderer,
    )


async def export_link(
    links: LinkPair,
    link_type: Union[str, LinkType],
    platform: Union[str, PlatformId],
    handle: str,
    badge: BadgeSpec = None,
    size_px: int = EXPORT_PROFILE.size_px,
    source: Optional[QrSource] = None,
) -> Tuple[str, ComposedImage]:
    """Export-Bild (großes Profil) plus Dateiname für den Download."""
    link_type = LinkType(link_type)
    image = await compose(
        links.for_type(link_type), platform, badge, size_px, profile=EXPORT_PROFILE, source=source
    )
    return artifact_filename(platform, handle, link_type), image


async def preview_link(
    links: LinkPair,
    link_type: Union[str, LinkType],
    platform: Union[str, PlatformId],
    handle: str,
    badge: BadgeSpec = None,
    size_px: int = PREVIEW_PROFILE.size_px,
    source: Optional[QrSource] = None,
) -> Tuple[str, ComposedImage]:
    """Vorschau-Bild (kleines Profil, größere Ruhezone)."""
    link_type = LinkType(link_type)
    image = await compose(
        links.for_type(link_type), platform, badge, size_px, profile=PREVIEW_PROFILE, source=source
    )
    return artifact_filename(platform, handle, link_type), image
