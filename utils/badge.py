# =============================================================================
# 🏷️ Badge-Renderer – Social Deep-Link QR
# -----------------------------------------------------------------------------
# Erzeugt das quadratische Badge (Plattform-Glyph oder eigenes Logo) auf
# einem weißen Hintergrund mit abgerundeten Ecken.
#
#   Logo-Größe L, Innenabstand p = 10 % von L, Gesamtgröße T = L + 2p,
#   Eckradius = 20 % von T. Der Hintergrund ist immer deckend weiß.
# =============================================================================

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from dataclasses import dataclass
from io import BytesIO
from typing import List, Optional, Tuple, Union

from PIL import Image, ImageChops, ImageColor, ImageDraw, UnidentifiedImageError
from svg.path import Close, Line, Move, parse_path

from utils.errors import BadgeDecodeFailed
from utils.platforms import PlatformId, describe, parse_platform

logger = logging.getLogger(__name__)

PADDING_RATIO = 0.1
CORNER_RATIO = 0.2
GLYPH_VIEWBOX = 24.0
SUPERSAMPLE = 4
CURVE_STEPS = 16


# ---------------------------------------------------------------------------
# 🧩 Badge-Varianten
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DefaultGlyph:
    platform: PlatformId

    def __post_init__(self) -> None:
        object.__setattr__(self, "platform", parse_platform(self.platform))


@dataclass(frozen=True)
class CustomImage:
    data: bytes

    @classmethod
    def from_data_url(cls, data_url: str) -> "CustomImage":
        """Erstellt ein CustomImage aus einer data:-URL (base64)."""
        header, sep, encoded = data_url.partition(",")
        if not sep or not header.startswith("data:") or ";base64" not in header:
            raise BadgeDecodeFailed("Logo ist keine base64-data-URL")
        try:
            return cls(base64.b64decode(encoded, validate=True))
        except (binascii.Error, ValueError) as exc:
            raise BadgeDecodeFailed("Logo-data-URL ist nicht dekodierbar") from exc


BadgeSpec = Optional[Union[DefaultGlyph, CustomImage]]


def badge_geometry(logo_size: int) -> Tuple[int, int, int]:
    """Gibt (padding, gesamtgröße, eckradius) für eine Logo-Größe zurück."""
    padding = round(logo_size * PADDING_RATIO)
    total = logo_size + 2 * padding
    radius = round(total * CORNER_RATIO)
    return padding, total, radius


# ---------------------------------------------------------------------------
# ✏️ SVG-Pfad → Maske
# ---------------------------------------------------------------------------

def _path_polygons(path_data: str, scale: float) -> List[List[Tuple[float, float]]]:
    polygons: List[List[Tuple[float, float]]] = []
    current: List[Tuple[float, float]] = []

    for segment in parse_path(path_data):
        if isinstance(segment, Move):
            if len(current) >= 3:
                polygons.append(current)
            current = [(segment.end.real * scale, segment.end.imag * scale)]
            continue
        if not current:
            current.append((segment.start.real * scale, segment.start.imag * scale))
        if isinstance(segment, (Line, Close)):
            current.append((segment.end.real * scale, segment.end.imag * scale))
        else:
            for step in range(1, CURVE_STEPS + 1):
                point = segment.point(step / CURVE_STEPS)
                current.append((point.real * scale, point.imag * scale))

    if len(current) >= 3:
        polygons.append(current)
    return polygons


def _glyph_mask(path_data: str, size: int) -> Image.Image:
    """Rastert einen 24×24-SVG-Pfad (even-odd) als L-Maske der Größe size."""
    big = size * SUPERSAMPLE
    polygons = _path_polygons(path_data, big / GLYPH_VIEWBOX)
    if not polygons:
        raise BadgeDecodeFailed("Glyph-Pfad enthält keine Fläche")

    mask = Image.new("L", (big, big), 0)
    for polygon in polygons:
        layer = Image.new("L", (big, big), 0)
        ImageDraw.Draw(layer).polygon(polygon, fill=255)
        mask = ImageChops.difference(mask, layer)

    return mask.resize((size, size), Image.Resampling.LANCZOS)


def _render_glyph(platform: PlatformId, logo_size: int) -> Image.Image:
    descriptor = describe(platform)
    try:
        mask = _glyph_mask(descriptor.glyph_path, logo_size)
    except (ValueError, IndexError) as exc:
        raise BadgeDecodeFailed(f"Glyph für {platform.value} konnte nicht gerastert werden") from exc

    glyph = Image.new("RGBA", (logo_size, logo_size), ImageColor.getrgb(descriptor.brand_color) + (0,))
    glyph.putalpha(mask)
    return glyph


def _decode_custom(data: bytes, logo_size: int) -> Image.Image:
    try:
        logo = Image.open(BytesIO(data))
        logo.load()
        logo = logo.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise BadgeDecodeFailed("Logo konnte nicht dekodiert werden") from exc

    # bewusst ohne Seitenverhältnis: exakt L × L
    return logo.resize((logo_size, logo_size), Image.Resampling.LANCZOS)


# ---------------------------------------------------------------------------
# 🏷️ Hauptfunktion
# ---------------------------------------------------------------------------

def render_badge(spec: BadgeSpec, target_size_px: int) -> Optional[Image.Image]:
    """
    Rendert das Badge als RGBA-Patch der Größe (L + 2p) × (L + 2p),
    wobei L = target_size_px. Gibt None zurück, wenn kein Badge gewünscht ist.
    """
    if spec is None:
        return None
    if target_size_px <= 0:
        raise ValueError("target_size_px muss positiv sein")

    if isinstance(spec, DefaultGlyph):
        logo = _render_glyph(spec.platform, target_size_px)
    elif isinstance(spec, CustomImage):
        logo = _decode_custom(spec.data, target_size_px)
    else:
        raise TypeError(f"Unbekannter Badge-Typ: {type(spec).__name__}")

    padding, total, radius = badge_geometry(target_size_px)
    badge = Image.new("RGBA", (total, total), (255, 255, 255, 0))
    ImageDraw.Draw(badge).rounded_rectangle(
        (0, 0, total - 1, total - 1), radius=radius, fill=(255, 255, 255, 255)
    )
    badge.alpha_composite(logo, dest=(padding, padding))
    return badge


async def render_badge_async(spec: BadgeSpec, target_size_px: int) -> Optional[Image.Image]:
    """render_badge in einem Worker-Thread."""
    return await asyncio.to_thread(render_badge, spec, target_size_px)
