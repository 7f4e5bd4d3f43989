# routes/social_links.py
# =============================================================================
# 🚀 Social Deep-Link QR Routes
# -----------------------------------------------------------------------------
# Dünne HTTP-Schicht um den Kern: Plattformen auflisten, Link-Paar
# erzeugen, QR-Bild (Vorschau oder Export) als PNG-Download liefern.
# Nichts wird gespeichert.
# =============================================================================

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel

from utils.badge import BadgeSpec, CustomImage, DefaultGlyph
from utils.errors import BadgeDecodeFailed, InvalidPlatform, SourceUnavailable
from utils.link_resolver import LinkType, OsVariant, resolve
from utils.platforms import PlatformId, describe, list_platforms, parse_platform
from utils.qr_composer import export_link, preview_link
from utils.qr_source import QrSource, build_qr_source
from utils.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/social", tags=["Social Deep Links"])

ALLOWED_LOGO_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif"}


class PlatformOut(BaseModel):
    id: str
    name: str
    input_label: str
    placeholder: str
    instructions: str
    color: str


class LinksOut(BaseModel):
    platform: str
    handle: str
    os: str
    deep_link: str
    web_link: str


def get_qr_source() -> QrSource:
    """Dependency – in Tests per dependency_overrides austauschbar."""
    return build_qr_source()


def _platform_or_400(value: str) -> PlatformId:
    try:
        return parse_platform(value)
    except InvalidPlatform:
        raise HTTPException(status_code=400, detail=f"Unbekannte Plattform: {value}")


def _os_or_400(value: str) -> OsVariant:
    try:
        return OsVariant(value.strip().lower())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unbekanntes Betriebssystem: {value}")


async def _badge_from_form(
    platform: PlatformId,
    badge: str,
    logo: Optional[UploadFile],
    logo_data_url: str,
) -> BadgeSpec:
    """Baut die BadgeSpec erst, wenn das Logo vollständig gelesen ist."""
    badge = badge.strip().lower()
    if badge in ("", "none"):
        return None
    if badge == "default":
        return DefaultGlyph(platform)
    if badge != "custom":
        raise HTTPException(status_code=400, detail=f"Unbekannter Badge-Typ: {badge}")

    if logo is not None and logo.filename:
        ext = Path(logo.filename).suffix.lower()
        if ext not in ALLOWED_LOGO_EXTENSIONS:
            raise HTTPException(status_code=400, detail=f"Logo-Format nicht erlaubt: {ext}")
        return CustomImage(await logo.read())
    if logo_data_url:
        try:
            return CustomImage.from_data_url(logo_data_url)
        except BadgeDecodeFailed as exc:
            raise HTTPException(status_code=422, detail=str(exc))
    raise HTTPException(status_code=400, detail="Für badge=custom ist ein Logo erforderlich")


@router.get("/platforms", response_model=List[PlatformOut])
def platforms() -> List[PlatformOut]:
    """Alle unterstützten Plattformen mit Formularhinweisen."""
    result = []
    for platform_id in list_platforms():
        d = describe(platform_id)
        result.append(
            PlatformOut(
                id=platform_id.value,
                name=d.display_name,
                input_label=d.input_label,
                placeholder=d.placeholder,
                instructions=d.instruction_text,
                color=d.brand_color,
            )
        )
    return result


@router.post("/links", response_model=LinksOut)
def create_links(
    platform: str = Form(...),
    handle: str = Form(...),
    os: str = Form("android"),
) -> LinksOut:
    """Erzeugt Deep-Link und Web-Link für ein Handle."""
    platform_id = _platform_or_400(platform)
    os_variant = _os_or_400(os)
    links = resolve(platform_id, handle, os_variant)
    return LinksOut(
        platform=platform_id.value,
        handle=handle,
        os=os_variant.value,
        deep_link=links.deep_link,
        web_link=links.web_link,
    )


@router.post("/qr/{link_type}")
async def download_qr(
    link_type: str,
    platform: str = Form(...),
    handle: str = Form(...),
    os: str = Form("android"),
    badge: str = Form("none"),
    preview: bool = Form(False),
    logo_data_url: str = Form(""),
    logo: Optional[UploadFile] = File(None),
    source: QrSource = Depends(get_qr_source),
) -> Response:
    """Liefert das QR-Bild als PNG-Download (<plattform>_<handle>_<typ>_qr.png)."""
    try:
        kind = LinkType(link_type)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unbekannter Link-Typ: {link_type}")

    platform_id = _platform_or_400(platform)
    os_variant = _os_or_400(os)
    badge_spec = await _badge_from_form(platform_id, badge, logo, logo_data_url)
    links = resolve(platform_id, handle, os_variant)
    settings = get_settings()

    try:
        if preview:
            filename, image = await preview_link(
                links, kind, platform_id, handle, badge_spec, size_px=settings.preview_size, source=source
            )
        else:
            filename, image = await export_link(
                links, kind, platform_id, handle, badge_spec, size_px=settings.export_size, source=source
            )
    except SourceUnavailable as exc:
        logger.error(f"❌ QR-Export fehlgeschlagen ({platform_id.value}/{kind.value}): {exc}")
        raise HTTPException(status_code=502, detail="QR-Dienst nicht erreichbar")
    except BadgeDecodeFailed as exc:
        logger.error(f"❌ Badge fehlerhaft ({platform_id.value}/{kind.value}): {exc}")
        raise HTTPException(status_code=422, detail="Logo konnte nicht verarbeitet werden")

    disposition = "inline" if preview else "attachment"
    return Response(
        content=image.png_bytes,
        media_type=image.media_type,
        headers={"Content-Disposition": f"{disposition}; filename*=UTF-8''{quote(filename)}"},
    )
