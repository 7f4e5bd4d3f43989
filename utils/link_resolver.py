"""
utils/link_resolver.py
────────────────────────────────────────────
Erzeugt aus Plattform + Handle das Link-Paar (App-Deep-Link und Web-Link).

- reine Funktion, kein Cache, kein Zustand
- Handle wird NICHT prozent-kodiert
- einzige Normalisierung: führendes "@" bei TikTok (ergänzen)
  und X (erstes "@" entfernen)
────────────────────────────────────────────
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Union

from utils.errors import InvalidPlatform
from utils.platforms import PlatformId, parse_platform


class OsVariant(str, Enum):
    ANDROID = "android"
    IOS = "ios"


class LinkType(str, Enum):
    DEEP = "deep"
    WEB = "web"


@dataclass(frozen=True)
class LinkPair:
    deep_link: str
    web_link: str

    def for_type(self, link_type: Union[str, LinkType]) -> str:
        return self.deep_link if LinkType(link_type) is LinkType.DEEP else self.web_link


# ---------------------------------------------------------------------------
# 🔗 Builder pro Plattform
# ---------------------------------------------------------------------------

def _instagram(handle: str, os_variant: OsVariant) -> LinkPair:
    return LinkPair(
        deep_link=f"instagram://user?username={handle}",
        web_link=f"https://instagram.com/{handle}",
    )


def _facebook(handle: str, os_variant: OsVariant) -> LinkPair:
    segment = "page" if os_variant is OsVariant.ANDROID else "profile"
    return LinkPair(
        deep_link=f"fb://{segment}/{handle}",
        web_link=f"https://facebook.com/{handle}",
    )


def _tiktok(handle: str, os_variant: OsVariant) -> LinkPair:
    handle = handle if handle.startswith("@") else "@" + handle
    return LinkPair(
        deep_link=f"tiktok://{handle}",
        web_link=f"https://tiktok.com/{handle}",
    )


def _x(handle: str, os_variant: OsVariant) -> LinkPair:
    handle = handle.replace("@", "", 1)
    return LinkPair(
        deep_link=f"twitter://user?screen_name={handle}",
        web_link=f"https://x.com/{handle}",
    )


_BUILDERS: Dict[PlatformId, Callable[[str, OsVariant], LinkPair]] = {
    PlatformId.INSTAGRAM: _instagram,
    PlatformId.FACEBOOK: _facebook,
    PlatformId.TIKTOK: _tiktok,
    PlatformId.X: _x,
}

# Jede Plattform braucht einen Builder
assert set(_BUILDERS) == set(PlatformId), "Link-Builder fehlen für neue Plattform"


def resolve(
    platform: Union[str, PlatformId],
    raw_handle: str,
    os_variant: Union[str, OsVariant] = OsVariant.ANDROID,
) -> LinkPair:
    """
    Baut Deep-Link und Web-Link für ein Handle.
    Wirft nur InvalidPlatform, nie wegen des Handle-Inhalts.
    """
    platform_id = parse_platform(platform)
    builder = _BUILDERS.get(platform_id)
    if builder is None:
        raise InvalidPlatform(platform)
    return builder(raw_handle, OsVariant(os_variant))


def artifact_filename(
    platform: Union[str, PlatformId],
    handle: str,
    link_type: Union[str, LinkType],
    ext: str = "png",
) -> str:
    """Dateiname des Downloads: <plattform>_<handle>_<deep|web>_qr.<ext>"""
    platform_id = parse_platform(platform)
    return f"{platform_id.value}_{handle}_{LinkType(link_type).value}_qr.{ext}"
