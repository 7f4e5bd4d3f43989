# =============================================================================
# ⚠️ Fehlerklassen – Social Deep-Link QR
# -----------------------------------------------------------------------------
# SourceUnavailable und BadgeDecodeFailed werden vom Kern nie geschluckt,
# sondern an den Aufrufer (z. B. routes/social_links.py) weitergereicht.
# =============================================================================

from __future__ import annotations


class DeepLinkQrError(Exception):
    """Basisklasse aller Fehler des QR-Kerns."""


class SourceUnavailable(DeepLinkQrError):
    """QR-Bild konnte nicht geladen werden (Netzwerk, Timeout, HTTP-Status, Dekodierung)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class BadgeDecodeFailed(DeepLinkQrError):
    """Badge (Logo oder Plattform-Glyph) konnte nicht dekodiert/gerastert werden."""


class InvalidPlatform(DeepLinkQrError, ValueError):
    """Plattform liegt außerhalb der festen Aufzählung – Programmierfehler."""

    def __init__(self, platform: object) -> None:
        super().__init__(f"Unbekannte Plattform: {platform!r}")
        self.platform = platform
