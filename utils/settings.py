"""
utils/settings.py
────────────────────────────────────────────
Laufzeitkonfiguration für Social Deep-Link QR.

Alle Werte kommen aus Umgebungsvariablen (.env wird in main.py
per python-dotenv geladen). Es gibt keine Konfigurationsdatei.
────────────────────────────────────────────
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_QR_API_URL = "https://api.qrserver.com/v1/create-qr-code/"


@dataclass(frozen=True)
class Settings:
    qr_source: str = "remote"           # "remote" (qrserver.com) oder "local" (qrcode)
    qr_api_url: str = DEFAULT_QR_API_URL
    fetch_timeout: float = 10.0
    fetch_retries: int = 1
    export_size: int = 1024
    preview_size: int = 200


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    return int(raw) if raw not in (None, "") else default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    return float(raw) if raw not in (None, "") else default


def get_settings() -> Settings:
    """Liest die aktuelle Konfiguration aus der Umgebung."""
    return Settings(
        qr_source=os.getenv("QR_SOURCE", "remote").strip().lower(),
        qr_api_url=os.getenv("QR_API_URL", DEFAULT_QR_API_URL),
        fetch_timeout=_float_env("QR_FETCH_TIMEOUT", 10.0),
        # höchstens ein erneuter Versuch
        fetch_retries=max(0, min(_int_env("QR_FETCH_RETRIES", 1), 1)),
        export_size=_int_env("QR_EXPORT_SIZE", 1024),
        preview_size=_int_env("QR_PREVIEW_SIZE", 200),
    )
