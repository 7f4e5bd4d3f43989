# =============================================================================
# 🚀 Social Deep-Link QR – Hauptapplikation (main.py)
# =============================================================================

from __future__ import annotations
import logging
from pathlib import Path

from fastapi import FastAPI

from dotenv import load_dotenv

# -------------------------------------------------------------------------
# 1️⃣ .env laden (muss ganz oben sein!)
# -------------------------------------------------------------------------
env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=env_path)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# -------------------------------------------------------------------------
# 2️⃣ FastAPI App
# -------------------------------------------------------------------------
app = FastAPI(title="Social Deep-Link QR", version="1.0")

# -------------------------------------------------------------------------
# 3️⃣ Routen laden
# -------------------------------------------------------------------------
from routes import social_links

app.include_router(social_links.router)
