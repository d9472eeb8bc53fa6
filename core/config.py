from __future__ import annotations

import os

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

# The automation trigger expects a bounded wait; not meant to be tuned per deploy.
WEBHOOK_TIMEOUT_SECONDS = 10.0
USER_AGENT = "Quote-Generator/1.0"


def _csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


class Settings(BaseModel):
    app_name: str = "Lazope Construction - Quote Generator"
    environment: str = os.getenv("ENVIRONMENT", "dev")

    # n8n first, generic name as fallback
    webhook_url: str = os.getenv("N8N_WEBHOOK_URL") or os.getenv("WEBHOOK_URL", "")
    quote_prefix: str = os.getenv("QUOTE_PREFIX", "LZQ")

    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    cors_origins: list[str] = _csv(os.getenv("CORS_ORIGINS", "*"))

    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8000"))
    reload: bool = os.getenv("RELOAD", "1") == "1"


settings = Settings()
