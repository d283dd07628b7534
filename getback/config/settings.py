"""Runtime settings snapshot resolved from the environment."""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}
_DEFAULT_DB_PATH = Path("data") / "getback.sqlite3"
_DEFAULT_SPARKPOST_URL = "https://api.sparkpost.com/api/v1/transmissions"


def _is_enabled(value: str | None) -> bool:
    return bool(value and value.strip().lower() in _TRUTHY)


def _is_configured(value: str | None) -> bool:
    return bool(value and value.strip())


class GetBackSettings(BaseModel):
    store_backend: str = Field(default="sqlite")
    db_path: Path = Field(default=_DEFAULT_DB_PATH)
    destinations_file: Path | None = None
    production: bool = False
    mail_debug: bool = False
    sparkpost_api_key: str | None = None
    sparkpost_url: str = Field(default=_DEFAULT_SPARKPOST_URL)
    mail_from: str = Field(default="noreply@getback.local")
    api_bearer_token: str | None = None
    allow_unauthenticated_api: bool = False
    enable_docs: bool = False
    enable_diagnostics: bool = False
    diagnostics_token: str | None = None
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @property
    def mail_enabled(self) -> bool:
        return (self.production or self.mail_debug) and _is_configured(self.sparkpost_api_key)


def resolve_store_backend() -> str:
    mode = str(os.getenv("GETBACK_STORE_BACKEND") or "").strip().lower()
    if mode in {"sqlite", "memory"}:
        return mode
    return "sqlite"


def resolve_settings() -> GetBackSettings:
    raw_db = str(os.getenv("GETBACK_DB_PATH") or "").strip()
    raw_destinations = str(os.getenv("GETBACK_DESTINATIONS_FILE") or "").strip()
    raw_origins = str(os.getenv("CORS_ORIGINS") or "*")
    return GetBackSettings(
        store_backend=resolve_store_backend(),
        db_path=Path(raw_db) if raw_db else _DEFAULT_DB_PATH,
        destinations_file=Path(raw_destinations) if raw_destinations else None,
        production=_is_enabled(os.getenv("GETBACK_PRODUCTION")),
        mail_debug=_is_enabled(os.getenv("GETBACK_MAIL_DEBUG")),
        sparkpost_api_key=os.getenv("SPARKPOST_API_KEY") or None,
        sparkpost_url=os.getenv("GETBACK_SPARKPOST_URL") or _DEFAULT_SPARKPOST_URL,
        mail_from=os.getenv("GETBACK_MAIL_FROM") or "noreply@getback.local",
        api_bearer_token=os.getenv("API_BEARER_TOKEN") or None,
        allow_unauthenticated_api=_is_enabled(os.getenv("ALLOW_UNAUTHENTICATED_API")),
        enable_docs=_is_enabled(os.getenv("ENABLE_DOCS")),
        enable_diagnostics=_is_enabled(os.getenv("ENABLE_DIAGNOSTICS")),
        diagnostics_token=os.getenv("DIAGNOSTICS_TOKEN") or None,
        cors_origins=[origin.strip() for origin in raw_origins.split(",") if origin.strip()],
    )


__all__ = ["GetBackSettings", "resolve_settings", "resolve_store_backend"]
