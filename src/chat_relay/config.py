from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def _env(name: str, default: str | None = None) -> str | None:
    # Empty values count as unset, so a blank line in .env falls back to the default.
    return os.getenv(name) or default


class Settings(BaseModel):
    # Project root (repo root in local dev, /app in Docker)
    project_root: Path = PROJECT_ROOT

    # Database URL:
    # - Default for local dev: sqlite file in the project root (chat_relay.db)
    # - Override in Docker / production using the DATABASE_URL env var
    database_url: str = Field(
        default_factory=lambda: _env("DATABASE_URL", f"sqlite:///{PROJECT_ROOT / 'chat_relay.db'}")
    )

    # --- Completion API (OPENAI_API_KEY is read by the SDK itself) ---
    openai_model: str = Field(default_factory=lambda: _env("OPENAI_MODEL", "gpt-4o-mini"))

    # --- Z-API settings for outbound messages ---
    zapi_base_url: str | None = Field(default_factory=lambda: _env("ZAPI_BASE_URL"))
    zapi_token: str = Field(default_factory=lambda: _env("ZAPI_TOKEN", ""))
    zapi_timeout: float = Field(default_factory=lambda: float(_env("ZAPI_TIMEOUT", "10.0")))

    # --- Server ---
    host: str = Field(default_factory=lambda: _env("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(_env("PORT", "3000")))
    log_level: str = Field(default_factory=lambda: _env("LOG_LEVEL", "INFO"))

    admin_token: str | None = Field(default_factory=lambda: _env("ADMIN_TOKEN"))

    def model_post_init(self, __context: object) -> None:  # type: ignore[override]
        if self.zapi_base_url:
            object.__setattr__(self, "zapi_base_url", self.zapi_base_url.rstrip("/"))


@lru_cache
def get_settings() -> Settings:
    return Settings()
