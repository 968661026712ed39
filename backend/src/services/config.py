"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_MONGODB_URI = "mongodb://127.0.0.1:27017/notely"
DEFAULT_FRONTEND_DIST = PROJECT_ROOT / "dist"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    mongodb_uri: str = Field(
        default=DEFAULT_MONGODB_URI,
        description="MongoDB connection string (database name taken from the path)",
    )
    mongodb_database: str = Field(
        default="notely",
        description="Database used when the URI carries no database name",
    )
    mongodb_collection: str = Field(default="docs", description="Collection holding note documents")
    gemini_api_key: Optional[str] = Field(
        default=None,
        description="Google Gemini API key (AI endpoints fail without it)",
    )
    gemini_model: str = Field(
        default="gemini-2.5-flash-lite",
        description="Model used for inline and enhance actions",
    )
    gemini_chat_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used for side-panel chat",
    )
    allow_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="CORS origins parsed from ALLOW_ORIGIN",
    )
    firebase_service_account: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Parsed FIREBASE_SERVICE_ACCOUNT_JSON; enables ID token verification",
    )
    port: int = Field(default=3000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    max_upload_bytes: int = Field(default=DEFAULT_MAX_UPLOAD_BYTES, ge=1)
    frontend_dist: Path = Field(default=DEFAULT_FRONTEND_DIST, description="Built SPA directory")

    @field_validator("allow_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: str | list[str] | None) -> list[str]:
        if value is None:
            return ["*"]
        if isinstance(value, str):
            value = value.split(",")
        origins = [origin.strip() for origin in value if origin and origin.strip()]
        return origins or ["*"]

    @field_validator("firebase_service_account", mode="before")
    @classmethod
    def _parse_service_account(cls, value: str | Dict[str, Any] | None) -> Optional[Dict[str, Any]]:
        if value is None or isinstance(value, dict):
            return value
        cleaned = value.strip()
        if not cleaned:
            return None
        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ValueError(f"FIREBASE_SERVICE_ACCOUNT_JSON is not valid JSON: {exc}") from exc
        if not isinstance(parsed, dict):
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_JSON must be a JSON object")
        return parsed

    @field_validator("gemini_api_key", mode="before")
    @classmethod
    def _blank_key_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return (value or "INFO").upper()

    @field_validator("frontend_dist", mode="before")
    @classmethod
    def _normalize_dist(cls, value: str | Path) -> Path:
        return Path(value).expanduser().resolve()

    @property
    def firebase_enabled(self) -> bool:
        return self.firebase_service_account is not None


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    return AppConfig(
        mongodb_uri=_read_env("MONGODB_URI") or DEFAULT_MONGODB_URI,
        mongodb_database=_read_env("MONGODB_DATABASE", "notely"),
        mongodb_collection=_read_env("MONGODB_COLLECTION", "docs"),
        gemini_api_key=_read_env("GEMINI_API_KEY"),
        gemini_model=_read_env("GEMINI_MODEL", "gemini-2.5-flash-lite"),
        gemini_chat_model=_read_env("GEMINI_CHAT_MODEL", "gemini-2.5-flash"),
        allow_origins=_read_env("ALLOW_ORIGIN"),
        firebase_service_account=_read_env("FIREBASE_SERVICE_ACCOUNT_JSON"),
        port=int(_read_env("PORT", "3000")),
        log_level=_read_env("LOG_LEVEL", "INFO"),
        max_upload_bytes=int(_read_env("MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES))),
        frontend_dist=_read_env("FRONTEND_DIST", str(DEFAULT_FRONTEND_DIST)),
    )


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = ["AppConfig", "get_config", "reload_config", "PROJECT_ROOT", "DEFAULT_MONGODB_URI"]
