"""
notely-cli Configuration

Configuration is loaded from:
1. Environment variables (prefixed with NOTELY_)
2. ~/.notely/.env file

Key settings:
- NOTELY_API_URL: Backend server URL (default: http://localhost:3000)
- NOTELY_OWNER: Signed-in uid sent as the x-owner header (written by `notely login`)
- NOTELY_AUTOSAVE_DELAY: Debounce before an edited file is saved, in seconds
"""

import logging
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

ENV_PREFIX = "NOTELY_"


def env_file_path() -> Path:
    """Location of the per-user settings file (``~/.notely/.env``)."""
    return Path.home() / ".notely" / ".env"


class Settings(BaseSettings):
    """notely-cli configuration settings."""

    api_url: str = "http://localhost:3000"
    owner: Optional[str] = None
    autosave_delay: float = 0.4
    timeout: float = 30.0

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=env_file_path(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_signed_in(self) -> bool:
        return bool(self.owner and self.owner.strip())


def get_settings() -> Settings:
    """Re-read settings so a fresh login is picked up within one process."""
    return Settings(_env_file=env_file_path())


def _read_lines(env_path: Path) -> list[str]:
    if not env_path.exists():
        return []
    with open(env_path, "r", encoding="utf-8") as f:
        return f.readlines()


def set_env_value(name: str, value: str) -> Path:
    """Write ``NOTELY_<NAME>=value`` to the settings file, replacing any old line."""
    env_path = env_file_path()
    env_path.parent.mkdir(parents=True, exist_ok=True)
    key = f"{ENV_PREFIX}{name.upper()}="

    lines = [line for line in _read_lines(env_path) if not line.startswith(key)]
    lines.append(f"{key}{value}\n")

    with open(env_path, "w", encoding="utf-8") as f:
        f.writelines(lines)
    logger.debug("Saved %s to %s", key.rstrip("="), env_path)
    return env_path


def unset_env_value(name: str) -> bool:
    """Remove ``NOTELY_<NAME>`` from the settings file; returns whether it was there."""
    env_path = env_file_path()
    key = f"{ENV_PREFIX}{name.upper()}="
    lines = _read_lines(env_path)
    kept = [line for line in lines if not line.startswith(key)]
    if len(kept) == len(lines):
        return False
    with open(env_path, "w", encoding="utf-8") as f:
        f.writelines(kept)
    return True
