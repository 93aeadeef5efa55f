# src/cadence/config.py

"""Process settings loaded from environment variables (+ optional .env).

- One Settings object for the whole process.
- Vault-level settings live in .cadence/config.json (see vault_config.py), not here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "CADENCE"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data (logs), ignored by git ----
    data_dir: Path

    # ---- Vault ----
    vault_path: Path
    days_back: int

    @staticmethod
    def from_env() -> Settings:
        return Settings(
            app_name=_env(_k("APP_NAME"), "cadence"),
            log_level=_env(_k("LOG_LEVEL"), "INFO"),
            data_dir=_env_path(_k("DATA_DIR"), Path(".local/cadence")),
            vault_path=_env_path(_k("VAULT_PATH"), Path.cwd()),
            days_back=_env_int(_k("DAYS_BACK"), 7),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv(override=False)
    return Settings.from_env()
