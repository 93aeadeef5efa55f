# src/cadence/vault_config.py

"""
Per-vault configuration stored as JSON at <vault>/.cadence/config.json.

The on-disk keys stay camelCase (rolloverEnabled, scanDaysBack, staleAfterDays,
linkFormat) so existing vault configs load unchanged. Keys missing from the
file fall back to default_vault_config(); keys present with the wrong type are
reported together in one ConfigValidationError.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from .core.ports import FileSystem, VaultConfigSource
from .dates.path_generator import PathGenerator
from .errors import ConfigNotFoundError, ConfigValidationError
from .fs.paths import join_path

logger = logging.getLogger(__name__)

CONFIG_DIR = ".cadence"
CONFIG_FILE = "config.json"

PATH_KEYS = ("daily", "weekly", "monthly", "quarterly", "yearly", "templates")
LINK_FORMATS = ("wikilink", "markdown")


@dataclass(slots=True)
class TasksConfig:
    rollover_enabled: bool = True
    scan_days_back: int = 7
    stale_after_days: int = 14


@dataclass(slots=True)
class VaultConfig:
    version: int = 1
    paths: dict[str, str] = field(default_factory=dict)
    templates: dict[str, str] = field(default_factory=dict)
    sections: dict[str, str] = field(default_factory=dict)
    tasks: TasksConfig = field(default_factory=TasksConfig)
    link_format: str = "wikilink"

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "paths": dict(self.paths),
            "templates": dict(self.templates),
            "sections": dict(self.sections),
            "tasks": {
                "rolloverEnabled": self.tasks.rollover_enabled,
                "scanDaysBack": self.tasks.scan_days_back,
                "staleAfterDays": self.tasks.stale_after_days,
            },
            "linkFormat": self.link_format,
        }


def default_vault_config() -> VaultConfig:
    """Fresh default config (callers may mutate it)."""
    return VaultConfig(
        version=1,
        paths={
            "daily": "Journal/{year}/Daily/{month}/{date}.md",
            "weekly": "Journal/{year}/Weekly/W{week}.md",
            "monthly": "Journal/{year}/Monthly/{month}.md",
            "quarterly": "Journal/{year}/Quarterly/Q{quarter}.md",
            "yearly": "Journal/{year}/Year.md",
            "templates": "Templates",
        },
        templates={
            "daily": "Templates/daily.md",
            "weekly": "Templates/weekly.md",
            "monthly": "Templates/monthly.md",
            "quarterly": "Templates/quarterly.md",
            "yearly": "Templates/yearly.md",
        },
        sections={
            "tasks": "## Tasks",
            "notes": "## Notes",
            "reflection": "## Reflection",
        },
        tasks=TasksConfig(),
        link_format="wikilink",
    )


def config_path(vault_path: str) -> str:
    return join_path(vault_path, CONFIG_DIR, CONFIG_FILE)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _string_map(raw: Any, name: str, base: dict[str, str], errors: list[str]) -> dict[str, str]:
    if raw is None:
        return dict(base)
    if not isinstance(raw, dict):
        errors.append(f"{name} must be an object")
        return dict(base)
    out = dict(base)
    for key, value in raw.items():
        if isinstance(value, str):
            out[str(key)] = value
        else:
            errors.append(f"{name}.{key} must be a string")
    return out


_PLACEHOLDER_RE = re.compile(r"\{([^{}]*)\}")


def _check_path_variables(paths: dict[str, str], errors: list[str]) -> None:
    known = set(PathGenerator().available_variables())
    for key, template in paths.items():
        for name in _PLACEHOLDER_RE.findall(template):
            if name not in known:
                errors.append(f"paths.{key} uses unknown variable {{{name}}}")


def parse_vault_config(data: Any) -> VaultConfig:
    """Validate decoded JSON and merge it over the defaults."""
    if not isinstance(data, dict):
        raise ConfigValidationError(
            "Configuration must be an object",
            validation_errors=["Configuration must be an object"],
        )

    cfg = default_vault_config()
    errors: list[str] = []

    version = data.get("version", cfg.version)
    if _is_int(version):
        cfg.version = version
    else:
        errors.append("version must be a number")

    cfg.paths = _string_map(data.get("paths"), "paths", cfg.paths, errors)
    _check_path_variables(cfg.paths, errors)
    cfg.templates = _string_map(data.get("templates"), "templates", cfg.templates, errors)
    cfg.sections = _string_map(data.get("sections"), "sections", cfg.sections, errors)

    tasks_raw = data.get("tasks")
    if tasks_raw is not None and not isinstance(tasks_raw, dict):
        errors.append("tasks must be an object")
    elif isinstance(tasks_raw, dict):
        rollover = tasks_raw.get("rolloverEnabled", cfg.tasks.rollover_enabled)
        if isinstance(rollover, bool):
            cfg.tasks.rollover_enabled = rollover
        else:
            errors.append("tasks.rolloverEnabled must be a boolean")

        scan = tasks_raw.get("scanDaysBack", cfg.tasks.scan_days_back)
        if _is_int(scan) and scan >= 0:
            cfg.tasks.scan_days_back = scan
        else:
            errors.append("tasks.scanDaysBack must be a non-negative integer")

        stale = tasks_raw.get("staleAfterDays", cfg.tasks.stale_after_days)
        if _is_int(stale) and stale >= 0:
            cfg.tasks.stale_after_days = stale
        else:
            errors.append("tasks.staleAfterDays must be a non-negative integer")

    link_format = data.get("linkFormat", cfg.link_format)
    if link_format in LINK_FORMATS:
        cfg.link_format = link_format
    else:
        errors.append('linkFormat must be either "wikilink" or "markdown"')

    if errors:
        raise ConfigValidationError(
            f"Invalid configuration: {'; '.join(errors)}",
            validation_errors=errors,
        )
    return cfg


class ConfigLoader:
    """Reads, validates and generates <vault>/.cadence/config.json through a FileSystem."""

    def __init__(self, fs: FileSystem) -> None:
        self._fs = fs

    async def load_config(self, vault_path: str) -> VaultConfig:
        path = config_path(vault_path)
        if not await self._fs.exists(path):
            raise ConfigNotFoundError(vault_path)

        content = await self._fs.read_file(path)
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(
                f"Invalid JSON in configuration file: {path}",
                validation_errors=["Configuration file contains invalid JSON"],
            ) from e

        cfg = parse_vault_config(data)
        logger.debug("Loaded vault config from %s", path)
        return cfg

    async def generate_default_config_file(self, vault_path: str, force: bool = False) -> str:
        """Write the default config; refuses to overwrite an existing file unless force=True."""
        path = config_path(vault_path)
        if not force and await self._fs.exists(path):
            raise ConfigValidationError(
                f"Configuration file already exists at {path}. Use force option to overwrite."
            )

        await self._fs.mkdir(join_path(vault_path, CONFIG_DIR), recursive=True)
        content = json.dumps(default_vault_config().to_dict(), indent=2)
        await self._fs.write_file(path, content)
        logger.info("Wrote default vault config to %s", path)
        return path


class VaultConfigCache:
    """
    Memoizes VaultConfig per vault path for one engine instance.

    Entries never expire; call clear() to pick up edits to config.json.
    """

    def __init__(self, source: VaultConfigSource) -> None:
        self._source = source
        self._configs: dict[str, VaultConfig] = {}

    async def get(self, vault_path: str) -> VaultConfig:
        cfg = self._configs.get(vault_path)
        if cfg is None:
            cfg = await self._source.load_config(vault_path)
            self._configs[vault_path] = cfg
        return cfg

    def clear(self) -> None:
        self._configs.clear()
