"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``     : committed static defaults
  2. ``config/local.toml``       : optional local overrides (gitignored)
  3. ``.env``                    : local env overrides (gitignored)
  4. Environment variables       : ``COMBO_ROSTER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

This is the *application* configuration (where files live, how long the
persistence quiet interval is, logging). The user's combo catalog and roster
are a separate document handled by ``combo_roster.persistence.store``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class StoreConfig(BaseModel):
    """Filesystem locations of the user settings and the modifier catalog."""

    model_config = ConfigDict(frozen=True)

    settings_path: str = "data/settings.json"
    modifiers_path: str = "config/modifiers.json"


class CatalogConfig(BaseModel):
    """Combo catalog limits and templates.

    Attributes:
        max_combos: Catalog size at which the UI stops offering "add combo".
        default_combo: Slot template used for every newly added combo.
        default_hotkey: Hotkey written into a freshly created settings file.
    """

    model_config = ConfigDict(frozen=True)

    max_combos: int = 10
    default_combo: list[int] = [4, 5, 7, 2]
    default_hotkey: str = "alt + 1"

    @field_validator("max_combos")
    @classmethod
    def validate_max_combos(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_combos must be >= 1, got {v}.")
        return v

    @field_validator("default_combo")
    @classmethod
    def validate_default_combo(cls, v: list[int]) -> list[int]:
        if len(v) != 4:
            raise ValueError(f"default_combo must hold exactly 4 modifier ids, got {len(v)}.")
        if len(set(v)) != len(v):
            raise ValueError(f"default_combo must not repeat a modifier id, got {v}.")
        return v


class PersistenceConfig(BaseModel):
    """Debounced write-back settings."""

    model_config = ConfigDict(frozen=True)

    debounce_ms: int = 500
    flush_on_close: bool = True

    @field_validator("debounce_ms")
    @classmethod
    def validate_debounce(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"debounce_ms must be >= 0, got {v}.")
        return v

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: Optional[str] = None
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration.

    Every CLI command receives an ``AppConfig`` instance built by
    ``load_config()``, which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    store: StoreConfig = StoreConfig()
    catalog: CatalogConfig = CatalogConfig()
    persistence: PersistenceConfig = PersistenceConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config explicitly."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply COMBO_ROSTER_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply COMBO_ROSTER_* env vars to the raw config dict.

    Supported overrides:
      COMBO_ROSTER_SETTINGS_PATH   → raw["store"]["settings_path"]
      COMBO_ROSTER_MODIFIERS_PATH  → raw["store"]["modifiers_path"]
      COMBO_ROSTER_LOG_LEVEL       → raw["logging"]["level"]
      COMBO_ROSTER_DEBOUNCE_MS     → raw["persistence"]["debounce_ms"]
      COMBO_ROSTER_DEBUG           → raw["debug"]
    """
    if settings_path := os.environ.get("COMBO_ROSTER_SETTINGS_PATH"):
        raw.setdefault("store", {})["settings_path"] = settings_path

    if modifiers_path := os.environ.get("COMBO_ROSTER_MODIFIERS_PATH"):
        raw.setdefault("store", {})["modifiers_path"] = modifiers_path

    if log_level := os.environ.get("COMBO_ROSTER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debounce_ms := os.environ.get("COMBO_ROSTER_DEBOUNCE_MS"):
        raw.setdefault("persistence", {})["debounce_ms"] = int(debounce_ms)

    if debug := os.environ.get("COMBO_ROSTER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        store=StoreConfig(**raw.get("store", {})),
        catalog=CatalogConfig(**raw.get("catalog", {})),
        persistence=PersistenceConfig(**raw.get("persistence", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", False),
    )
