"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``EDIT_SIMILAR_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The hooks, the CLI, and the recommendation engine factory all receive an
``AppConfig`` (or one of its sections) — never raw dicts or ad-hoc env lookups.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite database connection settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/edit_similar.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/edit_similar.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class EditSimilarConfig(BaseModel):
    """Suggestion engine, throttle, and message settings.

    Attributes:
        pool_limit: Maximum number of candidate pages considered before sampling.
        display_limit: Maximum number of pages sampled into one message.
        counter_value: Show the message once every ``counter_value`` qualifying
            edits (1 = every time).
        always_show_thanks: Thank registered users even when no suggestion
            could be made.
        content_namespaces: Namespaces whose pages trigger suggestions and
            may be suggested.
        preferences_url: Link target for the "disable these suggestions" link.
        marker_text: Fallback marker list used when the
            ``EditSimilar-Categories`` message is absent from the database.
    """

    model_config = ConfigDict(frozen=True)

    pool_limit: int = 50
    display_limit: int = 3
    counter_value: int = 1
    always_show_thanks: bool = False
    content_namespaces: list[int] = [0]
    preferences_url: str = "/index.php?title=Special:Preferences#mw-prefsection-editing"
    marker_text: Optional[str] = None

    @field_validator("pool_limit", "display_limit", "counter_value")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be >= 1, got {v}.")
        return v


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env + env vars.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    edit_similar: EditSimilarConfig = EditSimilarConfig()
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

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

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


_INT_OVERRIDES: dict[str, str] = {
    "EDIT_SIMILAR_POOL_LIMIT": "pool_limit",
    "EDIT_SIMILAR_DISPLAY_LIMIT": "display_limit",
    "EDIT_SIMILAR_COUNTER_VALUE": "counter_value",
}


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply EDIT_SIMILAR_* env vars to the raw config dict.

    Supported overrides:
      EDIT_SIMILAR_DB_PATH        → raw["database"]["db_path"]
      EDIT_SIMILAR_LOG_LEVEL      → raw["logging"]["level"]
      EDIT_SIMILAR_DEBUG          → raw["debug"]
      EDIT_SIMILAR_POOL_LIMIT     → raw["edit_similar"]["pool_limit"]
      EDIT_SIMILAR_DISPLAY_LIMIT  → raw["edit_similar"]["display_limit"]
      EDIT_SIMILAR_COUNTER_VALUE  → raw["edit_similar"]["counter_value"]
    """
    if db_path := os.environ.get("EDIT_SIMILAR_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if log_level := os.environ.get("EDIT_SIMILAR_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("EDIT_SIMILAR_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    for env_name, key in _INT_OVERRIDES.items():
        if value := os.environ.get(env_name):
            # pydantic coerces the string and rejects non-integers
            raw.setdefault("edit_similar", {})[key] = value

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        edit_similar=EditSimilarConfig(**raw.get("edit_similar", {})),
        debug=raw.get("debug", False),
    )
