"""Settings management utilities for the return tracker configuration.

Updates:
  v0.3.0 - 2026-07-14 - Add remote retry attempts and due-soon threshold settings.
  v0.2.1 - 2026-04-19 - Bound remote requests with a configurable timeout.
  v0.2.0 - 2026-03-11 - Add legacy storage key for the one-time local migration.
  v0.1.0 - 2026-02-04 - Initial settings model with JSON/env precedence.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast
from urllib.parse import quote

from dotenv import dotenv_values
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

_DOTENV_FALLBACK_PATH = ".env"

DEFAULT_CONFIG_PATH = Path("config") / "config.json"
DEFAULT_LOCAL_STORE_PATH = Path("data") / "local_storage.json"
DEFAULT_PROJECT_SLUG = "2026-02-04-return-deadline-tracker"
DEFAULT_STORAGE_KEY = "return-deadline-tracker:v2"
DEFAULT_LEGACY_STORAGE_KEY = "return-deadline-tracker:v1"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 5.0
DEFAULT_DUE_SOON_DAYS = 3
DEFAULT_EXPORT_FILENAME = "return-deadlines.csv"

# Canonical field name -> accepted environment keys (prefixed with RETURN_TRACKER_).
_ENV_ALIASES: dict[str, list[str]] = {
    "remote_base_url": ["REMOTE_BASE_URL", "remote_base_url", "API_BASE_URL"],
    "project_slug": ["PROJECT_SLUG", "project_slug", "PROJECT"],
    "request_timeout_seconds": ["REQUEST_TIMEOUT_SECONDS", "request_timeout_seconds"],
    "remote_retry_attempts": ["REMOTE_RETRY_ATTEMPTS", "remote_retry_attempts"],
    "local_store_path": ["LOCAL_STORE_PATH", "local_store_path", "DATA_PATH"],
    "storage_key": ["STORAGE_KEY", "storage_key"],
    "legacy_storage_key": ["LEGACY_STORAGE_KEY", "legacy_storage_key"],
    "due_soon_days": ["DUE_SOON_DAYS", "due_soon_days"],
    "export_filename": ["EXPORT_FILENAME", "export_filename"],
}


def _read_dotenv_values() -> dict[str, str]:
    """Load ``.env`` entries into a mapping without mutating ``os.environ``."""
    env_file_override = os.getenv("RETURN_TRACKER_ENV_FILE")
    if env_file_override is not None:
        candidate = env_file_override.strip()
        if not candidate:
            return {}
        path = Path(candidate).expanduser()
    else:
        path = Path(_DOTENV_FALLBACK_PATH).expanduser()
    if not path.is_file():
        return {}
    raw_values = dotenv_values(str(path))
    return {str(key): str(value) for key, value in raw_values.items() if value is not None}


class SettingsError(Exception):
    """Raised when tracker configuration cannot be loaded or validated."""


class TrackerSettings(BaseSettings):
    """Application configuration sourced from environment variables or JSON files."""

    remote_base_url: str | None = Field(
        default=None,
        description=(
            "Base URL of the JSON project server. Leave empty to keep records in the "
            "local store only."
        ),
    )
    project_slug: str = Field(
        default=DEFAULT_PROJECT_SLUG,
        description="Project identifier used to build the remote data endpoint path.",
    )
    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT_SECONDS,
        description="Timeout applied to each remote load/save request.",
    )
    remote_retry_attempts: int = Field(
        default=2,
        description="Total attempts for transient remote failures before falling back.",
    )
    local_store_path: Path = Field(
        default=DEFAULT_LOCAL_STORE_PATH,
        description="JSON file holding the local fallback slots.",
    )
    storage_key: str = Field(
        default=DEFAULT_STORAGE_KEY,
        description="Local slot holding the current record collection.",
    )
    legacy_storage_key: str | None = Field(
        default=DEFAULT_LEGACY_STORAGE_KEY,
        description="Older local slot adopted once when the primary store is empty.",
    )
    due_soon_days: int = Field(
        default=DEFAULT_DUE_SOON_DAYS,
        description="Records with this many days left or fewer count as due soon.",
    )
    export_filename: str = Field(
        default=DEFAULT_EXPORT_FILENAME,
        description="Default file name for CSV exports.",
    )

    model_config = cast(
        "SettingsConfigDict",
        {
            "env_prefix": "RETURN_TRACKER_",
            "case_sensitive": False,
            "populate_by_name": True,
        },
    )

    @property
    def remote_endpoint(self) -> str | None:
        """Return the data endpoint URL, or ``None`` when remote storage is disabled."""
        if not self.remote_base_url:
            return None
        slug = quote(self.project_slug, safe="")
        return f"{self.remote_base_url.rstrip('/')}/api/projects/{slug}/data"

    @field_validator("local_store_path", mode="before")
    def _normalise_path(cls, value: Any) -> Path:
        """Expand user-relative paths and coerce values to Path instances."""
        if value is None or str(value).strip() == "":
            raise ValueError("a filesystem path is required")
        return Path(str(value)).expanduser().resolve()

    @field_validator("remote_base_url", "legacy_storage_key", mode="before")
    def _strip_optional(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = str(value).strip()
        return stripped or None

    @field_validator("remote_base_url")
    def _validate_remote_base_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        if not value.startswith(("http://", "https://")):
            raise ValueError("remote_base_url must start with http:// or https://")
        return value

    @field_validator("project_slug", "storage_key", "export_filename", mode="before")
    def _require_text(cls, value: Any) -> str:
        text = str(value or "").strip()
        if not text:
            raise ValueError("value must not be empty")
        return text

    @field_validator("request_timeout_seconds")
    def _validate_timeout(cls, value: float) -> float:
        """Ensure the request timeout is a positive number of seconds."""
        if value <= 0:
            raise ValueError("request_timeout_seconds must be greater than zero")
        return value

    @field_validator("remote_retry_attempts")
    def _validate_retry_attempts(cls, value: int) -> int:
        if value < 1:
            raise ValueError("remote_retry_attempts must be at least 1")
        return value

    @field_validator("due_soon_days")
    def _validate_due_soon_days(cls, value: int) -> int:
        if value < 0:
            raise ValueError("due_soon_days must not be negative")
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
    ]:
        """Define configuration source precedence.

        Order (highest → lowest):
            1. Explicit keyword arguments (e.g. load_settings(due_soon_days=5)).
            2. JSON configuration file (application settings).
            3. Environment variables / aliases, then ``.env`` entries.
            4. File secrets.
        """

        def env_with_aliases(_: BaseSettings | None = None) -> dict[str, Any]:
            data: dict[str, Any] = {}
            config_dict = cast("dict[str, Any]", cls.model_config)
            prefix = str(config_dict.get("env_prefix", ""))
            dotenv_data = _read_dotenv_values()

            def _lookup(candidate: str) -> str | None:
                value = os.getenv(candidate)
                if value is None:
                    value = dotenv_data.get(candidate)
                if value is None:
                    return None
                stripped_value = str(value).strip()
                return stripped_value or None

            for field, keys in _ENV_ALIASES.items():
                for key in keys:
                    candidates = [f"{prefix}{key}", f"{prefix}{key.upper()}"]
                    value = next(
                        (found for found in map(_lookup, candidates) if found is not None),
                        None,
                    )
                    if value is not None:
                        data[field] = value
                        break
            return data

        return (
            init_settings,
            cls._json_config_settings_source(settings_cls),
            cast("PydanticBaseSettingsSource", env_with_aliases),
            file_secret_settings,
        )

    @classmethod
    def _json_config_settings_source(
        cls,
        _: type[BaseSettings],
    ) -> PydanticBaseSettingsSource:
        """Return settings extracted from an optional JSON config file."""

        def _loader(_: BaseSettings | None = None) -> dict[str, Any]:
            explicit_path = os.getenv("RETURN_TRACKER_CONFIG_JSON")
            if explicit_path:
                path = Path(explicit_path).expanduser()
                if not path.exists():
                    raise SettingsError(f"Configuration file not found: {path}")
            else:
                path = DEFAULT_CONFIG_PATH
                if not path.exists():
                    return {}
            try:
                raw_contents = path.read_text(encoding="utf-8")
            except OSError as exc:  # pragma: no cover - filesystem failure is env-specific
                raise SettingsError(f"Unable to read configuration file: {path}") from exc
            try:
                data = json.loads(raw_contents)
            except json.JSONDecodeError as exc:
                raise SettingsError(f"Invalid JSON in configuration file: {path}") from exc
            if not isinstance(data, Mapping):
                raise SettingsError(f"Configuration file {path} must contain a JSON object")
            mapping_data = cast("Mapping[object, Any]", data)
            mapped: dict[str, Any] = {}
            for key, value in mapping_data.items():
                name = str(key)
                if name in _ENV_ALIASES:
                    mapped[name] = value
                else:
                    logger.warning("Ignoring unknown key %r in configuration file %s", name, path)
            return mapped

        return cast("PydanticBaseSettingsSource", _loader)


def load_settings(**overrides: Any) -> TrackerSettings:
    """Return validated settings, raising SettingsError on failure."""
    try:
        return TrackerSettings(**overrides)
    except SettingsError:
        raise
    except ValidationError as exc:
        raise SettingsError("Invalid return tracker configuration") from exc


logger = logging.getLogger("return_tracker.settings")
