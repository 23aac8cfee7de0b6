"""Configuration helpers for the return tracker.

Updates: v0.2.0 - 2026-03-11 - Expose storage key defaults alongside the settings loader.
Updates: v0.1.0 - 2026-02-04 - Package scaffold.
"""

from .settings import (
    DEFAULT_DUE_SOON_DAYS,
    DEFAULT_EXPORT_FILENAME,
    DEFAULT_LEGACY_STORAGE_KEY,
    DEFAULT_LOCAL_STORE_PATH,
    DEFAULT_PROJECT_SLUG,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_STORAGE_KEY,
    SettingsError,
    TrackerSettings,
    load_settings,
)

__all__ = [
    "DEFAULT_DUE_SOON_DAYS",
    "DEFAULT_EXPORT_FILENAME",
    "DEFAULT_LEGACY_STORAGE_KEY",
    "DEFAULT_LOCAL_STORE_PATH",
    "DEFAULT_PROJECT_SLUG",
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "DEFAULT_STORAGE_KEY",
    "SettingsError",
    "TrackerSettings",
    "load_settings",
]
