"""Printable summaries for return tracker configuration.

Updates:
  v0.1.1 - 2026-07-14 - Show retry attempts and the due-soon threshold.
  v0.1.0 - 2026-02-04 - Extract CLI settings summary rendering.
"""

from __future__ import annotations

from config import TrackerSettings

from .utils import describe_path


def print_settings_summary(settings: TrackerSettings) -> None:
    """Emit a readable summary of storage configuration and health checks."""
    store_desc = describe_path(
        settings.local_store_path,
        expect_directory=False,
        allow_missing_file=True,
    )
    endpoint = settings.remote_endpoint

    lines = [
        "Return tracker configuration summary",
        "------------------------------------",
        f"Local store: {store_desc}",
        f"Storage key: {settings.storage_key}",
        f"Legacy storage key: {settings.legacy_storage_key or 'not set'}",
        f"Due-soon threshold (days): {settings.due_soon_days}",
        f"Export file name: {settings.export_filename}",
        "",
        "Remote storage",
        "--------------",
        f"Endpoint: {endpoint or 'disabled (local store only)'}",
    ]
    if endpoint:
        lines.extend(
            [
                f"Request timeout (seconds): {settings.request_timeout_seconds}",
                f"Retry attempts: {settings.remote_retry_attempts}",
            ]
        )
    print("\n".join(lines))
