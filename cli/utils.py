"""Shared CLI utility functions for return tracker commands.

Updates:
  v0.2.0 - 2026-03-11 - Add record rendering helpers for the list command.
  v0.1.0 - 2026-02-04 - Extract stdout logging and path helpers.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from core.deadlines import DeadlineState, classify_deadline, describe_days_remaining

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from logging import Logger

    from core.record_view import ComputedRecord
    from core.summary import ReturnSummary
else:  # pragma: no cover - runtime placeholders for type-only imports
    Logger = ComputedRecord = ReturnSummary = Any

_BADGES = {
    DeadlineState.LATE: "[LATE]",
    DeadlineState.DUE_SOON: "[DUE]",
    DeadlineState.OPEN: "",
}
SHORT_ID_LENGTH = 8


def print_and_log(logger: Logger, level: int, message: str) -> None:
    """Log *message* at *level* and mirror it to stdout."""
    logger.log(level, message)
    print(message)


def describe_path(
    path_value: object,
    *,
    expect_directory: bool,
    allow_missing_file: bool = False,
) -> str:
    """Return a human-friendly description of *path_value* suitability."""
    try:
        path = Path(path_value) if path_value is not None else None
    except TypeError:
        path = None
    if path is None:
        return "not set"

    resolved = path.expanduser()
    if resolved.exists():
        if expect_directory and not resolved.is_dir():
            return f"{resolved} (exists but is not a directory)"
        if not expect_directory and resolved.is_dir():
            return f"{resolved} (exists but is a directory)"
        return f"{resolved} (exists)"

    message = f"{resolved} (missing)"
    if not expect_directory and allow_missing_file:
        message = f"{resolved} (missing - created on demand)"
    parent = resolved.parent
    if not parent.exists():
        message += f", parent missing: {parent}"
    return message


def format_record(entry: ComputedRecord, *, due_soon_days: int) -> str:
    """Return a multi-line card for one listed record."""
    record = entry.record
    if record.is_returned:
        badge = "[RETURNED]"
    else:
        badge = _BADGES[classify_deadline(entry.days_remaining, due_soon_days)]
    header = f"{record.id[:SHORT_ID_LENGTH]}  {record.item}"
    if badge:
        header = f"{header}  {badge}"
    lines = [
        header,
        (
            f"    {record.store or '-'} · purchased {record.purchase_date}"
            f" · window {record.window_days} days"
        ),
        (
            f"    Return by {entry.due.isoformat()}"
            f" ({describe_days_remaining(entry.days_remaining)})"
        ),
    ]
    if record.notes:
        lines.extend(f"    {line}" for line in record.notes.splitlines())
    return "\n".join(lines)


def format_summary(summary: ReturnSummary) -> str:
    return (
        f"Active: {summary.active_count} · Due soon: {summary.due_soon_count}"
        f" · Late: {summary.late_count}"
    )
