"""Headline counts for the tracked collection.

Updates:
  v0.1.0 - 2026-03-11 - Add filter-independent active/due-soon/late counts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from models.return_record import ReturnRecord, normalize_record

from .deadlines import DEFAULT_DUE_SOON_DAYS, compute_deadline, today

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import date


@dataclass(frozen=True, slots=True)
class ReturnSummary:
    """Counts across every active record."""

    active_count: int = 0
    due_soon_count: int = 0
    late_count: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "active": self.active_count,
            "due_soon": self.due_soon_count,
            "late": self.late_count,
        }


def summarize(
    records: Iterable[ReturnRecord | Mapping[str, Any]],
    *,
    reference_date: date | None = None,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> ReturnSummary:
    """Count active, due-soon, and late records.

    List filters never apply here; every active record is counted.
    """
    reference = reference_date or today()
    active = due_soon = late = 0
    for raw in records:
        record = normalize_record(raw)
        if record.is_returned:
            continue
        active += 1
        days = compute_deadline(record, reference).days_remaining
        if days < 0:
            late += 1
        elif days <= due_soon_days:
            due_soon += 1
    return ReturnSummary(active_count=active, due_soon_count=due_soon, late_count=late)


__all__ = ["ReturnSummary", "summarize"]
