"""Due-date arithmetic for tracked purchases.

Updates:
  v0.2.1 - 2026-10-18 - Clamp due dates past the last representable date.
  v0.2.0 - 2026-03-11 - Add deadline classification and days-remaining labels.
  v0.1.0 - 2026-02-04 - Compute due dates on calendar dates to avoid DST drift.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.return_record import ReturnRecord

DEFAULT_DUE_SOON_DAYS = 3

logger = logging.getLogger("return_tracker.deadlines")


class DeadlineState(str, Enum):
    """Coarse urgency bucket used for badges and summaries."""

    OPEN = "open"
    DUE_SOON = "due"
    LATE = "late"


@dataclass(frozen=True, slots=True)
class Deadline:
    """Due date and signed day count relative to a reference date."""

    due: date
    days_remaining: int

    @property
    def is_late(self) -> bool:
        return self.days_remaining < 0


def today() -> date:
    """Return the local calendar date (today at midnight)."""
    return date.today()


def parse_purchase_date(value: str | date | None) -> date | None:
    """Parse an ISO calendar date, returning ``None`` when it is unusable."""
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def compute_deadline(record: ReturnRecord, reference_date: date) -> Deadline:
    """Return the due date and days remaining for *record*.

    An unparseable purchase date is replaced by *reference_date* rather than
    failing, so the record still shows up with a full window. A due date beyond
    ``date.max`` is clamped to it.
    """
    purchased = parse_purchase_date(record.purchase_date)
    if purchased is None:
        logger.warning(
            "Record %s has an unparseable purchase date %r; using %s instead",
            record.id,
            record.purchase_date,
            reference_date.isoformat(),
        )
        purchased = reference_date
    try:
        due = purchased + timedelta(days=record.window_days)
    except OverflowError:
        logger.warning(
            "Record %s has a due date past %s; clamping to that date",
            record.id,
            date.max.isoformat(),
        )
        due = date.max
    return Deadline(due=due, days_remaining=(due - reference_date).days)


def describe_days_remaining(days_remaining: int) -> str:
    """Return the user-facing label, e.g. ``"3 day(s) left"`` or ``"4 day(s) late"``."""
    if days_remaining < 0:
        return f"{abs(days_remaining)} day(s) late"
    return f"{days_remaining} day(s) left"


def classify_deadline(
    days_remaining: int,
    due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
) -> DeadlineState:
    if days_remaining < 0:
        return DeadlineState.LATE
    if days_remaining <= due_soon_days:
        return DeadlineState.DUE_SOON
    return DeadlineState.OPEN


__all__ = [
    "DEFAULT_DUE_SOON_DAYS",
    "Deadline",
    "DeadlineState",
    "classify_deadline",
    "compute_deadline",
    "describe_days_remaining",
    "parse_purchase_date",
    "today",
]
