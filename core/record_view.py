"""Filter and sort pipeline that turns stored records into a rendered list.

Updates:
  v0.2.2 - 2026-10-18 - Order stores by the active collation locale.
  v0.2.1 - 2026-05-08 - Fall back to due-asc for unknown sort modes instead of raising.
  v0.2.0 - 2026-03-11 - Add returned-record toggle and purchase/store sort orders.
  v0.1.0 - 2026-02-04 - Initial text filter and due-date ordering.
"""

from __future__ import annotations

import locale
import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Any

from models.return_record import ReturnRecord, normalize_record

from .deadlines import compute_deadline, parse_purchase_date, today

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

logger = logging.getLogger("return_tracker.view")


class SortMode(str, Enum):
    """Supported list orderings."""

    DUE_ASC = "due-asc"
    DUE_DESC = "due-desc"
    PURCHASE_ASC = "purchase-asc"
    PURCHASE_DESC = "purchase-desc"
    STORE = "store"

    @classmethod
    def resolve(cls, value: object) -> SortMode:
        """Return the matching mode, defaulting to :attr:`DUE_ASC`."""
        if isinstance(value, SortMode):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            logger.debug("Unknown sort mode %r; using %s", value, cls.DUE_ASC.value)
            return cls.DUE_ASC


@dataclass(frozen=True, slots=True)
class ViewOptions:
    """User-controlled list settings."""

    text_filter: str = ""
    include_returned: bool = False
    sort_mode: SortMode | str = SortMode.DUE_ASC


@dataclass(frozen=True, slots=True)
class ComputedRecord:
    """A normalised record paired with its derived deadline."""

    record: ReturnRecord
    due: date
    days_remaining: int


def matches_text(record: ReturnRecord, needle: str) -> bool:
    """Return ``True`` when *needle* occurs in the item, store, or notes."""
    if not needle:
        return True
    folded = needle.casefold()
    return any(folded in value.casefold() for value in (record.item, record.store, record.notes))


def _purchase_key(entry: ComputedRecord) -> date:
    return parse_purchase_date(entry.record.purchase_date) or date.min


def _store_key(entry: ComputedRecord) -> str:
    return locale.strxfrm(entry.record.store.casefold())


_SORT_KEYS: dict[SortMode, tuple[Callable[[ComputedRecord], Any], bool]] = {
    SortMode.DUE_ASC: (lambda entry: entry.due, False),
    SortMode.DUE_DESC: (lambda entry: entry.due, True),
    SortMode.PURCHASE_ASC: (_purchase_key, False),
    SortMode.PURCHASE_DESC: (_purchase_key, True),
    SortMode.STORE: (_store_key, False),
}


def apply_view(
    records: Iterable[ReturnRecord | Mapping[str, Any]],
    options: ViewOptions | None = None,
    *,
    reference_date: date | None = None,
) -> list[ComputedRecord]:
    """Filter, compute, and order *records* for display.

    The reference date is read once per call so ordering and the displayed day
    counts agree even when a pass straddles midnight. Sorting is stable.
    """
    options = options or ViewOptions()
    reference = reference_date or today()
    needle = (options.text_filter or "").strip()

    computed: list[ComputedRecord] = []
    for raw in records:
        record = normalize_record(raw)
        if record.is_returned and not options.include_returned:
            continue
        if not matches_text(record, needle):
            continue
        deadline = compute_deadline(record, reference)
        computed.append(
            ComputedRecord(record=record, due=deadline.due, days_remaining=deadline.days_remaining)
        )

    key, reverse = _SORT_KEYS[SortMode.resolve(options.sort_mode)]
    computed.sort(key=key, reverse=reverse)
    return computed


__all__ = ["ComputedRecord", "SortMode", "ViewOptions", "apply_view", "matches_text"]
