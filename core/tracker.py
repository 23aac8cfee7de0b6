"""Tracker service owning the in-memory record collection.

Every user action mutates the collection held by a :class:`ReturnTracker`
instance and then persists the full collection through the gateway.

Updates:
  v0.3.1 - 2026-10-18 - Reject return windows longer than MAX_WINDOW_DAYS.
  v0.3.0 - 2026-06-02 - Accept structured RecordEdit requests for in-place edits.
  v0.2.0 - 2026-03-11 - Add mark-returned/undo actions, CSV import, and summaries.
  v0.1.0 - 2026-02-04 - Add, delete, clear, and export actions.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from models.return_record import (
    RecordEdit,
    RecordStatus,
    ReturnRecord,
    apply_edit,
    generate_record_id,
    normalize_record,
    transition_status,
)

from .csv_codec import encode_records, import_records
from .deadlines import DEFAULT_DUE_SOON_DAYS, parse_purchase_date, today
from .exceptions import RecordNotFoundError, RecordValidationError
from .record_view import ComputedRecord, ViewOptions, apply_view
from .summary import ReturnSummary, summarize

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import date

    from .persistence import PersistenceGateway, StoreTarget

logger = logging.getLogger("return_tracker.tracker")

MAX_WINDOW_DAYS = 36_500


@dataclass(frozen=True, slots=True)
class RecordForm:
    """Raw values from the add form."""

    item: str
    purchase_date: str | None = None
    window_days: int | str | None = None
    store: str = ""
    notes: str = ""


def _parse_window(value: object) -> int:
    if isinstance(value, bool):
        raise RecordValidationError("Return window must be a whole number of days.")
    try:
        days = int(str(value).strip())
    except ValueError as exc:
        raise RecordValidationError(
            "Return window must be a whole number of days."
        ) from exc
    if days < 1:
        raise RecordValidationError("Return window must be at least one day.")
    if days > MAX_WINDOW_DAYS:
        raise RecordValidationError(f"Return window must be at most {MAX_WINDOW_DAYS} days.")
    return days


def validate_form(form: RecordForm, *, default_date: date | None = None) -> dict[str, Any]:
    """Return the cleaned fields for *form* or raise :class:`RecordValidationError`."""
    item = (form.item or "").strip()
    if not item:
        raise RecordValidationError("Item is required.")
    purchase_date = (form.purchase_date or "").strip()
    if form.purchase_date is None:
        purchase_date = (default_date or today()).isoformat()
    if not purchase_date:
        raise RecordValidationError("Purchase date is required.")
    if parse_purchase_date(purchase_date) is None:
        raise RecordValidationError(f"Purchase date {purchase_date!r} is not a YYYY-MM-DD date.")
    window = form.window_days
    window_days = 30 if window is None or window == "" else _parse_window(window)
    return {
        "item": item,
        "store": (form.store or "").strip(),
        "purchaseDate": purchase_date,
        "windowDays": window_days,
        "notes": (form.notes or "").strip(),
    }


class ReturnTracker:
    """Explicitly owned record collection plus the actions that mutate it."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        records: Iterable[ReturnRecord | Mapping[str, Any]] | None = None,
        *,
        due_soon_days: int = DEFAULT_DUE_SOON_DAYS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._gateway = gateway
        self._records: list[ReturnRecord] = [normalize_record(raw) for raw in records or ()]
        self._due_soon_days = due_soon_days
        self._clock = clock or (lambda: datetime.now(UTC))
        self.last_save_target: StoreTarget | None = None

    # ------------------------------------------------------------------
    # Collection access
    # ------------------------------------------------------------------

    @property
    def records(self) -> list[ReturnRecord]:
        return list(self._records)

    @property
    def due_soon_days(self) -> int:
        return self._due_soon_days

    @property
    def has_remote(self) -> bool:
        return self._gateway.has_remote

    @property
    def load_source(self) -> StoreTarget | None:
        """Where the last load came from, or ``None`` before the first load."""
        return self._gateway.last_source

    def get(self, record_id: str) -> ReturnRecord:
        for record in self._records:
            if record.id == record_id:
                return record
        raise RecordNotFoundError(f"No record with id {record_id!r}")

    def resolve_id(self, prefix: str) -> str:
        """Return the full id matching *prefix* when it is unambiguous."""
        candidate = prefix.strip()
        if not candidate:
            raise RecordNotFoundError("A record id is required.")
        matches = [record.id for record in self._records if record.id.startswith(candidate)]
        if candidate in matches:
            return candidate
        if len(matches) == 1:
            return matches[0]
        if not matches:
            raise RecordNotFoundError(f"No record with id {candidate!r}")
        raise RecordNotFoundError(f"Record id prefix {candidate!r} is ambiguous")

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> list[ReturnRecord]:
        """Replace the in-memory collection with the persisted one."""
        self._records = [normalize_record(raw) for raw in self._gateway.bootstrap()]
        logger.debug(
            "Loaded %d record(s) from %s store",
            len(self._records),
            self._gateway.last_source,
        )
        return self.records

    def _persist(self) -> StoreTarget:
        self.last_save_target = self._gateway.save(
            [record.to_record() for record in self._records]
        )
        return self.last_save_target

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def add(self, form: RecordForm) -> ReturnRecord | None:
        """Create a record from *form*; invalid input is logged and ignored."""
        try:
            cleaned = validate_form(form)
        except RecordValidationError as exc:
            logger.warning("Rejected new record: %s", exc)
            return None
        record = normalize_record(
            {**cleaned, "id": generate_record_id(), "createdAt": self._clock()}
        )
        self._records.append(record)
        self._persist()
        return record

    def edit(self, record_id: str, edit: RecordEdit) -> ReturnRecord | None:
        """Apply *edit* to a record; edits that would blank the item are ignored."""
        current = self.get(record_id)
        if edit.is_empty():
            return current
        if edit.item is not None and not edit.item.strip():
            logger.warning("Rejected edit for %s: item is required", record_id)
            return None
        if edit.purchase_date is not None and parse_purchase_date(edit.purchase_date) is None:
            logger.warning(
                "Rejected edit for %s: purchase date %r is not a YYYY-MM-DD date",
                record_id,
                edit.purchase_date,
            )
            return None
        if edit.window_days is not None:
            try:
                _parse_window(edit.window_days)
            except RecordValidationError as exc:
                logger.warning("Rejected edit for %s: %s", record_id, exc)
                return None
        updated = apply_edit(current, edit)
        index = self._records.index(current)
        self._records[index] = updated
        self._persist()
        return updated

    def delete(self, record_id: str) -> ReturnRecord:
        record = self.get(record_id)
        self._records.remove(record)
        self._persist()
        return record

    def mark_returned(self, record_id: str) -> ReturnRecord:
        record = transition_status(self.get(record_id), RecordStatus.RETURNED, now=self._clock())
        self._persist()
        return record

    def undo_return(self, record_id: str) -> ReturnRecord:
        record = transition_status(self.get(record_id), RecordStatus.ACTIVE)
        self._persist()
        return record

    def clear(self) -> int:
        """Remove every record and return how many were dropped."""
        removed = len(self._records)
        self._records = []
        self._persist()
        return removed

    def import_csv(self, text: str) -> int:
        """Append the records found in CSV *text*; returns the imported count."""
        self._records, imported = import_records(self._records, text)
        if imported:
            self._persist()
        return imported

    def export_csv(self) -> str:
        return encode_records(self._records)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def view(
        self,
        options: ViewOptions | None = None,
        *,
        reference_date: date | None = None,
    ) -> list[ComputedRecord]:
        return apply_view(self._records, options, reference_date=reference_date)

    def summary(self, *, reference_date: date | None = None) -> ReturnSummary:
        return summarize(
            self._records,
            reference_date=reference_date,
            due_soon_days=self._due_soon_days,
        )


__all__ = ["MAX_WINDOW_DAYS", "RecordForm", "ReturnTracker", "validate_form"]
