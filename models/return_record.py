"""Return record data model, normalisation, and status transitions.

Updates:
  v0.3.1 - 2026-10-18 - Reconcile status and returnedAt while normalising.
  v0.3.0 - 2026-06-02 - Add RecordEdit requests so edits reuse the normaliser.
  v0.2.0 - 2026-03-11 - Enforce the status/returned_at pairing inside transition_status.
  v0.1.0 - 2026-02-04 - Introduce ReturnRecord dataclass and normalize_record.
"""

from __future__ import annotations

import math
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

DEFAULT_WINDOW_DAYS = 30

# Wire keys mirror the JSON payloads exchanged with the remote endpoint.
_WIRE_KEYS: dict[str, str] = {
    "id": "id",
    "item": "item",
    "store": "store",
    "purchase_date": "purchaseDate",
    "window_days": "windowDays",
    "notes": "notes",
    "status": "status",
    "created_at": "createdAt",
    "returned_at": "returnedAt",
}


def _utc_now() -> datetime:
    """Return an aware UTC timestamp."""
    return datetime.now(UTC)


def generate_record_id() -> str:
    """Return a fresh opaque record identifier."""
    return uuid.uuid4().hex


class RecordStatus(str, Enum):
    """Lifecycle stage of a tracked purchase."""

    ACTIVE = "active"
    RETURNED = "returned"


@dataclass(slots=True)
class ReturnRecord:
    """One tracked purchase and its return window."""

    id: str
    item: str
    purchase_date: str
    store: str = ""
    window_days: int = DEFAULT_WINDOW_DAYS
    notes: str = ""
    status: RecordStatus = RecordStatus.ACTIVE
    created_at: datetime = field(default_factory=_utc_now)
    returned_at: datetime | None = None

    @property
    def is_returned(self) -> bool:
        return self.status is RecordStatus.RETURNED

    def to_record(self) -> dict[str, Any]:
        """Return the JSON mapping persisted to the remote and local stores."""
        return {
            "id": self.id,
            "item": self.item,
            "store": self.store,
            "purchaseDate": self.purchase_date,
            "windowDays": self.window_days,
            "notes": self.notes,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
            "returnedAt": self.returned_at.isoformat() if self.returned_at else None,
        }

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> ReturnRecord:
        """Hydrate a ReturnRecord from a stored mapping (see :func:`normalize_record`)."""
        return normalize_record(data)


def _lookup(data: Mapping[str, Any], attribute: str) -> Any:
    wire_key = _WIRE_KEYS[attribute]
    if wire_key in data:
        return data[wire_key]
    return data.get(attribute)


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _coerce_window_days(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return DEFAULT_WINDOW_DAYS
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return DEFAULT_WINDOW_DAYS
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_WINDOW_DAYS
    if not math.isfinite(number):
        return DEFAULT_WINDOW_DAYS
    days = int(number)
    if days <= 0:
        return DEFAULT_WINDOW_DAYS
    return days


def _coerce_timestamp(value: Any) -> datetime | None:
    """Parse datetimes and ISO strings; return ``None`` for anything else."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _coerce_status(value: Any) -> RecordStatus:
    if value == RecordStatus.RETURNED.value:
        return RecordStatus.RETURNED
    return RecordStatus.ACTIVE


def normalize_record(raw: Mapping[str, Any] | ReturnRecord) -> ReturnRecord:
    """Coerce arbitrary or partial input into a structurally valid record.

    Never raises. Every field is handled independently so a corrupt value in one
    column cannot poison the rest of the record:

    * a missing or blank ``id`` gets a freshly generated identifier;
    * ``item``, ``store`` and ``notes`` are string-coerced and trimmed;
    * ``purchaseDate`` is kept as given, or set to today when blank;
    * ``windowDays`` falls back to 30 when missing, non-numeric or non-positive;
    * only the literal ``"returned"`` status maps to :attr:`RecordStatus.RETURNED`;
    * ``createdAt`` is kept when valid, else stamped now;
    * ``returnedAt`` is kept only on returned records; a returned record without
      a valid one borrows ``createdAt``, and active records never carry one.

    Normalising an already valid record returns an equal record.
    """
    data: Mapping[str, Any]
    if isinstance(raw, ReturnRecord):
        data = {name.name: getattr(raw, name.name) for name in fields(raw)}
    elif isinstance(raw, Mapping):
        data = raw
    else:
        data = {}

    record_id = _coerce_text(_lookup(data, "id")) or generate_record_id()
    purchase_date = _coerce_text(_lookup(data, "purchase_date")) or date.today().isoformat()
    status = _coerce_status(_lookup(data, "status"))
    created_at = _coerce_timestamp(_lookup(data, "created_at")) or _utc_now()
    returned_at: datetime | None = None
    if status is RecordStatus.RETURNED:
        returned_at = _coerce_timestamp(_lookup(data, "returned_at")) or created_at
    return ReturnRecord(
        id=record_id,
        item=_coerce_text(_lookup(data, "item")),
        store=_coerce_text(_lookup(data, "store")),
        purchase_date=purchase_date,
        window_days=_coerce_window_days(_lookup(data, "window_days")),
        notes=_coerce_text(_lookup(data, "notes")),
        status=status,
        created_at=created_at,
        returned_at=returned_at,
    )


def transition_status(
    record: ReturnRecord,
    status: RecordStatus,
    *,
    now: datetime | None = None,
) -> ReturnRecord:
    """Move *record* to *status* in place, keeping ``returned_at`` in lockstep.

    ``returned_at`` is set exactly when the record becomes returned and cleared
    when it goes back to active. Re-marking a returned record keeps the original
    timestamp.
    """
    if status is RecordStatus.RETURNED:
        if record.status is not RecordStatus.RETURNED or record.returned_at is None:
            record.returned_at = now or _utc_now()
        record.status = RecordStatus.RETURNED
    else:
        record.status = RecordStatus.ACTIVE
        record.returned_at = None
    return record


@dataclass(frozen=True, slots=True)
class RecordEdit:
    """Changed fields for an existing record; ``None`` means "leave as is"."""

    item: str | None = None
    store: str | None = None
    purchase_date: str | None = None
    window_days: int | str | None = None
    notes: str | None = None

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller supplied."""
        return {
            name.name: getattr(self, name.name)
            for name in fields(self)
            if getattr(self, name.name) is not None
        }

    def is_empty(self) -> bool:
        return not self.changes()


def apply_edit(record: ReturnRecord, edit: RecordEdit) -> ReturnRecord:
    """Return a normalised copy of *record* with *edit* merged in.

    Identity, creation time, and status fields are carried over untouched.
    """
    merged = replace(record, **edit.changes())
    normalised = normalize_record(merged)
    normalised.id = record.id
    normalised.created_at = record.created_at
    normalised.status = record.status
    normalised.returned_at = record.returned_at
    return normalised


__all__ = [
    "DEFAULT_WINDOW_DAYS",
    "RecordEdit",
    "RecordStatus",
    "ReturnRecord",
    "apply_edit",
    "generate_record_id",
    "normalize_record",
    "transition_status",
]
