"""Tests for record normalisation, status transitions, and edits.

Updates:
  v0.2.1 - 2026-10-18 - Cover the status and returnedAt pairing.
  v0.2.0 - 2026-06-02 - Cover RecordEdit merging.
  v0.1.0 - 2026-02-04 - Cover normalisation defaults and idempotence.
"""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest

from models.return_record import (
    DEFAULT_WINDOW_DAYS,
    RecordEdit,
    RecordStatus,
    ReturnRecord,
    apply_edit,
    normalize_record,
    transition_status,
)


def test_normalize_fills_defaults_for_empty_input() -> None:
    """Ensure an empty mapping becomes a valid active record."""
    record = normalize_record({})

    assert record.id
    assert record.item == ""
    assert record.store == ""
    assert record.notes == ""
    assert record.purchase_date == date.today().isoformat()
    assert record.window_days == DEFAULT_WINDOW_DAYS
    assert record.status is RecordStatus.ACTIVE
    assert record.created_at.tzinfo is not None
    assert record.returned_at is None


def test_normalize_ignores_non_mapping_input() -> None:
    """Ensure unexpected input types still yield a record."""
    record = normalize_record(None)  # type: ignore[arg-type]

    assert record.window_days == DEFAULT_WINDOW_DAYS
    assert record.status is RecordStatus.ACTIVE


@pytest.mark.parametrize(
    ("raw_window", "expected"),
    [
        (14, 14),
        ("21", 21),
        (" 7 ", 7),
        (10.9, 10),
        (0, DEFAULT_WINDOW_DAYS),
        (-5, DEFAULT_WINDOW_DAYS),
        ("abc", DEFAULT_WINDOW_DAYS),
        ("", DEFAULT_WINDOW_DAYS),
        (None, DEFAULT_WINDOW_DAYS),
        (True, DEFAULT_WINDOW_DAYS),
        (float("nan"), DEFAULT_WINDOW_DAYS),
    ],
)
def test_normalize_coerces_window_days(raw_window: object, expected: int) -> None:
    """Ensure window days are positive integers or fall back to the default."""
    record = normalize_record({"item": "Lamp", "windowDays": raw_window})

    assert record.window_days == expected


def test_normalize_trims_text_and_keeps_wire_values() -> None:
    """Ensure text fields are trimmed and camelCase keys are honoured."""
    record = normalize_record(
        {
            "id": " abc ",
            "item": "  Widget ",
            "store": " Shop ",
            "purchaseDate": "2025-01-01",
            "notes": 42,
            "status": "returned",
            "returnedAt": "2025-01-05T10:00:00Z",
        }
    )

    assert record.id == "abc"
    assert record.item == "Widget"
    assert record.store == "Shop"
    assert record.notes == "42"
    assert record.purchase_date == "2025-01-01"
    assert record.status is RecordStatus.RETURNED
    assert record.returned_at == datetime(2025, 1, 5, 10, 0, tzinfo=UTC)


def test_normalize_maps_unknown_status_to_active() -> None:
    """Ensure only the literal 'returned' status is treated as returned."""
    assert normalize_record({"status": "RETURNED"}).status is RecordStatus.ACTIVE
    assert normalize_record({"status": "archived"}).status is RecordStatus.ACTIVE


def test_normalize_pairs_status_with_returned_at() -> None:
    """Ensure returnedAt is dropped on active records and filled in on returned ones."""
    created = "2025-01-02T08:00:00+00:00"

    active = normalize_record(
        {"item": "Lamp", "status": "active", "returnedAt": "2025-01-05T10:00:00Z"}
    )
    returned = normalize_record({"item": "Lamp", "status": "returned", "createdAt": created})
    garbled = normalize_record(
        {"item": "Lamp", "status": "returned", "createdAt": created, "returnedAt": "later"}
    )

    assert active.status is RecordStatus.ACTIVE
    assert active.returned_at is None
    assert returned.returned_at == datetime(2025, 1, 2, 8, 0, tzinfo=UTC)
    assert garbled.returned_at == returned.returned_at


def test_normalize_keeps_unparseable_purchase_date() -> None:
    """Ensure a malformed purchase date is preserved rather than replaced."""
    record = normalize_record({"item": "Lamp", "purchaseDate": "not-a-date"})

    assert record.purchase_date == "not-a-date"


def test_normalize_is_idempotent() -> None:
    """Ensure normalising a normalised record changes nothing."""
    first = normalize_record(
        {
            "item": "Headphones",
            "store": "Audio Hut",
            "purchaseDate": "2025-02-10",
            "windowDays": "15",
            "createdAt": "2025-02-10T09:30:00+00:00",
        }
    )

    assert normalize_record(first) == first
    assert normalize_record(first.to_record()) == first


def test_to_record_uses_wire_keys() -> None:
    """Ensure serialised records use the camelCase wire format."""
    record = ReturnRecord(
        id="r1",
        item="Desk",
        purchase_date="2025-03-01",
        created_at=datetime(2025, 3, 1, tzinfo=UTC),
    )

    payload = record.to_record()

    assert payload == {
        "id": "r1",
        "item": "Desk",
        "store": "",
        "purchaseDate": "2025-03-01",
        "windowDays": 30,
        "notes": "",
        "status": "active",
        "createdAt": "2025-03-01T00:00:00+00:00",
        "returnedAt": None,
    }
    assert ReturnRecord.from_record(payload) == record


def test_transition_sets_and_clears_returned_at() -> None:
    """Ensure returned_at follows the status through return and undo."""
    record = normalize_record({"item": "Chair", "purchaseDate": "2025-01-01"})
    stamp = datetime(2025, 1, 10, 8, 0, tzinfo=UTC)

    transition_status(record, RecordStatus.RETURNED, now=stamp)
    assert record.status is RecordStatus.RETURNED
    assert record.returned_at == stamp

    transition_status(record, RecordStatus.RETURNED, now=datetime(2025, 1, 11, tzinfo=UTC))
    assert record.returned_at == stamp

    transition_status(record, RecordStatus.ACTIVE)
    assert record.status is RecordStatus.ACTIVE
    assert record.returned_at is None


def test_apply_edit_merges_changes_and_keeps_identity() -> None:
    """Ensure edits re-normalise changed fields without touching identity or status."""
    original = normalize_record(
        {
            "id": "keep-me",
            "item": "Phone",
            "purchaseDate": "2025-01-01",
            "windowDays": 14,
            "status": "returned",
            "returnedAt": "2025-01-03T00:00:00+00:00",
            "createdAt": "2025-01-01T00:00:00+00:00",
        }
    )

    updated = apply_edit(original, RecordEdit(item="  Phone case ", window_days="0"))

    assert updated.id == "keep-me"
    assert updated.item == "Phone case"
    assert updated.window_days == DEFAULT_WINDOW_DAYS
    assert updated.purchase_date == "2025-01-01"
    assert updated.status is RecordStatus.RETURNED
    assert updated.returned_at == original.returned_at
    assert updated.created_at == original.created_at
    assert original.item == "Phone"


def test_record_edit_reports_only_supplied_fields() -> None:
    """Ensure RecordEdit.changes omits fields left as None."""
    edit = RecordEdit(store="Outlet", notes="")

    assert edit.changes() == {"store": "Outlet", "notes": ""}
    assert not edit.is_empty()
    assert RecordEdit().is_empty()
