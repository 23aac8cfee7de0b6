"""CSV export and import for tracked returns.

The format is a small RFC 4180 subset: fields containing a comma, a double
quote, or a line break are wrapped in double quotes with inner quotes doubled,
and rows are separated by a single ``\\n``. Quoted fields may span lines.

Updates:
  v0.3.1 - 2026-10-18 - Encode rows with csv.DictWriter.
  v0.3.0 - 2026-06-02 - Split rows on unquoted newlines so multi-line notes survive import.
  v0.2.0 - 2026-03-11 - Export status/returnedAt columns; map import columns by header name.
  v0.1.0 - 2026-02-04 - CSV export with minimal quoting.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import TYPE_CHECKING, Any

from models.return_record import ReturnRecord, generate_record_id, normalize_record

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

CSV_COLUMNS: tuple[str, ...] = (
    "item",
    "store",
    "purchaseDate",
    "windowDays",
    "notes",
    "status",
    "returnedAt",
)
DEFAULT_EXPORT_FILENAME = "return-deadlines.csv"

_BOM = "\ufeff"

logger = logging.getLogger("return_tracker.csv")


def _record_row(record: ReturnRecord) -> dict[str, str]:
    return {
        "item": record.item,
        "store": record.store,
        "purchaseDate": record.purchase_date,
        "windowDays": str(record.window_days),
        "notes": record.notes,
        "status": record.status.value,
        "returnedAt": record.returned_at.isoformat() if record.returned_at else "",
    }


def encode_records(records: Iterable[ReturnRecord]) -> str:
    """Serialise *records* to CSV text, header first, without a trailing newline."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for record in records:
        writer.writerow(_record_row(normalize_record(record)))
    return buffer.getvalue().removesuffix("\n")


def parse_line(line: str) -> list[str]:
    """Split one logical CSV row into its fields.

    Outside quotes a comma ends the field and a double quote opens a quoted
    region; inside, ``""`` is a literal quote and any other quote closes the
    region. Everything else is copied as-is.
    """
    values: list[str] = []
    current: list[str] = []
    in_quotes = False
    index = 0
    length = len(line)
    while index < length:
        char = line[index]
        if in_quotes:
            if char == '"':
                if index + 1 < length and line[index + 1] == '"':
                    current.append('"')
                    index += 2
                    continue
                in_quotes = False
            else:
                current.append(char)
        elif char == ",":
            values.append("".join(current))
            current = []
        elif char == '"':
            in_quotes = True
        else:
            current.append(char)
        index += 1
    values.append("".join(current))
    return values


def split_rows(text: str) -> list[str]:
    """Split CSV *text* into logical rows, keeping newlines inside quoted fields."""
    if text.startswith(_BOM):
        text = text[len(_BOM) :]
    rows: list[str] = []
    current: list[str] = []
    in_quotes = False
    for char in text:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "\n" and not in_quotes:
            rows.append(_strip_carriage_return("".join(current)))
            current = []
            continue
        current.append(char)
    if current:
        rows.append(_strip_carriage_return("".join(current)))
    return rows


def _strip_carriage_return(row: str) -> str:
    return row[:-1] if row.endswith("\r") else row


def _header_index(header_row: str) -> dict[str, int]:
    known = {column.casefold(): column for column in CSV_COLUMNS}
    mapping: dict[str, int] = {}
    for position, name in enumerate(parse_line(header_row)):
        column = known.get(name.strip().casefold())
        if column is not None and column not in mapping:
            mapping[column] = position
    return mapping


def decode_records(text: str) -> list[ReturnRecord]:
    """Parse CSV *text* into new records, each with a freshly generated id.

    Columns are located by header name, so reordered or missing columns are
    fine; a missing column takes the normaliser default. Blank rows are skipped
    and rows without an item are dropped.
    """
    rows = split_rows(text)
    if not rows:
        return []
    columns = _header_index(rows[0])
    if "item" not in columns:
        logger.warning("CSV header has no 'item' column; nothing to import")
        return []

    records: list[ReturnRecord] = []
    dropped = 0
    for row in rows[1:]:
        if not row.strip():
            continue
        values = parse_line(row)
        candidate: dict[str, Any] = {
            column: values[position]
            for column, position in columns.items()
            if position < len(values)
        }
        candidate["id"] = generate_record_id()
        record = normalize_record(candidate)
        if not record.item:
            dropped += 1
            continue
        records.append(record)
    if dropped:
        logger.warning("Skipped %d CSV row(s) without an item", dropped)
    return records


def import_records(
    existing: Sequence[ReturnRecord],
    text: str,
) -> tuple[list[ReturnRecord], int]:
    """Append the records decoded from *text* to *existing*.

    Returns the combined collection and the number of imported records. The
    existing records are never replaced.
    """
    imported = decode_records(text)
    logger.info("Imported %d record(s) from CSV", len(imported))
    return [*existing, *imported], len(imported)


__all__ = [
    "CSV_COLUMNS",
    "DEFAULT_EXPORT_FILENAME",
    "decode_records",
    "encode_records",
    "import_records",
    "parse_line",
    "split_rows",
]
