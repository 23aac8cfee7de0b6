"""CLI command handlers for the return tracker.

Updates:
  v0.3.0 - 2026-06-02 - Add the edit command and resolve short id prefixes.
  v0.2.0 - 2026-03-11 - Add return/undo, CSV import/export, and summary commands.
  v0.1.0 - 2026-02-04 - Initial list/add/delete/clear handlers.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from core.deadlines import compute_deadline, today
from core.record_view import SortMode, ViewOptions
from core.tracker import RecordForm
from models.return_record import RecordEdit

from .utils import SHORT_ID_LENGTH, format_record, format_summary, print_and_log

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from core.tracker import ReturnTracker
    from models.return_record import ReturnRecord
else:  # pragma: no cover - runtime placeholders for type-only imports
    ReturnTracker = object

CommandHandler = Callable[[ReturnTracker, argparse.Namespace, logging.Logger], int]

EXIT_INVALID_INPUT = 5
EXIT_STORAGE_FAILURE = 4


@dataclass(frozen=True)
class CommandSpec:
    """Metadata for dispatching CLI command handlers."""

    handler: CommandHandler


def _label(record: ReturnRecord) -> str:
    return f"{record.id[:SHORT_ID_LENGTH]} {record.item}"


def _report_storage(tracker: ReturnTracker, logger: logging.Logger) -> None:
    if tracker.has_remote and tracker.last_save_target == "local":
        print_and_log(logger, logging.WARNING, "Remote store unavailable; changes saved locally.")


def run_list(tracker: ReturnTracker, args: argparse.Namespace, logger: logging.Logger) -> int:
    options = ViewOptions(
        text_filter=getattr(args, "text_filter", "") or "",
        include_returned=bool(getattr(args, "include_returned", False)),
        sort_mode=SortMode.resolve(getattr(args, "sort_mode", SortMode.DUE_ASC)),
    )
    reference = today()
    entries = tracker.view(options, reference_date=reference)
    if entries:
        print(
            "\n\n".join(
                format_record(entry, due_soon_days=tracker.due_soon_days) for entry in entries
            )
        )
    else:
        print("No purchases to show.")
    print()
    print(format_summary(tracker.summary(reference_date=reference)))
    if tracker.has_remote and tracker.load_source == "local":
        print("(Remote store unavailable; showing the local copy.)")
    logger.debug("Listed %d record(s) with %s", len(entries), options)
    return 0


def run_add(tracker: ReturnTracker, args: argparse.Namespace, logger: logging.Logger) -> int:
    form = RecordForm(
        item=args.item,
        purchase_date=args.purchase_date,
        window_days=args.window_days,
        store=args.store or "",
        notes=args.notes or "",
    )
    record = tracker.add(form)
    if record is None:
        print_and_log(logger, logging.ERROR, "No record added: check the item, date, and window.")
        return EXIT_INVALID_INPUT
    due = compute_deadline(record, today()).due
    _report_storage(tracker, logger)
    print_and_log(logger, logging.INFO, f"Added {_label(record)} (return by {due.isoformat()})")
    return 0


def run_edit(tracker: ReturnTracker, args: argparse.Namespace, logger: logging.Logger) -> int:
    record_id = tracker.resolve_id(args.record_id)
    edit = RecordEdit(
        item=args.item,
        store=args.store,
        purchase_date=args.purchase_date,
        window_days=args.window_days,
        notes=args.notes,
    )
    if edit.is_empty():
        print_and_log(logger, logging.ERROR, "Nothing to change: pass at least one field.")
        return EXIT_INVALID_INPUT
    record = tracker.edit(record_id, edit)
    if record is None:
        print_and_log(logger, logging.ERROR, "Record not changed: check the new values.")
        return EXIT_INVALID_INPUT
    _report_storage(tracker, logger)
    print_and_log(logger, logging.INFO, f"Updated {_label(record)}")
    return 0


def run_delete(tracker: ReturnTracker, args: argparse.Namespace, logger: logging.Logger) -> int:
    record = tracker.delete(tracker.resolve_id(args.record_id))
    _report_storage(tracker, logger)
    print_and_log(logger, logging.INFO, f"Deleted {_label(record)}")
    return 0


def run_return(tracker: ReturnTracker, args: argparse.Namespace, logger: logging.Logger) -> int:
    record = tracker.mark_returned(tracker.resolve_id(args.record_id))
    _report_storage(tracker, logger)
    print_and_log(logger, logging.INFO, f"Marked {_label(record)} as returned")
    return 0


def run_undo(tracker: ReturnTracker, args: argparse.Namespace, logger: logging.Logger) -> int:
    record = tracker.undo_return(tracker.resolve_id(args.record_id))
    _report_storage(tracker, logger)
    print_and_log(logger, logging.INFO, f"Moved {_label(record)} back to active")
    return 0


def _confirm_clear(count: int, logger: logging.Logger) -> bool | None:
    """Return the user's answer, or ``None`` when no terminal is available."""
    if not sys.stdin.isatty():
        logger.error("Refusing to clear records without --yes in a non-interactive session.")
        return None
    response = input(f"Remove all {count} record(s)? [y/N]: ").strip().lower()
    return response in {"y", "yes"}


def run_clear(tracker: ReturnTracker, args: argparse.Namespace, logger: logging.Logger) -> int:
    if not getattr(args, "yes", False):
        confirmed = _confirm_clear(len(tracker.records), logger)
        if confirmed is None:
            return EXIT_INVALID_INPUT
        if not confirmed:
            print("Nothing removed.")
            return 0
    removed = tracker.clear()
    _report_storage(tracker, logger)
    print_and_log(logger, logging.INFO, f"Removed {removed} record(s)")
    return 0


def run_import(tracker: ReturnTracker, args: argparse.Namespace, logger: logging.Logger) -> int:
    path = Path(args.path).expanduser()
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        print_and_log(logger, logging.ERROR, f"Unable to read {path}: {exc}")
        return EXIT_INVALID_INPUT
    imported = tracker.import_csv(text)
    _report_storage(tracker, logger)
    print_and_log(logger, logging.INFO, f"Imported {imported} record(s) from {path}")
    return 0


def run_export(tracker: ReturnTracker, args: argparse.Namespace, logger: logging.Logger) -> int:
    path = Path(args.path).expanduser()
    try:
        path.write_text(tracker.export_csv(), encoding="utf-8")
    except OSError as exc:
        print_and_log(logger, logging.ERROR, f"Unable to write {path}: {exc}")
        return EXIT_STORAGE_FAILURE
    print_and_log(logger, logging.INFO, f"Exported {len(tracker.records)} record(s) to {path}")
    return 0


def run_summary(tracker: ReturnTracker, args: argparse.Namespace, logger: logging.Logger) -> int:
    summary = tracker.summary()
    print(format_summary(summary))
    logger.debug("Summary: %s", summary.to_dict())
    return 0


COMMAND_SPECS: dict[str | None, CommandSpec] = {
    None: CommandSpec(run_list),
    "list": CommandSpec(run_list),
    "add": CommandSpec(run_add),
    "edit": CommandSpec(run_edit),
    "delete": CommandSpec(run_delete),
    "return": CommandSpec(run_return),
    "undo": CommandSpec(run_undo),
    "clear": CommandSpec(run_clear),
    "import": CommandSpec(run_import),
    "export": CommandSpec(run_export),
    "summary": CommandSpec(run_summary),
}


__all__ = ["COMMAND_SPECS", "CommandSpec", "EXIT_INVALID_INPUT", "EXIT_STORAGE_FAILURE"]
