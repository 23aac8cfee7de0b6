"""Argument parser for the return tracker CLI.

Updates:
  v0.3.0 - 2026-06-02 - Add the edit subcommand.
  v0.2.0 - 2026-03-11 - Add return/undo, import/export, and summary subcommands.
  v0.1.0 - 2026-02-04 - Initial list/add/delete/clear subcommands.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import TYPE_CHECKING

from core.record_view import SortMode

if TYPE_CHECKING:
    from collections.abc import Sequence


def _add_record_fields(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--store", default=None, help="Store the item was bought from.")
    parser.add_argument(
        "--date",
        dest="purchase_date",
        default=None,
        help="Purchase date as YYYY-MM-DD.",
    )
    parser.add_argument(
        "--window",
        dest="window_days",
        default=None,
        help="Return window in days.",
    )
    parser.add_argument("--notes", default=None, help="Free-form notes.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="return-tracker",
        description="Track purchases and the date by which each must be returned.",
    )
    parser.add_argument(
        "--logging-config",
        type=Path,
        default=None,
        help="Path to logging configuration file (INI format)",
    )
    parser.add_argument(
        "--print-settings",
        action="store_true",
        help="Print resolved settings and exit",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log INFO messages when no logging configuration file is used.",
    )

    subparsers = parser.add_subparsers(dest="command")

    list_parser = subparsers.add_parser("list", help="List tracked purchases by deadline.")
    list_parser.add_argument(
        "--filter",
        dest="text_filter",
        default="",
        help="Case-insensitive text matched against item, store, and notes.",
    )
    list_parser.add_argument(
        "--include-returned",
        action="store_true",
        help="Also show records already marked as returned.",
    )
    list_parser.add_argument(
        "--sort",
        dest="sort_mode",
        choices=[mode.value for mode in SortMode],
        default=SortMode.DUE_ASC.value,
        help="List order (default: due-asc).",
    )

    add_parser = subparsers.add_parser("add", help="Track a new purchase.")
    add_parser.add_argument("item", help="What was bought.")
    _add_record_fields(add_parser)

    edit_parser = subparsers.add_parser("edit", help="Change fields of a tracked purchase.")
    edit_parser.add_argument("record_id", help="Record id or unique id prefix.")
    edit_parser.add_argument("--item", default=None, help="New item name.")
    _add_record_fields(edit_parser)

    for name, help_text in (
        ("delete", "Remove a tracked purchase."),
        ("return", "Mark a purchase as returned."),
        ("undo", "Move a returned purchase back to active."),
    ):
        command_parser = subparsers.add_parser(name, help=help_text)
        command_parser.add_argument("record_id", help="Record id or unique id prefix.")

    clear_parser = subparsers.add_parser("clear", help="Remove every tracked purchase.")
    clear_parser.add_argument(
        "--yes",
        action="store_true",
        help="Skip the confirmation prompt.",
    )

    import_parser = subparsers.add_parser(
        "import",
        help="Append purchases from a CSV file.",
    )
    import_parser.add_argument("path", type=Path, help="CSV file to import.")

    export_parser = subparsers.add_parser(
        "export",
        help="Write all purchases to a CSV file.",
    )
    export_parser.add_argument(
        "path",
        type=Path,
        nargs="?",
        default=None,
        help="Destination file (defaults to the configured export file name).",
    )

    subparsers.add_parser("summary", help="Show active, due-soon, and late counts.")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed CLI arguments for the return tracker."""
    return build_parser().parse_args(argv)
