"""Application entry point for the return tracker.

Updates:
  v0.3.1 - 2026-10-18 - Adopt the environment collation locale at startup.
  v0.3.0 - 2026-06-02 - Dispatch the edit command and map tracker errors to exit codes.
  v0.2.0 - 2026-03-11 - Default export paths from settings.
  v0.1.0 - 2026-02-04 - Modular CLI parsing, commands, and logging helpers.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from cli.commands import COMMAND_SPECS, EXIT_INVALID_INPUT, EXIT_STORAGE_FAILURE
from cli.parser import parse_args
from cli.runtime import setup_collation, setup_logging
from cli.settings_summary import print_settings_summary
from config import SettingsError, load_settings
from core import (
    RecordNotFoundError,
    RecordStorageError,
    RecordValidationError,
    ReturnTrackerError,
    build_tracker,
)

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from collections.abc import Sequence

    from config import TrackerSettings
    from core import ReturnTracker


def _initialise_tracker(
    settings: TrackerSettings,
    logger: logging.Logger,
) -> ReturnTracker | None:
    try:
        return build_tracker(settings)
    except ReturnTrackerError as exc:
        logger.error("Failed to initialise the tracker: %s", exc)
        return None


def main(argv: Sequence[str] | None = None) -> int:
    """Entrypoint that wires settings, the tracker, and CLI commands."""
    args = parse_args(argv)
    setup_logging(args.logging_config, verbose=args.verbose)
    setup_collation()

    logger = logging.getLogger("return_tracker.main")
    try:
        settings = load_settings()
    except SettingsError as exc:
        cause = exc.__cause__
        logger.error("Failed to load settings: %s%s", exc, f" ({cause})" if cause else "")
        return 2

    if args.print_settings:
        print_settings_summary(settings)
        return 0

    command = getattr(args, "command", None)
    if command == "export" and args.path is None:
        args.path = Path(settings.export_filename)
    spec = COMMAND_SPECS[command]

    tracker = _initialise_tracker(settings, logger)
    if tracker is None:
        return 3

    try:
        return spec.handler(tracker, args, logger)
    except (RecordNotFoundError, RecordValidationError) as exc:
        logger.error("%s", exc)
        return EXIT_INVALID_INPUT
    except RecordStorageError as exc:
        logger.error("Unable to save records: %s", exc)
        return EXIT_STORAGE_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
