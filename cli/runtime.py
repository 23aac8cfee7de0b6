"""Runtime boot helpers for the return tracker CLI.

Updates:
  v0.1.2 - 2026-10-18 - Adopt the environment collation locale for store ordering.
  v0.1.1 - 2026-03-11 - Honour --verbose when no logging configuration file exists.
  v0.1.0 - 2026-02-04 - Extract logging configuration helpers.
"""

from __future__ import annotations

import locale
import logging
import logging.config
from pathlib import Path

DEFAULT_LOGGING_CONFIG = Path("config/logging.conf")


def setup_logging(logging_conf_path: Path | None, *, verbose: bool = False) -> None:
    """Configure logging using *logging_conf_path* when available."""
    path = logging_conf_path or DEFAULT_LOGGING_CONFIG
    if path.exists():
        try:
            logging.config.fileConfig(path, disable_existing_loggers=False)
            return
        except (OSError, ValueError, KeyError) as exc:  # pragma: no cover - configuration fallback
            logging.basicConfig(level=logging.WARNING)
            logging.getLogger("return_tracker.runtime").warning(
                "Ignoring invalid logging configuration %s: %s", path, exc
            )
            return
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def setup_collation() -> None:
    """Use the environment's collation locale, keeping the current one if it is unavailable."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        logging.getLogger("return_tracker.runtime").warning(
            "Keeping the default collation locale: %s", exc
        )
