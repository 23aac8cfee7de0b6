"""Pytest configuration for shared test fixtures and environment hooks.

Updates:
  v0.2.1 - 2026-10-18 - Restore the collation locale after each test.
  v0.2.0 - 2026-03-11 - Add a tracker fixture backed by a temporary local store.
  v0.1.0 - 2026-02-04 - Isolate tests from RETURN_TRACKER_* variables and local config files.
"""

from __future__ import annotations

import locale
import os
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest

from core.persistence import LocalBlobStore, LocalRecordStore, PersistenceGateway
from core.tracker import ReturnTracker

FIXED_NOW = datetime(2025, 1, 20, 12, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Run each test from an empty directory without tracker overrides or locale changes."""
    for name in list(os.environ):
        if name.upper().startswith("RETURN_TRACKER_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    setlocale = locale.setlocale
    collation = setlocale(locale.LC_COLLATE)
    yield
    setlocale(locale.LC_COLLATE, collation)


@pytest.fixture()
def local_gateway(tmp_path: Path) -> PersistenceGateway:
    """Return a local-only gateway writing to a temporary store file."""
    blob_store = LocalBlobStore(tmp_path / "store" / "local_storage.json")
    return PersistenceGateway(LocalRecordStore(blob_store))


@pytest.fixture()
def tracker(local_gateway: PersistenceGateway) -> ReturnTracker:
    """Return an empty tracker with a fixed clock."""
    return ReturnTracker(local_gateway, clock=lambda: FIXED_NOW)
