"""Tests for the remote/local persistence gateway.

Updates:
  v0.3.2 - 2026-10-18 - Cover retry backoff delays and logging.
  v0.3.1 - 2026-10-18 - Cover that a migrated legacy slot is not adopted again.
  v0.3.0 - 2026-07-14 - Cover retries and timeouts against the remote endpoint.
  v0.2.0 - 2026-03-11 - Cover legacy snapshot migration.
  v0.1.0 - 2026-02-04 - Cover remote-first loads and local fallback.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest

import core.retry
from core.exceptions import RecordStorageError, RemoteStoreError
from core.persistence import (
    LocalBlobStore,
    LocalRecordStore,
    PersistenceGateway,
    RecordStore,
    RemoteRecordStore,
)
from core.retry import backoff_delay, is_transient_remote_error, retry

ENDPOINT = "https://tracker.example/api/projects/demo/data"

ITEMS = [{"id": "r1", "item": "Widget", "purchaseDate": "2025-01-01", "windowDays": 30}]


def _client_factory(
    handler: Callable[[httpx.Request], httpx.Response],
) -> Callable[[], httpx.Client]:
    """Return a factory producing clients served by *handler*."""

    def factory() -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(handler))

    return factory


@pytest.fixture(autouse=True)
def _no_backoff(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(core.retry.time, "sleep", lambda _: None)


@pytest.fixture()
def blob_store(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "local_storage.json")


def test_remote_load_returns_items_and_disables_caching() -> None:
    """Ensure GET requests bypass caches and return the item list."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True, "items": ITEMS})

    store = RemoteRecordStore(ENDPOINT, client_factory=_client_factory(handler))

    assert store.load() == ITEMS
    assert seen[0].method == "GET"
    assert str(seen[0].url) == ENDPOINT
    assert seen[0].headers["Cache-Control"] == "no-store"


def test_remote_load_treats_missing_items_as_empty() -> None:
    """Ensure an acknowledged response without a list yields no records."""
    store = RemoteRecordStore(
        ENDPOINT,
        client_factory=_client_factory(lambda _: httpx.Response(200, json={"ok": True})),
    )

    assert store.load() == []


def test_remote_save_posts_full_collection() -> None:
    """Ensure saves POST the whole collection under an items key."""
    bodies: list[Any] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"ok": True})

    store = RemoteRecordStore(ENDPOINT, client_factory=_client_factory(handler))
    store.save(ITEMS)

    assert bodies == [{"items": ITEMS}]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"ok": False}),
        httpx.Response(200, json=["not", "an", "object"]),
        httpx.Response(200, text="<html>oops</html>"),
        httpx.Response(404, json={"ok": True}),
    ],
)
def test_remote_store_rejects_unacknowledged_responses(response: httpx.Response) -> None:
    """Ensure non-ok bodies, invalid JSON, and HTTP errors raise RemoteStoreError."""
    store = RemoteRecordStore(ENDPOINT, client_factory=_client_factory(lambda _: response))

    with pytest.raises(RemoteStoreError):
        store.load()


def test_remote_store_retries_transient_failures() -> None:
    """Ensure a 503 followed by success is retried transparently."""
    responses = [
        httpx.Response(503),
        httpx.Response(200, json={"ok": True, "items": ITEMS}),
    ]
    calls: list[int] = []

    def handler(_: httpx.Request) -> httpx.Response:
        calls.append(1)
        return responses[len(calls) - 1]

    store = RemoteRecordStore(ENDPOINT, max_attempts=2, client_factory=_client_factory(handler))

    assert store.load() == ITEMS
    assert len(calls) == 2


def test_remote_store_timeout_becomes_remote_store_error() -> None:
    """Ensure timeouts are retried and then surface as RemoteStoreError."""
    calls: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        raise httpx.ReadTimeout("timed out", request=request)

    store = RemoteRecordStore(ENDPOINT, max_attempts=3, client_factory=_client_factory(handler))

    with pytest.raises(RemoteStoreError):
        store.load()
    assert len(calls) == 3


def test_retry_stops_on_non_retryable_errors() -> None:
    """Ensure non-transient errors are raised on the first attempt."""
    calls: list[int] = []

    def operation() -> None:
        calls.append(1)
        raise ValueError("boom")

    with pytest.raises(ValueError):
        retry(operation, max_attempts=5)
    assert calls == [1]


def test_retry_backs_off_between_transient_failures(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Ensure each transient failure is logged and followed by a doubling, capped sleep."""
    sleeps: list[float] = []
    monkeypatch.setattr(core.retry.time, "sleep", sleeps.append)
    request = httpx.Request("GET", ENDPOINT)
    outcomes: list[Exception | str] = [
        httpx.ConnectError("refused", request=request),
        httpx.ReadTimeout("slow", request=request),
        "done",
    ]

    def operation() -> str:
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    with caplog.at_level(logging.INFO, logger="return_tracker.retry"):
        assert retry(operation, max_attempts=3) == "done"

    assert sleeps == [0.25, 0.5]
    assert "attempt 1 of 3" in caplog.text
    assert [backoff_delay(attempt) for attempt in (1, 2, 3, 4, 5)] == [0.25, 0.5, 1.0, 2.0, 2.0]


@pytest.mark.parametrize(
    ("status_code", "expected"),
    [(408, True), (429, True), (503, True), (400, False), (404, False)],
)
def test_transient_remote_errors_by_status(status_code: int, expected: bool) -> None:
    """Ensure 408, 429 and 5xx responses are retried while other client errors are not."""
    request = httpx.Request("GET", ENDPOINT)
    response = httpx.Response(status_code, request=request)
    error = httpx.HTTPStatusError("failed", request=request, response=response)

    assert is_transient_remote_error(error) is expected


def test_local_blob_store_round_trips_slots(blob_store: LocalBlobStore) -> None:
    """Ensure slots are written atomically and read back independently."""
    blob_store.set("a", "1")
    blob_store.set("b", "2")

    assert blob_store.get("a") == "1"
    assert blob_store.get("b") == "2"
    assert blob_store.get("missing") is None
    assert json.loads(blob_store.path.read_text(encoding="utf-8")) == {"a": "1", "b": "2"}


def test_local_blob_store_treats_corrupt_file_as_empty(blob_store: LocalBlobStore) -> None:
    """Ensure unreadable JSON does not raise on read."""
    blob_store.path.write_text("{not json", encoding="utf-8")

    assert blob_store.get("anything") is None


def test_local_blob_store_write_failure_raises_storage_error(tmp_path: Path) -> None:
    """Ensure write failures surface as RecordStorageError."""
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")
    store = LocalBlobStore(blocker / "local_storage.json")

    with pytest.raises(RecordStorageError):
        store.set("key", "value")


def test_local_record_store_tolerates_bad_slots(
    blob_store: LocalBlobStore,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Ensure missing, corrupt, or non-list slots load as an empty collection."""
    store = LocalRecordStore(blob_store, "records")
    assert store.load() == []

    blob_store.set("records", "{broken")
    with caplog.at_level(logging.WARNING, logger="return_tracker.persistence"):
        assert store.load() == []
    assert "not valid JSON" in caplog.text

    blob_store.set("records", json.dumps({"items": ITEMS}))
    assert store.load() == []

    store.save(ITEMS)
    assert store.load() == ITEMS


def test_gateway_prefers_remote_when_available(blob_store: LocalBlobStore) -> None:
    """Ensure loads and saves go to the remote store when it answers."""
    remote_items: list[Any] = list(ITEMS)

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            remote_items[:] = json.loads(request.content)["items"]
            return httpx.Response(200, json={"ok": True})
        return httpx.Response(200, json={"ok": True, "items": remote_items})

    local = LocalRecordStore(blob_store)
    gateway = PersistenceGateway(
        local,
        remote=RemoteRecordStore(ENDPOINT, client_factory=_client_factory(handler)),
    )

    assert gateway.has_remote
    assert gateway.load() == ITEMS
    assert gateway.last_source == "remote"
    assert gateway.save([]) == "remote"
    assert remote_items == []
    assert local.load() == []


def test_gateway_falls_back_to_local_on_remote_failure(
    blob_store: LocalBlobStore,
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Ensure remote failures fall back to the local store for loads and saves."""
    local = LocalRecordStore(blob_store)
    local.save(ITEMS)
    gateway = PersistenceGateway(
        local,
        remote=RemoteRecordStore(
            ENDPOINT,
            client_factory=_client_factory(lambda _: httpx.Response(500)),
        ),
    )

    with caplog.at_level(logging.WARNING, logger="return_tracker.persistence"):
        assert gateway.load() == ITEMS
        target = gateway.save([*ITEMS, {"id": "r2", "item": "Gadget"}])

    assert gateway.last_source == "local"
    assert target == "local"
    assert gateway.last_save_target == "local"
    assert len(local.load()) == 2
    assert "Remote load failed" in caplog.text
    assert "Remote save failed" in caplog.text


def test_gateway_without_remote_uses_local(blob_store: LocalBlobStore) -> None:
    """Ensure a local-only gateway never reports a remote source."""
    gateway = PersistenceGateway(LocalRecordStore(blob_store))

    assert not gateway.has_remote
    assert gateway.load() == []
    assert gateway.save(ITEMS) == "local"
    assert gateway.load() == ITEMS


def test_bootstrap_migrates_legacy_snapshot(blob_store: LocalBlobStore) -> None:
    """Ensure the legacy slot is normalised and adopted when the primary is empty."""
    legacy = LocalRecordStore(blob_store, "legacy")
    legacy.save([{"item": "Old lamp", "purchaseDate": "2024-12-01", "windowDays": "bad"}])
    local = LocalRecordStore(blob_store, "current")
    gateway = PersistenceGateway(local, legacy=legacy)

    migrated = gateway.bootstrap()

    assert len(migrated) == 1
    assert migrated[0]["item"] == "Old lamp"
    assert migrated[0]["windowDays"] == 30
    assert migrated[0]["id"]
    assert local.load() == migrated
    assert legacy.load() == []


def test_bootstrap_keeps_primary_when_populated(blob_store: LocalBlobStore) -> None:
    """Ensure the legacy slot is ignored once the primary store has records."""
    legacy = LocalRecordStore(blob_store, "legacy")
    legacy.save([{"item": "Old lamp"}])
    local = LocalRecordStore(blob_store, "current")
    local.save(ITEMS)

    assert PersistenceGateway(local, legacy=legacy).bootstrap() == ITEMS


def test_bootstrap_does_not_restore_legacy_after_clear(blob_store: LocalBlobStore) -> None:
    """Ensure a cleared collection stays empty on the next start."""
    legacy = LocalRecordStore(blob_store, "legacy")
    legacy.save([{"item": "Old lamp"}])
    local = LocalRecordStore(blob_store, "current")
    gateway = PersistenceGateway(local, legacy=legacy)
    assert len(gateway.bootstrap()) == 1

    gateway.save([])

    assert PersistenceGateway(local, legacy=legacy).bootstrap() == []


def test_stores_satisfy_record_store_protocol(blob_store: LocalBlobStore) -> None:
    """Ensure both store implementations match the RecordStore protocol."""
    assert isinstance(LocalRecordStore(blob_store), RecordStore)
    assert isinstance(RemoteRecordStore(ENDPOINT), RecordStore)
