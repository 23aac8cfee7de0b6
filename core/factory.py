"""Factories for constructing ReturnTracker instances from validated settings.

Updates:
  v0.2.0 - 2026-04-19 - Wire timeout/retry settings into the remote store.
  v0.1.0 - 2026-02-04 - Build the persistence gateway and tracker from settings.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .persistence import LocalBlobStore, LocalRecordStore, PersistenceGateway, RemoteRecordStore
from .tracker import ReturnTracker

if TYPE_CHECKING:  # pragma: no cover - typing only
    from collections.abc import Callable

    import httpx

    from config import TrackerSettings
else:  # pragma: no cover - typing only
    TrackerSettings = Any

factory_logger = logging.getLogger("return_tracker.factory")


def build_gateway(
    settings: TrackerSettings,
    *,
    remote_client_factory: Callable[[], httpx.Client] | None = None,
) -> PersistenceGateway:
    """Return the two-tier persistence gateway described by *settings*."""
    blob_store = LocalBlobStore(settings.local_store_path)
    local = LocalRecordStore(blob_store, settings.storage_key)
    legacy = None
    if settings.legacy_storage_key and settings.legacy_storage_key != settings.storage_key:
        legacy = LocalRecordStore(blob_store, settings.legacy_storage_key)

    remote = None
    endpoint = settings.remote_endpoint
    if endpoint:
        remote = RemoteRecordStore(
            endpoint,
            timeout=settings.request_timeout_seconds,
            max_attempts=settings.remote_retry_attempts,
            client_factory=remote_client_factory,
        )
    else:
        factory_logger.info("Remote storage disabled; records stay in %s", blob_store.path)
    return PersistenceGateway(local, remote=remote, legacy=legacy)


def build_tracker(
    settings: TrackerSettings,
    *,
    gateway: PersistenceGateway | None = None,
    remote_client_factory: Callable[[], httpx.Client] | None = None,
    load: bool = True,
) -> ReturnTracker:
    """Return a ReturnTracker configured from validated settings."""
    resolved_gateway = gateway or build_gateway(
        settings,
        remote_client_factory=remote_client_factory,
    )
    tracker = ReturnTracker(resolved_gateway, due_soon_days=settings.due_soon_days)
    if load:
        tracker.load()
    return tracker


__all__ = ["build_gateway", "build_tracker"]
