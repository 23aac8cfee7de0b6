"""Two-tier persistence for the record collection.

The remote JSON endpoint is authoritative when it answers; every failure falls
back to a local key-value file so the user never loses a write. Saves always
replace the whole collection.

Updates:
  v0.4.1 - 2026-10-18 - Empty the legacy slot after migrating it so a later clear sticks.
  v0.4.0 - 2026-07-14 - Serialise saves behind a lock so overlapping writes cannot interleave.
  v0.3.0 - 2026-04-19 - Bound remote requests with a timeout and retry transient failures.
  v0.2.0 - 2026-03-11 - Migrate the legacy local snapshot into the primary store on bootstrap.
  v0.1.0 - 2026-02-04 - Remote store with local fallback.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, Protocol, runtime_checkable

import httpx

from models.return_record import normalize_record

from .exceptions import RecordStorageError, RemoteStoreError
from .retry import retry

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

DEFAULT_STORAGE_KEY = "return-deadline-tracker:v2"
LEGACY_STORAGE_KEY = "return-deadline-tracker:v1"
DEFAULT_REQUEST_TIMEOUT_SECONDS = 5.0

StoreTarget = Literal["remote", "local"]
RecordPayload = dict[str, Any]

logger = logging.getLogger("return_tracker.persistence")


@runtime_checkable
class RecordStore(Protocol):
    """Anything that can load and replace the full record collection."""

    def load(self) -> list[RecordPayload]:
        """Return the stored record mappings."""
        ...

    def save(self, items: Sequence[RecordPayload]) -> None:
        """Replace the stored collection with *items*."""
        ...


def _payload_items(value: object) -> list[RecordPayload]:
    if not isinstance(value, list):
        return []
    return [dict(entry) for entry in value if isinstance(entry, Mapping)]


class RemoteRecordStore:
    """HTTP JSON endpoint answering ``{ok, items}`` on GET and ``{ok}`` on POST."""

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        max_attempts: int = 2,
        client_factory: Callable[[], httpx.Client] | None = None,
    ) -> None:
        self.endpoint = endpoint
        self._timeout = timeout
        self._max_attempts = max_attempts
        self._client_factory = client_factory or self._default_client

    def _default_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self._timeout,
            headers={"Accept": "application/json", "Cache-Control": "no-store"},
        )

    def _request(self, method: str, **kwargs: Any) -> Mapping[str, Any]:
        try:
            with self._client_factory() as client:

                def _send_request() -> httpx.Response:
                    response = client.request(method, self.endpoint, **kwargs)
                    response.raise_for_status()
                    return response

                response = retry(_send_request, max_attempts=self._max_attempts)
        except httpx.HTTPError as exc:
            raise RemoteStoreError(f"Unable to reach {self.endpoint}: {exc}") from exc
        try:
            data = response.json()
        except ValueError as exc:
            raise RemoteStoreError(f"{self.endpoint} returned an invalid response.") from exc
        if not isinstance(data, Mapping) or not data.get("ok"):
            raise RemoteStoreError(f"{self.endpoint} did not acknowledge the request.")
        return data

    def load(self) -> list[RecordPayload]:
        data = self._request("GET", headers={"Cache-Control": "no-store"})
        return _payload_items(data.get("items"))

    def save(self, items: Sequence[RecordPayload]) -> None:
        self._request("POST", json={"items": list(items)})


class LocalBlobStore:
    """A JSON file of named string slots, in the spirit of browser local storage.

    Reads never raise: a missing or corrupt file behaves like an empty store.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        try:
            contents = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.warning("Unable to read local store %s: %s", self.path, exc)
            return {}
        try:
            data = json.loads(contents)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt local store %s", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring local store %s: expected a JSON object", self.path)
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        """Write *value* into slot *key*, replacing the file atomically."""
        slots = self._read_all()
        slots[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(slots, handle, ensure_ascii=False, indent=2)
            os.replace(temp_name, self.path)
        except OSError as exc:
            raise RecordStorageError(f"Unable to write local store {self.path}: {exc}") from exc


class LocalRecordStore:
    """Record collection kept in a single named slot of a :class:`LocalBlobStore`."""

    def __init__(self, blob_store: LocalBlobStore, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._blob_store = blob_store
        self.key = key

    def load(self) -> list[RecordPayload]:
        raw = self._blob_store.get(self.key)
        if raw is None:
            return []
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Local slot %s is not valid JSON; treating it as empty", self.key)
            return []
        if not isinstance(payload, list):
            logger.warning("Local slot %s does not hold a list; treating it as empty", self.key)
            return []
        return _payload_items(payload)

    def save(self, items: Sequence[RecordPayload]) -> None:
        self._blob_store.set(self.key, json.dumps(list(items), ensure_ascii=False))


class PersistenceGateway:
    """Try the remote store first and fall back to the local store."""

    def __init__(
        self,
        local: RecordStore,
        *,
        remote: RecordStore | None = None,
        legacy: RecordStore | None = None,
    ) -> None:
        self._local = local
        self._remote = remote
        self._legacy = legacy
        self._save_lock = threading.Lock()
        self.last_source: StoreTarget | None = None
        self.last_save_target: StoreTarget | None = None

    @property
    def has_remote(self) -> bool:
        return self._remote is not None

    def load(self) -> list[RecordPayload]:
        """Return the collection from the remote store, or the local one on failure."""
        if self._remote is not None:
            try:
                items = self._remote.load()
            except RemoteStoreError as exc:
                logger.warning("Remote load failed, using local store: %s", exc)
            else:
                self.last_source = "remote"
                return items
        self.last_source = "local"
        return self._local.load()

    def save(self, items: Sequence[RecordPayload]) -> StoreTarget:
        """Replace the stored collection with *items* and return where it landed."""
        snapshot = [dict(item) for item in items]
        with self._save_lock:
            if self._remote is not None:
                try:
                    self._remote.save(snapshot)
                except RemoteStoreError as exc:
                    logger.warning("Remote save failed, writing locally: %s", exc)
                else:
                    self.last_save_target = "remote"
                    return "remote"
            self._local.save(snapshot)
            self.last_save_target = "local"
            return "local"

    def bootstrap(self) -> list[RecordPayload]:
        """Load the collection, adopting and emptying the legacy snapshot if the primary is empty."""
        items = self.load()
        if items or self._legacy is None:
            return items
        legacy_items = self._legacy.load()
        if not legacy_items:
            return items
        migrated = [normalize_record(entry).to_record() for entry in legacy_items]
        logger.info("Migrating %d record(s) from the legacy local snapshot", len(migrated))
        self.save(migrated)
        self._legacy.save([])
        return migrated


__all__ = [
    "DEFAULT_REQUEST_TIMEOUT_SECONDS",
    "DEFAULT_STORAGE_KEY",
    "LEGACY_STORAGE_KEY",
    "LocalBlobStore",
    "LocalRecordStore",
    "PersistenceGateway",
    "RecordStore",
    "RemoteRecordStore",
    "StoreTarget",
]
