"""
Trip Store - Holds the canonical trip record and keeps it persisted.

Every edit is merged into the in-memory record first; the local JSON file
is written right away and the remote trip endpoint is updated after a
quiet period. Persistence problems are logged, never rolled back.
"""
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
from pydantic import BaseModel

from ..config import settings
from ..models.families import Family
from ..models.trip import DaySchedule, TripRecord, default_trip_record
from .debounce import DebouncedTask
from .merge import merge, merge_field

logger = logging.getLogger(__name__)


class StoreState(str, Enum):
    """Lifecycle of the store."""
    LOADING = "loading"  # Defaults shown, persisted data not read yet
    READY = "ready"      # Edits merge into the in-memory record


class TripStoreError(Exception):
    """Raised for operations not allowed in the current store state."""


class PersistenceError(Exception):
    """Reading or writing persisted trip data failed."""


class SyncResult(BaseModel):
    """Outcome of an explicit save/load against the remote store."""
    ok: bool
    error: Optional[str] = None


class LocalTripStorage:
    """The whole trip record as one JSON file named after the storage key."""

    def __init__(self, directory: Optional[Path] = None, key: Optional[str] = None):
        self.directory = Path(directory if directory is not None else settings.local_storage_dir)
        self.key = key or settings.storage_key

    @property
    def path(self) -> Path:
        return self.directory / f"{self.key}.json"

    def read(self) -> Optional[dict]:
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
            return json.loads(raw) if raw.strip() else None
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Could not read {self.path}: {e}") from e

    def write(self, data: dict) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Could not write {self.path}: {e}") from e


class RemoteTripClient:
    """Client for the shared ``GET/PUT /api/trip`` endpoint."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url or settings.trip_api_url
        self.timeout = timeout
        self._transport = transport

    async def fetch(self) -> Optional[dict]:
        """The stored record, or None when the server has no data yet."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(self.url)
            except httpx.HTTPError as e:
                raise PersistenceError(f"Network error: {e}") from e
        if response.status_code == 404:
            return None
        if not response.is_success:
            raise PersistenceError(self._error_message(response))
        try:
            data = response.json()
        except ValueError as e:
            raise PersistenceError("Invalid response") from e
        if not isinstance(data, dict) or data.get("message"):
            raise PersistenceError("Invalid response")
        return data

    async def save(self, data: dict) -> None:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.put(self.url, json=data)
            except httpx.HTTPError as e:
                raise PersistenceError(f"Network error: {e}") from e
        if not response.is_success:
            raise PersistenceError(self._error_message(response))

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return body["error"]
        return response.reason_phrase or f"HTTP {response.status_code}"


Listener = Callable[[TripRecord], None]


class TripStore:
    """
    Canonical trip state for one device.

    Starts in LOADING with the default record; ``load`` reads local then
    remote data and moves to READY. Mutations are only accepted when READY.
    """

    def __init__(
        self,
        local: Optional[LocalTripStorage] = None,
        remote: Optional[RemoteTripClient] = None,
        families: Optional[list[Family]] = None,
        save_delay: Optional[float] = None,
    ):
        self.local = local or LocalTripStorage()
        self.remote = remote
        self.state = StoreState.LOADING
        self._record = default_trip_record(families)
        self._listeners: list[Listener] = []
        delay = save_delay if save_delay is not None else settings.save_debounce_seconds
        self._remote_save = DebouncedTask(self._save_remote_quietly, delay)

    @property
    def record(self) -> TripRecord:
        return self._record

    @property
    def is_ready(self) -> bool:
        return self.state == StoreState.READY

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    async def load(self) -> TripRecord:
        """Read local then remote data into the default record and become READY."""
        record = self._record
        try:
            cached = self.local.read()
        except PersistenceError as e:
            logger.warning(f"Failed to load local trip data: {e}")
            cached = None
        if cached:
            record = merge(record, cached)

        if self.remote is not None:
            try:
                remote_data = await self.remote.fetch()
            except PersistenceError as e:
                logger.warning(f"Failed to load remote trip data: {e}")
                remote_data = None
            if remote_data:
                record = merge(record, remote_data)

        self.state = StoreState.READY
        self._set(record, persist_remote=False)
        return record

    def update_field(self, key: str, value: Any) -> TripRecord:
        """Apply a manual edit of one top-level field."""
        self._require_ready()
        return self._set(merge_field(self._record, key, value))

    def update_day_schedule(self, date_key: str, day_schedule: DaySchedule) -> TripRecord:
        self._require_ready()
        return self._set(merge(self._record, {"scheduleByDay": {date_key: day_schedule}}))

    def merge_from_import(self, partial: dict) -> TripRecord:
        self._require_ready()
        return self._set(merge(self._record, partial))

    async def save_to_remote(self) -> SyncResult:
        """Push the current record now (explicit "sync to server")."""
        if self.remote is None:
            return SyncResult(ok=False, error="No trip server configured")
        self._remote_save.cancel()
        await self._remote_save.join()
        try:
            await self.remote.save(self._record.to_json_dict())
        except PersistenceError as e:
            logger.error(f"Failed to save trip data to server: {e}")
            return SyncResult(ok=False, error=str(e))
        return SyncResult(ok=True)

    async def load_from_remote(self) -> SyncResult:
        """Fetch the remote record and merge it over the local one."""
        if self.remote is None:
            return SyncResult(ok=False, error="No trip server configured")
        try:
            remote_data = await self.remote.fetch()
        except PersistenceError as e:
            return SyncResult(ok=False, error=str(e))
        if remote_data is None:
            return SyncResult(ok=False, error="No data on server yet")
        self.state = StoreState.READY
        self._set(merge(self._record, remote_data), persist_remote=False)
        return SyncResult(ok=True)

    async def flush(self) -> None:
        """Run a pending remote save immediately."""
        await self._remote_save.flush()

    def _require_ready(self) -> None:
        if self.state != StoreState.READY:
            raise TripStoreError("Trip data is still loading")

    def _set(self, record: TripRecord, persist_remote: bool = True) -> TripRecord:
        self._record = record
        for listener in list(self._listeners):
            try:
                listener(record)
            except Exception as e:
                logger.error(f"Trip listener failed: {e}")
        self._persist(persist_remote)
        return record

    def _persist(self, persist_remote: bool) -> None:
        try:
            self.local.write(self._record.to_json_dict())
        except PersistenceError as e:
            logger.warning(f"Failed to save trip data: {e}")

        if persist_remote and self.remote is not None:
            try:
                self._remote_save.schedule()
            except RuntimeError:
                logger.warning("No running event loop; remote save skipped")

    async def _save_remote_quietly(self) -> None:
        try:
            await self.remote.save(self._record.to_json_dict())
        except PersistenceError as e:
            logger.warning(f"Failed to save trip data to server: {e}")
        except Exception as e:
            logger.error(f"Unexpected error saving trip data to server: {e}")
