"""
Coordinator for the entrance logger.

Responsibilities:
- Hold the session and gate every remote operation behind it.
- Refresh buildings and logs from the remote store, falling back to the cached
  snapshot and then to the bundled building list.
- Log an entrance through a single path: acquire position, apply the record
  optimistically, write it remotely, queue it when the write fails.
- Drain the offline queue when connectivity is restored and refresh afterwards.
- Push ViewData snapshots to listeners on every change.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Callable

from .api.logs import append_log, delete_logs, fetch_all, undo_last_log
from .config import Config
from .connectivity import ConnectivityMonitor
from .const import BUNDLED_BUILDINGS, MESSAGE_LOGGED, MESSAGE_LOGGED_OFFLINE
from .errors import AuthenticationError, NetworkError, RemoteError
from .geolocation import PositionProvider
from .models import Building, VisitRecord
from .session import Session
from .storage import LocalStorage
from .submission_queue import DrainResult, OfflineSubmissionQueue
from .validation import validate_record
from .view_state import ViewData

_LOGGER = logging.getLogger(__name__)

PHASE_UNAUTHENTICATED = "unauthenticated"
PHASE_LOADING = "loading"
PHASE_READY = "ready"

Listener = Callable[[ViewData], None]


@dataclasses.dataclass(frozen=True)
class LogResult:
    """Outcome of logging an entrance; queued results are a soft success."""

    record: VisitRecord
    queued: bool
    message: str


class EntranceLoggerCoordinator:
    """
    Owns the view snapshot, the offline queue and the session.

    Geolocation and validation failures propagate to the caller; remote write
    failures end up in the offline queue; remote read failures put the view in
    degraded mode.
    """

    def __init__(
        self,
        config: Config,
        storage: LocalStorage,
        position_provider: PositionProvider,
        connectivity: ConnectivityMonitor | None = None,
        session: Session | None = None,
    ) -> None:
        self.config = config
        self.storage = storage
        self.position_provider = position_provider
        self.connectivity = connectivity or ConnectivityMonitor()
        self.session = session or Session(config.team_password)
        self.queue = OfflineSubmissionQueue(storage, self._submit, on_synced=self._on_synced)
        self._listeners: list[Listener] = []
        self._remove_restored_listener = self.connectivity.add_restored_listener(self._on_connectivity_restored)

        self.data = ViewData(queued=self.queue.records)

    # ------------------------------------------------------------------
    # Snapshot handling
    # ------------------------------------------------------------------

    @property
    def phase(self) -> str:
        if not self.session.authenticated:
            return PHASE_UNAUTHENTICATED
        return PHASE_LOADING if self.data.loading else PHASE_READY

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register listener for snapshot updates; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def async_set_updated_data(self, data: ViewData) -> None:
        self.data = data
        for listener in list(self._listeners):
            listener(data)

    def set_query(self, query: str) -> None:
        self.async_set_updated_data(dataclasses.replace(self.data, query=query))

    def _sync_queued(self) -> None:
        self.async_set_updated_data(dataclasses.replace(self.data, queued=self.queue.records))

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    async def async_login(self, password: str, display_name: str | None = None) -> bool:
        """Authenticate with the team password and load data on success."""
        if not self.session.login(password, display_name):
            return False
        await self.async_refresh()
        return True

    def logout(self) -> None:
        self.session.logout()
        self.async_set_updated_data(ViewData(queued=self.queue.records))

    def _require_session(self) -> None:
        if not self.session.authenticated:
            raise AuthenticationError("Log in with the team password first")

    # ------------------------------------------------------------------
    # Read path
    # ------------------------------------------------------------------

    async def async_refresh(self) -> None:
        """Reload buildings and logs, degrading to cached then bundled data on failure."""
        self._require_session()
        endpoint = self.config.require_endpoint()
        self.async_set_updated_data(dataclasses.replace(self.data, loading=True))

        try:
            buildings, logs = await fetch_all(endpoint, timeout=self.config.request_timeout)
        except (NetworkError, RemoteError) as exc:
            _LOGGER.warning("Failed to load from remote store, using local data: %s", exc)
            if isinstance(exc, NetworkError):
                await self.connectivity.async_set_online(False)
            cached = self.storage.load_snapshot()
            if cached is not None:
                buildings, logs = cached
            else:
                buildings = [Building.from_json(b) for b in BUNDLED_BUILDINGS]
                logs = []
            self.async_set_updated_data(
                dataclasses.replace(
                    self.data,
                    buildings=buildings,
                    logs=logs,
                    queued=self.queue.records,
                    loading=False,
                    degraded_reason=str(exc),
                )
            )
            return

        self.storage.save_snapshot(buildings, logs)
        self.async_set_updated_data(
            dataclasses.replace(
                self.data,
                buildings=buildings,
                logs=logs,
                queued=self.queue.records,
                loading=False,
                degraded_reason=None,
            )
        )

    # ------------------------------------------------------------------
    # Write path
    # ------------------------------------------------------------------

    def find_building(self, building_id: str) -> Building | None:
        for building in self.data.buildings:
            if building.id == building_id:
                return building
        return None

    async def async_log_entrance(
        self,
        building: Building,
        entrance: int,
        under_construction: bool = False,
        enhanced: bool = False,
    ) -> LogResult:
        """
        Apply record, attempt sync, on failure enqueue.

        The building shows as done from the moment the record exists, whether the
        remote write succeeds or the record is queued.
        """
        self._require_session()
        endpoint = self.config.require_endpoint()

        position = await self.position_provider.async_acquire(enhanced=enhanced)
        record = VisitRecord.create(
            building, entrance, position, self.storage.user_id(), under_construction
        )
        validate_record(record)

        # Optimistic update before the remote write
        self.async_set_updated_data(dataclasses.replace(self.data, logs=[record, *self.data.logs]))

        try:
            await append_log(endpoint, record, timeout=self.config.request_timeout)
        except (NetworkError, RemoteError) as exc:
            _LOGGER.warning("Remote write failed, queueing %s entrance %s: %s", building.id, entrance, exc)
            await self.queue.async_enqueue(record)
            self.async_set_updated_data(
                dataclasses.replace(
                    self.data,
                    logs=[r for r in self.data.logs if r is not record],
                    queued=self.queue.records,
                )
            )
            if isinstance(exc, NetworkError):
                await self.connectivity.async_set_online(False)
            return LogResult(
                record, True, MESSAGE_LOGGED_OFFLINE.format(name=building.name, entrance=entrance)
            )

        return LogResult(record, False, MESSAGE_LOGGED.format(name=building.name, entrance=entrance))

    async def async_delete_logs(
        self, building_id: str, entrance: int | None = None, latest: bool = False
    ) -> int:
        """Delete logs for a building (optionally one entrance or only the latest), then refresh."""
        self._require_session()
        deleted = await delete_logs(
            self.config.require_endpoint(),
            building_id=building_id,
            entrance=entrance,
            latest=latest,
            timeout=self.config.request_timeout,
        )
        await self.async_refresh()
        return deleted

    async def async_undo_last(self) -> int:
        """Delete the latest log across all buildings, then refresh."""
        self._require_session()
        deleted = await undo_last_log(self.config.require_endpoint(), timeout=self.config.request_timeout)
        await self.async_refresh()
        return deleted

    # ------------------------------------------------------------------
    # Offline queue
    # ------------------------------------------------------------------

    async def async_sync(self) -> DrainResult:
        """Replay the offline queue; a full refresh follows when anything synced."""
        self._require_session()
        result = await self.queue.async_drain()
        self._sync_queued()
        return result

    async def _submit(self, record: VisitRecord) -> None:
        await append_log(self.config.require_endpoint(), record, timeout=self.config.request_timeout)

    async def _on_synced(self, count: int) -> None:
        await self.async_refresh()

    async def _on_connectivity_restored(self) -> None:
        if not self.session.authenticated or not len(self.queue):
            return
        await self.async_sync()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def async_shutdown(self) -> None:
        """Release the connectivity listener and stop background probing."""
        self._remove_restored_listener()
        await self.connectivity.async_stop()
