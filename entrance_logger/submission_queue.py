"""
OfflineSubmissionQueue — buffers visit records the remote store did not accept
and replays them in order once connectivity returns.

Pure asyncio primitive: the remote write and the persistence layer are injected.
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Any, Awaitable, Callable

from .models import VisitRecord, utc_timestamp
from .storage import LocalStorage

_LOGGER = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class QueuedSubmission:
    """A visit record not yet confirmed by the remote store."""

    record: VisitRecord
    queued_at: str

    @classmethod
    def from_json(cls, data: dict) -> "QueuedSubmission":
        return cls(
            record=VisitRecord.from_json(data.get("record") or {}),
            queued_at=str(data.get("queuedAt") or ""),
        )

    def to_json(self) -> dict:
        return {"record": self.record.to_json(), "queuedAt": self.queued_at}


@dataclasses.dataclass(frozen=True)
class DrainResult:
    synced: int
    remaining: int


class OfflineSubmissionQueue:
    """
    FIFO queue of pending submissions persisted in LocalStorage.

    Entries are never reordered. Drain replays them one at a time from the head
    and stops at the first failure, so a later record is never applied before an
    earlier one. A record whose remote write succeeded but whose removal was not
    persisted (process killed mid-drain) is sent again on the next drain.
    """

    def __init__(
        self,
        storage: LocalStorage,
        submit: Callable[[VisitRecord], Awaitable[Any]],
        on_synced: Callable[[int], Awaitable[None]] | None = None,
    ) -> None:
        self._storage = storage
        self._submit = submit
        self._on_synced = on_synced
        # Single writer for enqueue and drain
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def pending(self) -> list[QueuedSubmission]:
        return [QueuedSubmission.from_json(entry) for entry in self._storage.load_queue()]

    @property
    def records(self) -> list[VisitRecord]:
        return [submission.record for submission in self.pending]

    def __len__(self) -> int:
        return len(self._storage.load_queue())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def async_enqueue(self, record: VisitRecord) -> QueuedSubmission:
        """Append record to the end of the durable queue."""
        submission = QueuedSubmission(record=record, queued_at=record.timestamp or utc_timestamp())
        async with self._lock:
            entries = self._storage.load_queue()
            entries.append(submission.to_json())
            self._storage.save_queue(entries)
            _LOGGER.debug("Queued %s entrance %s (%s pending)", record.building_id, record.entrance, len(entries))
        return submission

    async def async_drain(self) -> DrainResult:
        """
        Replay queued submissions from the head until one fails.

        Persists the unattempted suffix, then calls on_synced when at least one
        submission reached the remote store.
        """
        async with self._lock:
            entries = self._storage.load_queue()
            if not entries:
                return DrainResult(synced=0, remaining=0)

            synced = 0
            for entry in entries:
                submission = QueuedSubmission.from_json(entry)
                try:
                    await self._submit(submission.record)
                except Exception as exc:  # noqa: BLE001
                    _LOGGER.warning(
                        "Replay of %s entrance %s failed, %s submissions stay queued: %s",
                        submission.record.building_id, submission.record.entrance,
                        len(entries) - synced, exc,
                    )
                    break
                synced += 1

            remaining = entries[synced:]
            self._storage.save_queue(remaining)

        if synced:
            _LOGGER.info("Synced %s queued submissions, %s remaining", synced, len(remaining))
            if self._on_synced is not None:
                await self._on_synced(synced)
        return DrainResult(synced=synced, remaining=len(remaining))
