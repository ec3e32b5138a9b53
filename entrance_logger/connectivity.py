"""
ConnectivityMonitor — tracks online/offline state and fires a
connectivity-restored signal on every offline → online transition.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from .const import PROBE_INTERVAL

_LOGGER = logging.getLogger(__name__)

RestoredListener = Callable[[], Awaitable[None]]


class ConnectivityMonitor:
    """
    Online/offline state machine.

    State changes come either from the platform (async_set_online) or from a
    periodic probe of the remote store started with start().
    """

    def __init__(
        self,
        probe: Callable[[], Awaitable[bool]] | None = None,
        interval: float = PROBE_INTERVAL,
        online: bool = True,
    ) -> None:
        self._probe = probe
        self._interval = interval
        self._online = online
        self._listeners: list[RestoredListener] = []
        self._task: asyncio.Task | None = None

    @property
    def is_online(self) -> bool:
        return self._online

    @property
    def interval(self) -> float:
        return self._interval


    def add_restored_listener(self, listener: RestoredListener) -> Callable[[], None]:
        """Register listener; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def async_set_online(self, online: bool) -> None:
        """Record the current state; only offline → online notifies listeners."""
        was_online = self._online
        self._online = online
        if was_online and not online:
            _LOGGER.warning("Connection to the remote store lost, working offline")
        if not was_online and online:
            _LOGGER.info("Connection restored")
            results = await asyncio.gather(
                *[listener() for listener in list(self._listeners)],
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, Exception):
                    _LOGGER.error("Connectivity listener failed: %s", result)

    async def async_probe(self) -> bool:
        """Run the probe once and update the state with its answer."""
        if self._probe is None:
            return self._online
        online = await self._probe()
        await self.async_set_online(online)
        return online

    # ------------------------------------------------------------------
    # Background probing
    # ------------------------------------------------------------------

    def start(self) -> None:
        if self._task is None and self._probe is not None:
            self._task = asyncio.ensure_future(self._run())

    async def async_stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            await self.async_probe()
            await asyncio.sleep(self._interval)
