"""
Tests for ConnectivityMonitor transitions and probing.
"""

from __future__ import annotations

import asyncio
import unittest
from unittest.mock import AsyncMock

from entrance_logger.connectivity import ConnectivityMonitor


class TestConnectivityMonitor(unittest.IsolatedAsyncioTestCase):

    async def test_restored_fires_only_on_offline_to_online(self):
        monitor = ConnectivityMonitor(online=True)
        listener = AsyncMock()
        monitor.add_restored_listener(listener)

        await monitor.async_set_online(True)
        listener.assert_not_awaited()

        await monitor.async_set_online(False)
        self.assertFalse(monitor.is_online)
        listener.assert_not_awaited()

        await monitor.async_set_online(True)
        listener.assert_awaited_once()

    async def test_removed_listener_not_called(self):
        monitor = ConnectivityMonitor(online=False)
        listener = AsyncMock()
        remove = monitor.add_restored_listener(listener)
        remove()
        await monitor.async_set_online(True)
        listener.assert_not_awaited()

    async def test_failing_listener_does_not_block_others(self):
        monitor = ConnectivityMonitor(online=False)
        broken = AsyncMock(side_effect=RuntimeError("boom"))
        healthy = AsyncMock()
        monitor.add_restored_listener(broken)
        monitor.add_restored_listener(healthy)
        with self.assertLogs("entrance_logger.connectivity", level="ERROR"):
            await monitor.async_set_online(True)
        healthy.assert_awaited_once()

    async def test_probe_updates_state(self):
        probe = AsyncMock(side_effect=[False, True])
        monitor = ConnectivityMonitor(probe=probe)
        listener = AsyncMock()
        monitor.add_restored_listener(listener)

        self.assertFalse(await monitor.async_probe())
        self.assertTrue(await monitor.async_probe())
        listener.assert_awaited_once()

    async def test_probe_without_probe_keeps_state(self):
        monitor = ConnectivityMonitor(online=False)
        self.assertFalse(await monitor.async_probe())

    async def test_background_probing_start_stop(self):
        probe = AsyncMock(return_value=True)
        monitor = ConnectivityMonitor(probe=probe, interval=0.01)
        monitor.start()
        await asyncio.sleep(0.05)
        await monitor.async_stop()
        self.assertGreaterEqual(probe.await_count, 1)
        count = probe.await_count
        await asyncio.sleep(0.03)
        self.assertEqual(probe.await_count, count)
