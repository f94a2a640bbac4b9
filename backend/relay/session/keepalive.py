"""Periodic liveness probe for every connection known to the registry."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from relay.messaging.protocol import ConnectionProtocol
    from relay.session.registry import SessionRegistry

KEEPALIVE_INTERVAL = 30  # seconds between sweeps

logger = logging.getLogger(__name__)


class KeepaliveMonitor:
    """Ping every host and client on a fixed interval.

    The sweep never touches registry state. A ping that fails closes the
    connection, so a dead peer surfaces through the normal disconnect path
    and its game is cleaned up there.
    """

    def __init__(self, registry: SessionRegistry, interval: float = KEEPALIVE_INTERVAL) -> None:
        self._registry = registry
        self._interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background sweep task."""
        if self._task is not None:
            return
        self._task = asyncio.create_task(self._sweep_loop())

    async def stop(self) -> None:
        """Cancel the sweep task."""
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _sweep_loop(self) -> None:  # pragma: no cover
        while True:
            await asyncio.sleep(self._interval)
            await self.sweep()

    async def sweep(self) -> int:
        """Ping all known connections once. Return how many pings failed."""
        failed = 0
        for connection in self._registry.connections():
            if not await self._ping(connection):
                failed += 1
        if failed:
            logger.info("keepalive sweep: %d connection(s) unreachable", failed)
        return failed

    async def _ping(self, connection: ConnectionProtocol) -> bool:
        try:
            await connection.ping()
        except (ConnectionError, RuntimeError, OSError) as e:
            logger.info("ping failed for %s: %s", connection.connection_id, e)
            with contextlib.suppress(ConnectionError, RuntimeError, OSError):
                await connection.close(code=1001, reason="keepalive_failed")
            return False
        return True
