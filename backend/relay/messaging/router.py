from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from relay.messaging.codec import MAX_MESSAGE_SIZE, DecodeError, decode
from relay.messaging.types import ErrorReason, ErrorResponse
from relay.session.lifecycle import handle_disconnect

if TYPE_CHECKING:
    from relay.messaging.protocol import ConnectionProtocol
    from relay.messaging.types import RelayResponse
    from relay.session.manager import SessionManager
    from relay.session.types import Outbound

logger = logging.getLogger(__name__)


class MessageRouter:
    """
    Route inbound frames and disconnects to the session layer.

    Every step (decode, state change, deliveries) runs under one lock, so
    handlers never see another step's intermediate registry state and
    deliveries from different steps never interleave. Can be tested
    without real WebSocket connections.
    """

    def __init__(self, session_manager: SessionManager, *, max_message_size: int = MAX_MESSAGE_SIZE) -> None:
        self._session_manager = session_manager
        self._max_message_size = max_message_size
        self._lock = asyncio.Lock()

    async def handle_message(self, connection: ConnectionProtocol, raw: str | bytes) -> None:
        async with self._lock:
            try:
                request = decode(raw, max_size=self._max_message_size)
            except DecodeError as e:
                logger.warning("invalid message from %s: %s", connection.connection_id, e)
                await self._deliver_safely(connection, ErrorResponse(reason=ErrorReason.INVALID_MESSAGE))
                return

            logger.debug("processing %s from %s", request.type, connection.connection_id)
            try:
                deliveries = self._session_manager.handle_request(connection, request)
            except Exception:
                logger.exception("unexpected error handling %s from %s", request.type, connection.connection_id)
                return
            await self._dispatch(deliveries)

    async def handle_disconnect(self, connection: ConnectionProtocol) -> None:
        async with self._lock:
            deliveries = handle_disconnect(self._session_manager.registry, connection)
            await self._dispatch(deliveries)

    async def _dispatch(self, deliveries: list[Outbound]) -> None:
        for outbound in deliveries:
            if outbound.message is not None:
                await self._deliver_safely(outbound.connection, outbound.message)
            if outbound.close:
                with contextlib.suppress(ConnectionError, RuntimeError, OSError):
                    await outbound.connection.close()

    async def _deliver_safely(self, connection: ConnectionProtocol, message: RelayResponse) -> None:
        """Send to a peer that may already be gone. Its own disconnect path does the cleanup."""
        try:
            await connection.send_message(message)
        except (ConnectionError, RuntimeError, OSError) as e:
            logger.info("delivery to %s failed: %s", connection.connection_id, e)
