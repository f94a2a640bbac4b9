from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog
from starlette.websockets import WebSocket, WebSocketDisconnect

from relay.messaging.protocol import ConnectionProtocol
from relay.messaging.types import ErrorReason, ErrorResponse
from relay.server.rate_limit import TokenBucket

if TYPE_CHECKING:
    from relay.messaging.router import MessageRouter
    from relay.server.settings import RelayServerSettings

logger = structlog.get_logger()


class WebSocketConnection(ConnectionProtocol):
    def __init__(self, websocket: WebSocket, connection_id: str | None = None) -> None:
        self._websocket = websocket
        self._connection_id = connection_id or str(uuid4())

    @property
    def connection_id(self) -> str:
        return self._connection_id

    async def send_text(self, data: str) -> None:
        try:
            await self._websocket.send_text(data)
        except WebSocketDisconnect:
            raise ConnectionError("WebSocket already disconnected") from None

    async def receive_frame(self) -> str | bytes:
        """Receive the next text or binary frame."""
        message = await self._websocket.receive()
        if message["type"] == "websocket.disconnect":
            raise ConnectionError("WebSocket already disconnected")
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    async def close(self, code: int = 1000, reason: str = "") -> None:
        with contextlib.suppress(WebSocketDisconnect, RuntimeError):
            await self._websocket.close(code=code, reason=reason)


async def websocket_endpoint(
    websocket: WebSocket,
    router: MessageRouter,
    settings: RelayServerSettings,
) -> None:
    await websocket.accept()

    connection = WebSocketConnection(websocket)
    structlog.contextvars.bind_contextvars(connection_id=connection.connection_id)
    logger.info("websocket connected")

    bucket = TokenBucket(rate=settings.rate_limit_per_second, burst=settings.rate_limit_burst)

    try:
        while True:
            frame = await connection.receive_frame()
            if not bucket.consume():
                logger.warning("rate limited")
                await connection.send_message(ErrorResponse(reason=ErrorReason.RATE_LIMITED))
                continue
            await router.handle_message(connection, frame)
    except (WebSocketDisconnect, RuntimeError, ConnectionError):
        pass
    except Exception:  # pragma: no cover
        logger.exception("unexpected error in relay websocket")
    finally:
        logger.info("websocket disconnected")
        await router.handle_disconnect(connection)
        structlog.contextvars.clear_contextvars()
