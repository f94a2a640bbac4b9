"""Abstract connection protocol for JSON text communication."""

from abc import ABC, abstractmethod

from relay.messaging.codec import encode
from relay.messaging.types import PingResponse, RelayResponse


class ConnectionProtocol(ABC):
    """
    Abstract interface for a peer connection.

    This abstraction allows relay logic to be tested without real
    WebSocket connections. Identity is the connection_id; the registry
    never compares connection objects directly.
    """

    @property
    @abstractmethod
    def connection_id(self) -> str:
        """Unique identifier for this connection."""
        ...

    @abstractmethod
    async def send_text(self, data: str) -> None:
        """
        Send a text frame to the peer.

        Raises ConnectionError if the peer is already gone.
        """
        ...

    @abstractmethod
    async def close(self, code: int = 1000, reason: str = "") -> None:
        """
        Close the connection. Closing twice is a no-op.
        """
        ...

    async def send_message(self, response: RelayResponse) -> None:
        """
        Send a typed response to the peer.
        """
        await self.send_text(encode(response))

    async def ping(self) -> None:
        """
        Probe the peer for liveness.

        ASGI has no ping frame, so the default probe is an application-level
        {"type": "ping"} message. Clients must ignore this type; it carries
        no game state. A failed send means the peer is gone.
        """
        await self.send_message(PingResponse())
