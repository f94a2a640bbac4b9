from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from relay.messaging.protocol import ConnectionProtocol
    from relay.messaging.types import RelayResponse


@dataclass(frozen=True)
class Outbound:
    """One delivery produced by a handler: a message, a close, or both (message first)."""

    connection: ConnectionProtocol
    message: RelayResponse | None = None
    close: bool = False
