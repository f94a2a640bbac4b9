"""Cascading cleanup when a host or client connection goes away."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from relay.messaging.types import ClientVanishedResponse, ErrorReason, ErrorResponse
from relay.session.types import Outbound

if TYPE_CHECKING:
    from relay.messaging.protocol import ConnectionProtocol
    from relay.session.registry import SessionRegistry

logger = logging.getLogger(__name__)


def handle_disconnect(registry: SessionRegistry, connection: ConnectionProtocol) -> list[Outbound]:
    """Remove the connection's role from the registry and return the notifications to send.

    A lost host takes its whole game down: every client gets a
    "Host vanished" error and is closed. A lost client only notifies its
    host. A connection with no role is a no-op. The registry is fully
    updated before this returns, so nothing observes a half-removed game.
    """
    session = registry.find_by_host(connection.connection_id)
    if session is not None:
        logger.info(
            "host %s disconnected, removing game %s with %d client(s)",
            connection.connection_id,
            session.game_id,
            session.participant_count,
        )
        registry.remove_session(session.game_id)
        return [
            Outbound(participant.connection, ErrorResponse(reason=ErrorReason.HOST_VANISHED), close=True)
            for participant in session.participants.values()
        ]

    found = registry.find_by_participant(connection.connection_id)
    if found is not None:
        session, participant = found
        logger.info("client %s vanished from game %s", participant.participant_id, session.game_id)
        registry.remove_participant(session.game_id, participant.participant_id)
        return [
            Outbound(
                session.host,
                ClientVanishedResponse(game_id=session.game_id, client_id=participant.participant_id),
            ),
        ]

    return []
