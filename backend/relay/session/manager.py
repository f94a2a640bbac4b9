"""Relay protocol state machine: one handler per request type."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from relay.messaging.types import (
    AcceptJoinRequest,
    AcceptJoinResponse,
    CreateGameRequest,
    ErrorReason,
    ErrorResponse,
    GameCreatedResponse,
    GameListResponse,
    JoinGameRequest,
    ListGamesRequest,
    NewClientResponse,
    RejectJoinRequest,
    RejectJoinResponse,
    SignalingToClientResponse,
    SignalingToHostResponse,
    UpdateGameInfoRequest,
    WebrtcSignalingRequest,
)
from relay.session.exceptions import AlreadyJoinedError, DuplicateGameIdError, GameNotFoundError
from relay.session.models import GameInfo
from relay.session.types import Outbound

if TYPE_CHECKING:
    from relay.messaging.protocol import ConnectionProtocol
    from relay.messaging.types import RelayRequest
    from relay.session.registry import SessionRegistry

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Interpret requests against the registry and the sender's role.

    Pure business logic: handlers mutate the registry and return the
    deliveries to perform, in order. No I/O happens here, so a handler
    always runs to completion without yielding to the event loop.
    """

    def __init__(self, registry: SessionRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> SessionRegistry:
        return self._registry

    def handle_request(self, sender: ConnectionProtocol, request: RelayRequest) -> list[Outbound]:
        if isinstance(request, CreateGameRequest):
            return self._handle_create_game(sender, request)
        if isinstance(request, UpdateGameInfoRequest):
            return self._handle_update_game_info(sender, request)
        if isinstance(request, ListGamesRequest):
            return [Outbound(sender, GameListResponse(games=self._registry.list_games()))]
        if isinstance(request, JoinGameRequest):
            return self._handle_join_game(sender, request)
        if isinstance(request, AcceptJoinRequest):
            return self._handle_accept_join(sender, request)
        if isinstance(request, RejectJoinRequest):
            return self._handle_reject_join(sender, request)
        if isinstance(request, WebrtcSignalingRequest):
            return self._handle_signaling(sender, request)
        return []  # pragma: no cover

    def _handle_create_game(self, sender: ConnectionProtocol, request: CreateGameRequest) -> list[Outbound]:
        info = GameInfo(
            server_name=request.server_name,
            max_players=request.max_players,
            requires_password=request.requires_password,
        )
        try:
            session = self._registry.create(sender, info, requested_id=request.game_id)
        except DuplicateGameIdError as e:
            logger.info("create rejected for %s: %s", sender.connection_id, e)
            return _close_with_error(sender, ErrorReason.GAME_ID_TAKEN)
        except AlreadyJoinedError as e:
            # Closing here would tear down the game this connection already hosts.
            logger.info("create rejected for %s: %s", sender.connection_id, e)
            return [Outbound(sender, ErrorResponse(reason=ErrorReason.ALREADY_IN_GAME))]
        return [Outbound(sender, GameCreatedResponse(game_id=session.game_id))]

    def _handle_update_game_info(self, sender: ConnectionProtocol, request: UpdateGameInfoRequest) -> list[Outbound]:
        info = GameInfo(
            server_name=request.server_name,
            max_players=request.max_players,
            player_amount=request.player_amount,
            requires_password=request.requires_password,
        )
        if not self._registry.update_info(sender.connection_id, info):
            logger.info("ignoring game info update from non-host %s", sender.connection_id)
        return []

    def _handle_join_game(self, sender: ConnectionProtocol, request: JoinGameRequest) -> list[Outbound]:
        try:
            session, participant = self._registry.join(request.game_id, sender)
        except GameNotFoundError as e:
            logger.info("join rejected for %s: %s", sender.connection_id, e)
            return _close_with_error(sender, ErrorReason.GAME_NOT_FOUND)
        except AlreadyJoinedError as e:
            logger.info("join rejected for %s: %s", sender.connection_id, e)
            reason = ErrorReason.ALREADY_JOINED if e.same_game else ErrorReason.ALREADY_IN_GAME
            if self._registry.find_by_host(sender.connection_id) is not None:
                # Closing a host would tear down the game it hosts.
                return [Outbound(sender, ErrorResponse(reason=reason))]
            return _close_with_error(sender, reason)
        return [
            Outbound(
                session.host,
                NewClientResponse(
                    game_id=session.game_id,
                    client_id=participant.participant_id,
                    password=request.password,
                ),
            ),
        ]

    def _handle_accept_join(self, sender: ConnectionProtocol, request: AcceptJoinRequest) -> list[Outbound]:
        found = self._registry.find_participant(sender.connection_id, request.client_id)
        if found is None:
            logger.info("acceptJoin from %s names unknown client %s", sender.connection_id, request.client_id)
            return []
        session, participant = found
        return [Outbound(participant.connection, AcceptJoinResponse(game_id=session.game_id))]

    def _handle_reject_join(self, sender: ConnectionProtocol, request: RejectJoinRequest) -> list[Outbound]:
        found = self._registry.find_participant(sender.connection_id, request.client_id)
        if found is None:
            logger.info("rejectJoin from %s names unknown client %s", sender.connection_id, request.client_id)
            return []
        session, participant = found
        return [
            Outbound(
                participant.connection,
                RejectJoinResponse(game_id=session.game_id, reason=request.reason),
            ),
        ]

    def _handle_signaling(self, sender: ConnectionProtocol, request: WebrtcSignalingRequest) -> list[Outbound]:
        """Route by direction: a clientId means host -> that client, no clientId means client -> its host."""
        if request.client_id is not None:
            found = self._registry.find_participant(sender.connection_id, request.client_id)
            if found is None:
                logger.info("signaling from %s names unknown client %s", sender.connection_id, request.client_id)
                return []
            session, participant = found
            return [
                Outbound(
                    participant.connection,
                    SignalingToClientResponse(game_id=session.game_id, **request.payload),
                ),
            ]

        found = self._registry.find_by_participant(sender.connection_id)
        if found is None:
            logger.info("signaling from %s which is not a client of any game", sender.connection_id)
            return []
        session, participant = found
        return [
            Outbound(
                session.host,
                SignalingToHostResponse(
                    game_id=session.game_id,
                    client_id=participant.participant_id,
                    **request.payload,
                ),
            ),
        ]


def _close_with_error(connection: ConnectionProtocol, reason: ErrorReason) -> list[Outbound]:
    return [Outbound(connection, ErrorResponse(reason=reason), close=True)]
