"""In-memory directory of active games and the lookups used to route messages."""

from __future__ import annotations

import logging
import secrets
import string
from typing import TYPE_CHECKING

from relay.session.exceptions import AlreadyJoinedError, DuplicateGameIdError, GameNotFoundError
from relay.session.models import Participant, Session

if TYPE_CHECKING:
    from relay.messaging.protocol import ConnectionProtocol
    from relay.messaging.types import GameListEntry
    from relay.session.models import GameInfo

logger = logging.getLogger(__name__)

ID_ALPHABET = string.ascii_uppercase + string.digits
ID_LENGTH = 4


def random_id() -> str:
    """Draw a short, human-typeable id. Callers must check it against ids in use."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def canonical_game_id(game_id: str) -> str:
    """Game ids are case-insensitive; the stored form is uppercase."""
    return game_id.upper()


class SessionRegistry:
    """Own all active games.

    Purely state management: no I/O and no notifications. Mutations are
    synchronous, so each call is atomic on the event loop; multi-step
    handling is serialized by the caller (MessageRouter).

    Keeps reverse indexes from connection_id to game so that role lookups
    are O(1) and a connection can never hold two roles.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}  # game_id -> Session, in creation order
        self._hosts: dict[str, str] = {}  # host connection_id -> game_id
        self._participants: dict[str, tuple[str, str]] = {}  # connection_id -> (game_id, participant_id)

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    @property
    def connection_count(self) -> int:
        return len(self._hosts) + len(self._participants)

    # --- Lookups ---

    def get(self, game_id: str) -> Session | None:
        return self._sessions.get(canonical_game_id(game_id))

    def find_by_host(self, connection_id: str) -> Session | None:
        game_id = self._hosts.get(connection_id)
        if game_id is None:
            return None
        return self._sessions.get(game_id)

    def find_by_participant(self, connection_id: str) -> tuple[Session, Participant] | None:
        """Resolve a client connection to its game and participant entry."""
        entry = self._participants.get(connection_id)
        if entry is None:
            return None
        game_id, participant_id = entry
        session = self._sessions.get(game_id)
        if session is None:
            return None
        participant = session.participants.get(participant_id)
        if participant is None:
            return None
        return session, participant

    def find_participant(self, host_connection_id: str, participant_id: str) -> tuple[Session, Participant] | None:
        """Resolve a participant id as seen from the host's own game.

        A host can only address clients of its own game, so a hit also
        authorizes the host to act on that client.
        """
        session = self.find_by_host(host_connection_id)
        if session is None:
            return None
        participant = session.participants.get(participant_id)
        if participant is None:
            return None
        return session, participant

    def list_games(self) -> list[GameListEntry]:
        return [session.to_list_entry() for session in self._sessions.values()]

    def connections(self) -> list[ConnectionProtocol]:
        """Snapshot every host and client connection currently known."""
        result: list[ConnectionProtocol] = []
        for session in self._sessions.values():
            result.append(session.host)
            result.extend(p.connection for p in session.participants.values())
        return result

    # --- Mutations ---

    def create(self, host: ConnectionProtocol, info: GameInfo, requested_id: str | None = None) -> Session:
        """Create a game hosted by the given connection.

        A requested id is uppercased and must be unused; otherwise a random
        id is drawn until it does not collide with an active game.
        """
        self._ensure_no_role(host.connection_id)

        if requested_id is not None:
            game_id = canonical_game_id(requested_id)
            if game_id in self._sessions:
                raise DuplicateGameIdError(game_id)
        else:
            game_id = random_id()
            while game_id in self._sessions:
                game_id = random_id()

        session = Session(game_id=game_id, host=host, info=info)
        self._sessions[game_id] = session
        self._hosts[host.connection_id] = game_id
        logger.info("game %s created by %s", game_id, host.connection_id)
        return session

    def update_info(self, host_connection_id: str, info: GameInfo) -> bool:
        """Replace the advertised info of the host's game. Return False if it hosts none."""
        session = self.find_by_host(host_connection_id)
        if session is None:
            return False
        session.info = info
        return True

    def join(self, game_id: str, connection: ConnectionProtocol) -> tuple[Session, Participant]:
        """Add a connection as a client of the given game."""
        session = self.get(game_id)
        if session is None:
            raise GameNotFoundError(canonical_game_id(game_id))

        existing_game = self._role_game_id(connection.connection_id)
        if existing_game is not None:
            raise AlreadyJoinedError(
                connection.connection_id,
                existing_game,
                same_game=existing_game == session.game_id,
            )

        participant_id = random_id()
        while participant_id in session.participants:
            participant_id = random_id()

        participant = Participant(participant_id=participant_id, connection=connection)
        session.participants[participant_id] = participant
        self._participants[connection.connection_id] = (session.game_id, participant_id)
        logger.info("client %s joined game %s", participant_id, session.game_id)
        return session, participant

    def remove_session(self, game_id: str) -> Session | None:
        """Drop a game and every index entry of its host and clients."""
        session = self._sessions.pop(canonical_game_id(game_id), None)
        if session is None:
            return None
        self._hosts.pop(session.host_connection_id, None)
        for participant in session.participants.values():
            self._participants.pop(participant.connection_id, None)
        logger.info("game %s removed", session.game_id)
        return session

    def remove_participant(self, game_id: str, participant_id: str) -> Participant | None:
        session = self.get(game_id)
        if session is None:
            return None
        participant = session.participants.pop(participant_id, None)
        if participant is None:
            return None
        self._participants.pop(participant.connection_id, None)
        return participant

    # --- Internals ---

    def _role_game_id(self, connection_id: str) -> str | None:
        """Return the game the connection hosts or joined, or None if it has no role."""
        game_id = self._hosts.get(connection_id)
        if game_id is not None:
            return game_id
        entry = self._participants.get(connection_id)
        return entry[0] if entry is not None else None

    def _ensure_no_role(self, connection_id: str) -> None:
        existing_game = self._role_game_id(connection_id)
        if existing_game is not None:
            raise AlreadyJoinedError(connection_id, existing_game)
