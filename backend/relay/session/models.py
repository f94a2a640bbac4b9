from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from relay.messaging.types import GameListEntry

if TYPE_CHECKING:
    from relay.messaging.protocol import ConnectionProtocol


@dataclass(frozen=True)
class GameInfo:
    """Metadata a host advertises in the game list.

    Self-reported by the host; player_amount is never reconciled with
    the actual number of connected clients.
    """

    server_name: str
    max_players: int
    player_amount: int = 1
    requires_password: bool = False


@dataclass
class Participant:
    """A client connection that joined a game. The id is unique within its game only."""

    participant_id: str
    connection: ConnectionProtocol

    @property
    def connection_id(self) -> str:
        return self.connection.connection_id


@dataclass
class Session:
    """An advertised game: one fixed host and any number of clients.

    Clients are keyed by participant id and kept in join order.
    """

    game_id: str
    host: ConnectionProtocol
    info: GameInfo
    participants: dict[str, Participant] = field(default_factory=dict)  # participant_id -> Participant

    @property
    def host_connection_id(self) -> str:
        return self.host.connection_id

    @property
    def participant_count(self) -> int:
        return len(self.participants)

    def to_list_entry(self) -> GameListEntry:
        return GameListEntry(
            game_id=self.game_id,
            server_name=self.info.server_name,
            player_amount=self.info.player_amount,
            max_players=self.info.max_players,
            requires_password=self.info.requires_password,
        )
