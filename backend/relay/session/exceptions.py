"""Typed domain exceptions for relay registry rejections.

Raised by SessionRegistry and converted to error responses by
SessionManager. None of them leave partial state behind.
"""


class RelayError(Exception):
    """Base exception for registry rejections."""


class DuplicateGameIdError(RelayError):
    """A game with the requested id already exists."""

    def __init__(self, game_id: str) -> None:
        super().__init__(f"game {game_id} already exists")
        self.game_id = game_id


class GameNotFoundError(RelayError):
    """No active game has the requested id."""

    def __init__(self, game_id: str) -> None:
        super().__init__(f"game {game_id} not found")
        self.game_id = game_id


class AlreadyJoinedError(RelayError):
    """The connection already hosts a game or is a client of one.

    Attributes:
        connection_id: The connection that attempted to take a second role.
        game_id: The game the connection currently belongs to.
        same_game: True when the connection re-joined the game it is already in.
    """

    def __init__(self, connection_id: str, game_id: str, *, same_game: bool = False) -> None:
        super().__init__(f"connection {connection_id} already belongs to game {game_id}")
        self.connection_id = connection_id
        self.game_id = game_id
        self.same_game = same_game
