"""Shared builders for relay session tests."""

import json
from typing import Any

from relay.messaging.router import MessageRouter
from relay.tests.mocks import MockConnection


def wire(data: dict[str, Any]) -> str:
    return json.dumps(data)


async def send(router: MessageRouter, connection: MockConnection, data: dict[str, Any]) -> None:
    """Feed one JSON frame from the connection through the router."""
    await router.handle_message(connection, wire(data))


async def host_game(
    router: MessageRouter,
    host: MockConnection,
    game_id: str | None = None,
    **fields: Any,  # noqa: ANN401
) -> str:
    """Create a game from the host connection and return its id."""
    message: dict[str, Any] = {"type": "createGame", "serverName": "Test", "maxPlayers": 4, **fields}
    if game_id is not None:
        message["gameId"] = game_id
    await send(router, host, message)
    created = host.sent_messages[-1]
    assert created["type"] == "gameCreated"
    host.clear()
    return created["gameId"]


async def join_game(router: MessageRouter, host: MockConnection, client: MockConnection, game_id: str) -> str:
    """Join the client to the game and return the client id the host was told about."""
    await send(router, client, {"type": "joinGame", "gameId": game_id})
    new_client = host.sent_messages[-1]
    assert new_client["type"] == "newClient"
    host.clear()
    return new_client["clientId"]
