import asyncio
from unittest.mock import patch

from relay.messaging.router import MessageRouter
from relay.tests.helpers import host_game, join_game, send
from relay.tests.mocks import MockConnection


class TestInvalidInput:
    async def test_malformed_json_answers_error_and_keeps_connection(self, router, client):
        await router.handle_message(client, "{not json")

        assert client.sent_messages == [{"type": "error", "reason": "Invalid message"}]
        assert not client.is_closed

    async def test_unknown_type(self, router, client):
        await send(router, client, {"type": "selfDestruct"})

        assert client.sent_messages == [{"type": "error", "reason": "Invalid message"}]

    async def test_binary_frame(self, router, client):
        await router.handle_message(client, b'{"type": "listGames"}')

        assert client.sent_messages == [{"type": "error", "reason": "Invalid message"}]

    async def test_oversized_frame(self, manager, client):
        router = MessageRouter(manager, max_message_size=1024)

        await send(router, client, {"type": "listGames", "padding": "x" * 2000})

        assert client.sent_messages == [{"type": "error", "reason": "Invalid message"}]

    async def test_invalid_message_does_not_change_state(self, router, registry, host):
        await send(router, host, {"type": "createGame", "serverName": "x", "maxPlayers": "four"})

        assert registry.session_count == 0


class TestDispatch:
    async def test_error_sent_before_close(self, router, client):
        await send(router, client, {"type": "joinGame", "gameId": "NOPE"})

        assert client.sent_messages == [{"type": "error", "reason": "No such game"}]
        assert client.is_closed

    async def test_failed_delivery_does_not_abort_step(self, router, registry, host):
        game_id = await host_game(router, host)
        dead = MockConnection("dead")
        alive = MockConnection("alive")
        await join_game(router, host, dead, game_id)
        await join_game(router, host, alive, game_id)
        dead.fail_on_send = True

        await router.handle_disconnect(host)

        assert dead.is_closed
        assert alive.sent_messages == [{"type": "error", "reason": "Host vanished"}]
        assert alive.is_closed
        assert registry.session_count == 0

    async def test_sender_gone_before_reply(self, router, registry, host):
        host.fail_on_send = True

        await send(router, host, {"type": "createGame", "serverName": "x", "maxPlayers": 2})

        assert registry.session_count == 1

    async def test_handler_crash_is_contained(self, router, client):
        with patch.object(router._session_manager, "handle_request", side_effect=ValueError("boom")):
            await send(router, client, {"type": "listGames"})

        assert client.sent_messages == []

        await send(router, client, {"type": "listGames"})
        assert client.sent_messages == [{"type": "gameList", "games": []}]


class TestHostStrayJoin:
    async def test_host_join_keeps_game_and_clients(self, router, registry, host, client):
        game_id = await host_game(router, host, "ABCD")
        await join_game(router, host, client, game_id)

        await send(router, host, {"type": "joinGame", "gameId": game_id})

        assert host.sent_messages == [{"type": "error", "reason": "Already joining this game"}]
        assert not host.is_closed
        assert registry.get("ABCD") is not None
        assert client.sent_messages == []
        assert not client.is_closed

    async def test_client_rejoin_still_closes(self, router, host, client):
        game_id = await host_game(router, host)
        await join_game(router, host, client, game_id)

        await send(router, client, {"type": "joinGame", "gameId": game_id})

        assert client.sent_messages == [{"type": "error", "reason": "Already joining this game"}]
        assert client.is_closed


class TestDisconnect:
    async def test_client_disconnect_notifies_host(self, router, host, client):
        game_id = await host_game(router, host)
        client_id = await join_game(router, host, client, game_id)

        await router.handle_disconnect(client)

        assert host.sent_messages == [{"type": "clientVanished", "gameId": game_id, "clientId": client_id}]

    async def test_disconnect_without_role(self, router, client):
        await router.handle_disconnect(client)

        assert client.sent_messages == []


class TestSerialization:
    async def test_concurrent_creates_with_same_id(self, router, registry):
        hosts = [MockConnection(f"h{i}") for i in range(5)]

        await asyncio.gather(
            *(
                send(router, h, {"type": "createGame", "serverName": "x", "maxPlayers": 2, "gameId": "SAME"})
                for h in hosts
            ),
        )

        created = [h for h in hosts if h.sent_messages[0]["type"] == "gameCreated"]
        rejected = [h for h in hosts if h.sent_messages[0]["type"] == "error"]
        assert len(created) == 1
        assert len(rejected) == 4
        assert all(h.is_closed for h in rejected)
        assert registry.session_count == 1

    async def test_join_racing_host_disconnect(self, router, registry, host, client):
        game_id = await host_game(router, host)

        await asyncio.gather(
            router.handle_disconnect(host),
            send(router, client, {"type": "joinGame", "gameId": game_id}),
        )

        # The disconnect was queued first, so the join finds no game.
        assert client.sent_messages == [{"type": "error", "reason": "No such game"}]
        assert registry.connection_count == 0
