from relay.messaging.types import ClientVanishedResponse, ErrorReason, ErrorResponse
from relay.session.lifecycle import handle_disconnect
from relay.session.models import GameInfo
from relay.session.types import Outbound
from relay.tests.mocks import MockConnection

INFO = GameInfo(server_name="Test", max_players=4)


class TestHostDisconnect:
    def test_every_client_told_and_closed(self, registry, host):
        session = registry.create(host, INFO)
        clients = [MockConnection(f"c{i}") for i in range(3)]
        for client in clients:
            registry.join(session.game_id, client)

        deliveries = handle_disconnect(registry, host)

        assert deliveries == [
            Outbound(client, ErrorResponse(reason=ErrorReason.HOST_VANISHED), close=True) for client in clients
        ]

    def test_game_gone_before_notifications(self, registry, host, client):
        session = registry.create(host, INFO)
        registry.join(session.game_id, client)

        handle_disconnect(registry, host)

        assert registry.get(session.game_id) is None
        assert registry.find_by_participant(client.connection_id) is None
        assert registry.list_games() == []

    def test_host_without_clients(self, registry, host):
        registry.create(host, INFO)

        assert handle_disconnect(registry, host) == []
        assert registry.session_count == 0

    def test_other_games_untouched(self, registry, host):
        registry.create(host, INFO, requested_id="AAAA")
        registry.create(MockConnection("other-host"), INFO, requested_id="BBBB")

        handle_disconnect(registry, host)

        assert [entry.game_id for entry in registry.list_games()] == ["BBBB"]


class TestClientDisconnect:
    def test_host_told_client_vanished(self, registry, host, client):
        session = registry.create(host, INFO)
        _, participant = registry.join(session.game_id, client)

        deliveries = handle_disconnect(registry, client)

        assert deliveries == [
            Outbound(host, ClientVanishedResponse(game_id=session.game_id, client_id=participant.participant_id)),
        ]
        assert session.participant_count == 0
        assert registry.get(session.game_id) is session

    def test_remaining_clients_kept(self, registry, host, client):
        session = registry.create(host, INFO)
        registry.join(session.game_id, client)
        other = MockConnection("c2")
        _, remaining = registry.join(session.game_id, other)

        handle_disconnect(registry, client)

        assert list(session.participants.values()) == [remaining]

    def test_second_disconnect_is_noop(self, registry, host, client):
        session = registry.create(host, INFO)
        registry.join(session.game_id, client)

        handle_disconnect(registry, client)

        assert handle_disconnect(registry, client) == []


class TestNoRole:
    def test_unknown_connection(self, registry, client):
        assert handle_disconnect(registry, client) == []
