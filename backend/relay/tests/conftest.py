import pytest

from relay.messaging.router import MessageRouter
from relay.session.manager import SessionManager
from relay.session.registry import SessionRegistry
from relay.tests.mocks import MockConnection


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def manager(registry) -> SessionManager:
    return SessionManager(registry)


@pytest.fixture
def router(manager) -> MessageRouter:
    return MessageRouter(manager)


@pytest.fixture
def host() -> MockConnection:
    return MockConnection("host-conn")


@pytest.fixture
def client() -> MockConnection:
    return MockConnection("client-conn")
