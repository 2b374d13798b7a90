import pytest

from helpers import drain
from signaling import SignalingServer


@pytest.fixture
def server():
    return SignalingServer(strict_publisher_join=False, announce_viewer_departure=False)


@pytest.fixture
def connect(server):
    """Register a connection under a readable id and discard its welcome frame."""

    def _connect(connection_id):
        connection_id = server.connect(connection_id)
        drain(server, connection_id)
        return connection_id

    return _connect
