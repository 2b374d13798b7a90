import pytest

from errors import RoomNotFound, Unauthorized
from helpers import drain

OFFER = {"type": "offer", "sdp": "v=0 offer"}
ANSWER = {"type": "answer", "sdp": "v=0 answer"}
CANDIDATE = {"candidate": "candidate:1 1 udp 2122260223 10.0.0.1 5000 typ host", "sdpMid": "0"}


@pytest.fixture
def rooms(server, connect):
    """R1: pub1 with v1, v2. R2: pub2 with v3. Plus an unrelated connection."""
    for conn in ("pub1", "pub2", "v1", "v2", "v3", "outsider"):
        connect(conn)
    server.lifecycle.join_as_publisher("pub1", "R1")
    server.lifecycle.join_as_publisher("pub2", "R2")
    server.lifecycle.join_as_viewer("v1", "R1")
    server.lifecycle.join_as_viewer("v2", "R1")
    server.lifecycle.join_as_viewer("v3", "R2")
    for conn in ("pub1", "pub2", "v1", "v2", "v3", "outsider"):
        drain(server, conn)
    return server


def test_offer_reaches_every_viewer_and_nobody_else(rooms):
    delivered = rooms.relay.relay_offer("pub1", "R1", OFFER)

    assert sorted(delivered) == ["v1", "v2"]
    expected = [{"type": "webrtc-offer", "data": {"offer": OFFER, "publisherId": "pub1"}}]
    assert drain(rooms, "v1") == expected
    assert drain(rooms, "v2") == expected
    for conn in ("pub1", "pub2", "v3", "outsider"):
        assert drain(rooms, conn) == []


@pytest.mark.parametrize("sender", ["v1", "pub2", "outsider"])
def test_offer_from_non_publisher_is_rejected(rooms, sender):
    with pytest.raises(Unauthorized):
        rooms.relay.relay_offer(sender, "R1", OFFER)
    assert drain(rooms, "v1") == []


def test_answer_goes_to_publisher_tagged_with_viewer(rooms):
    delivered = rooms.relay.relay_answer("v2", "R1", ANSWER)

    assert delivered == ["pub1"]
    assert drain(rooms, "pub1") == [{"type": "webrtc-answer", "data": {"answer": ANSWER, "viewerId": "v2"}}]
    assert drain(rooms, "v1") == []


@pytest.mark.parametrize("sender", ["pub1", "v3", "outsider"])
def test_answer_from_non_viewer_is_rejected(rooms, sender):
    with pytest.raises(Unauthorized):
        rooms.relay.relay_answer(sender, "R1", ANSWER)
    assert drain(rooms, "pub1") == []


def test_publisher_candidate_fans_out_to_viewers(rooms):
    rooms.relay.relay_ice_candidate("pub1", "R1", CANDIDATE)

    expected = [{"type": "ice-candidate", "data": {"candidate": CANDIDATE, "fromPublisher": True}}]
    assert drain(rooms, "v1") == expected
    assert drain(rooms, "v2") == expected
    assert drain(rooms, "v3") == []


def test_viewer_candidate_goes_to_publisher(rooms):
    rooms.relay.relay_ice_candidate("v3", "R2", CANDIDATE)

    assert drain(rooms, "pub2") == [
        {"type": "ice-candidate", "data": {"candidate": CANDIDATE, "fromPublisher": False, "viewerId": "v3"}}
    ]
    assert drain(rooms, "pub1") == []


def test_candidate_from_outsider_is_rejected(rooms):
    with pytest.raises(Unauthorized):
        rooms.relay.relay_ice_candidate("outsider", "R1", CANDIDATE)


def test_viewer_of_other_room_cannot_reach_publisher(rooms):
    with pytest.raises(Unauthorized):
        rooms.relay.relay_ice_candidate("v3", "R1", CANDIDATE)
    assert drain(rooms, "pub1") == []


@pytest.mark.parametrize("method, payload", [
    ("relay_offer", OFFER),
    ("relay_answer", ANSWER),
    ("relay_ice_candidate", CANDIDATE),
])
def test_relay_into_missing_room_is_rejected(rooms, method, payload):
    with pytest.raises(RoomNotFound) as exc_info:
        getattr(rooms.relay, method)("pub1", "ghost-room", payload)
    assert exc_info.value.notify_sender is False


def test_offer_skips_viewers_that_left(rooms):
    rooms.lifecycle.leave_room("v1", "R1")

    assert rooms.relay.relay_offer("pub1", "R1", OFFER) == ["v2"]
    assert drain(rooms, "v1") == []
