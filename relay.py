from typing import Any, List

import events
from backend import ConnectionRegistry, Room, RoomRegistry
from errors import RoomNotFound, Unauthorized
from logging_config import get_logger

logger = get_logger(__name__)


class SignalingRelay:
    """Forwards negotiation payloads between a room's publisher and its viewers.

    Payloads are opaque and passed through untouched. Only the sender's role
    in the named room is checked. A missing room raises a silent RoomNotFound,
    a sender in the wrong role raises Unauthorized.
    """

    def __init__(self, rooms: RoomRegistry, connections: ConnectionRegistry):
        self.rooms = rooms
        self.connections = connections

    def _room_for(self, sender: str, room_id: str, action: str) -> Room:
        room = self.rooms.get_room(room_id)
        if room is None:
            raise RoomNotFound(room_id, notify_sender=False)
        return room

    def _to_viewers(self, room: Room, sender: str, event: str, data: Any) -> List[str]:
        return self.connections.send_many(sorted(room.viewers), event, data, exclude=sender)

    def _to_publisher(self, room: Room, sender: str, event: str, data: Any) -> List[str]:
        if room.publisher is None:
            return []
        return self.connections.send_many([room.publisher], event, data, exclude=sender)

    def relay_offer(self, sender: str, room_id: str, offer: Any) -> List[str]:
        room = self._room_for(sender, room_id, "send an offer")
        if room.publisher != sender:
            raise Unauthorized(sender, room_id, "send an offer")
        delivered = self._to_viewers(room, sender, events.WEBRTC_OFFER, {"offer": offer, "publisherId": sender})
        logger.debug(f"Relayed offer from {sender} to {len(delivered)} viewer(s) in room {room_id}")
        return delivered

    def relay_answer(self, sender: str, room_id: str, answer: Any) -> List[str]:
        room = self._room_for(sender, room_id, "send an answer")
        if sender not in room.viewers:
            raise Unauthorized(sender, room_id, "send an answer")
        delivered = self._to_publisher(room, sender, events.WEBRTC_ANSWER, {"answer": answer, "viewerId": sender})
        logger.debug(f"Relayed answer from viewer {sender} in room {room_id}")
        return delivered

    def relay_ice_candidate(self, sender: str, room_id: str, candidate: Any) -> List[str]:
        room = self._room_for(sender, room_id, "send an ICE candidate")
        if room.publisher == sender:
            return self._to_viewers(
                room, sender, events.ICE_CANDIDATE, {"candidate": candidate, "fromPublisher": True}
            )
        if sender in room.viewers:
            return self._to_publisher(
                room, sender, events.ICE_CANDIDATE,
                {"candidate": candidate, "fromPublisher": False, "viewerId": sender},
            )
        raise Unauthorized(sender, room_id, "send an ICE candidate")
