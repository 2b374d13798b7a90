import asyncio
import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set

from fastapi import WebSocket

from constants import OUTBOX_MAX_SIZE
from errors import RoomNotFound
from logging_config import get_logger
from schemas.messages import outbound

logger = get_logger(__name__)


@dataclass
class Room:
    room_id: str
    publisher: Optional[str] = None
    viewers: Set[str] = field(default_factory=set)
    is_live: bool = False
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())


class RoomRegistry:
    """In-memory map of room id to Room.

    A room exists exactly while its publisher is connected. All mutation
    happens inside a single message handling step on the event loop.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}

    def create_room(self, room_id: str, publisher: str) -> Room:
        previous = self._rooms.get(room_id)
        if previous is not None:
            logger.warning(
                f"Overwriting room {room_id}: publisher {previous.publisher} replaced by {publisher}, "
                f"{len(previous.viewers)} viewer(s) dropped"
            )
            previous.is_live = False
        room = Room(room_id=room_id, publisher=publisher)
        self._rooms[room_id] = room
        logger.debug(f"Room {room_id} created with publisher {publisher}")
        return room

    def get_room(self, room_id: str) -> Optional[Room]:
        return self._rooms.get(room_id)

    def require_room(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        return room

    def delete_room(self, room_id: str) -> bool:
        room = self._rooms.pop(room_id, None)
        if room is None:
            logger.debug(f"Delete requested for unknown room {room_id}")
            return False
        room.is_live = False
        logger.debug(f"Room {room_id} deleted")
        return True

    def list_rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def clear(self):
        for room in self._rooms.values():
            room.is_live = False
        self._rooms.clear()

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)


class ConnectionRegistry:
    """Live connections, their outboxes and the rooms they are attached to.

    Besides the outbox per connection it keeps two indexes:
    ``room id -> connections`` (the room's message scope) and
    ``connection -> {room id: role}`` for disconnect cleanup.
    """

    def __init__(self, outbox_size: int = OUTBOX_MAX_SIZE):
        self.outbox_size = outbox_size
        self._outboxes: Dict[str, asyncio.Queue] = {}
        self._channels: Dict[str, Set[str]] = {}
        self._memberships: Dict[str, Dict[str, str]] = {}

    def register(self, connection_id: str = None) -> str:
        connection_id = connection_id or str(uuid.uuid4())
        self._outboxes[connection_id] = asyncio.Queue(maxsize=self.outbox_size)
        self._memberships[connection_id] = {}
        logger.debug(f"Registered connection {connection_id} ({len(self._outboxes)} live)")
        return connection_id

    def unregister(self, connection_id: str) -> Dict[str, str]:
        """Forget a connection and detach it from every room scope.

        Returns the ``{room id: role}`` memberships it held.
        """
        memberships = self._memberships.pop(connection_id, {})
        for room_id in memberships:
            self._detach(connection_id, room_id)
        self._outboxes.pop(connection_id, None)
        logger.debug(f"Unregistered connection {connection_id} ({len(self._outboxes)} live)")
        return memberships

    def is_connected(self, connection_id: str) -> bool:
        return connection_id in self._outboxes

    def outbox(self, connection_id: str) -> Optional[asyncio.Queue]:
        return self._outboxes.get(connection_id)

    def join(self, connection_id: str, room_id: str, role: str):
        if connection_id not in self._memberships:
            logger.debug(f"Ignoring join of unknown connection {connection_id} to room {room_id}")
            return
        self._channels.setdefault(room_id, set()).add(connection_id)
        self._memberships[connection_id][room_id] = role

    def leave(self, connection_id: str, room_id: str, keep_role: bool = False):
        """Detach a connection from a room's message scope.

        With ``keep_role`` the {room id: role} record survives, so disconnect
        cleanup still finds the room.
        """
        if connection_id in self._memberships and not keep_role:
            self._memberships[connection_id].pop(room_id, None)
        self._detach(connection_id, room_id)

    def _detach(self, connection_id: str, room_id: str):
        members = self._channels.get(room_id)
        if members is None:
            return
        members.discard(connection_id)
        if not members:
            del self._channels[room_id]

    def memberships(self, connection_id: str) -> Dict[str, str]:
        return dict(self._memberships.get(connection_id, {}))

    def members(self, room_id: str) -> Set[str]:
        return set(self._channels.get(room_id, ()))

    def send(self, connection_id: str, event: str, data: Any = None) -> bool:
        """Queue one event for a connection without waiting for delivery."""
        outbox = self._outboxes.get(connection_id)
        if outbox is None:
            logger.debug(f"Dropping {event} for unknown connection {connection_id}")
            return False
        try:
            outbox.put_nowait(outbound(event, data))
        except asyncio.QueueFull:
            logger.warning(f"Outbox full for connection {connection_id}, dropping {event}")
            return False
        return True

    def send_many(self, connection_ids: Iterable[str], event: str, data: Any = None, exclude: str = None) -> List[str]:
        # iterate over a snapshot of the membership
        recipients = [conn_id for conn_id in list(connection_ids) if conn_id != exclude]
        return [conn_id for conn_id in recipients if self.send(conn_id, event, data)]

    def broadcast(self, room_id: str, event: str, data: Any = None, exclude: str = None) -> List[str]:
        """Send to every connection attached to the room except ``exclude``."""
        delivered = self.send_many(self.members(room_id), event, data, exclude=exclude)
        logger.debug(f"Broadcast {event} to {len(delivered)} connection(s) in room {room_id}")
        return delivered

    async def pump(self, connection_id: str, websocket: WebSocket):
        """Drain a connection's outbox onto its websocket until cancelled.

        After the first failed send the socket is abandoned but the outbox is
        still emptied, so it never fills up before the read loop notices the
        disconnect.
        """
        outbox = self._outboxes.get(connection_id)
        if outbox is None:
            return
        broken = False
        while True:
            message = await outbox.get()
            if broken:
                continue
            try:
                await websocket.send_text(json.dumps(message))
            except Exception as e:
                logger.debug(f"Stopped writing to connection {connection_id}: {e}")
                broken = True

    def clear(self):
        self._outboxes.clear()
        self._channels.clear()
        self._memberships.clear()

    def __len__(self) -> int:
        return len(self._outboxes)
