import events
from backend import ConnectionRegistry, Room, RoomRegistry
from constants import ANNOUNCE_VIEWER_DEPARTURE, STRICT_PUBLISHER_JOIN
from errors import RoomAlreadyActive, RoomNotFound, Unauthorized
from logging_config import get_logger

logger = get_logger(__name__)


class LifecycleController:
    """Join, leave, start/stop and disconnect sequences for rooms.

    Per room: no entry -> awaiting viewers (publisher joined) -> live
    (start-stream) -> awaiting viewers (stop-stream), and back to no entry
    when the publisher disconnects.
    """

    def __init__(
        self,
        rooms: RoomRegistry,
        connections: ConnectionRegistry,
        strict_publisher_join: bool = STRICT_PUBLISHER_JOIN,
        announce_viewer_departure: bool = ANNOUNCE_VIEWER_DEPARTURE,
    ):
        self.rooms = rooms
        self.connections = connections
        self.strict_publisher_join = strict_publisher_join
        self.announce_viewer_departure = announce_viewer_departure

    def join_as_publisher(self, connection_id: str, room_id: str) -> Room:
        existing = self.rooms.get_room(room_id)
        if existing is not None and existing.publisher != connection_id and self.strict_publisher_join:
            raise RoomAlreadyActive(room_id)
        room = self.rooms.create_room(room_id, connection_id)
        self.connections.join(connection_id, room_id, events.ROLE_PUBLISHER)
        logger.info(f"Publisher {connection_id} joined room: {room_id}")
        self.connections.send(connection_id, events.PUBLISHER_JOINED, room_id)
        return room

    def join_as_viewer(self, connection_id: str, room_id: str) -> Room:
        room = self.rooms.require_room(room_id)
        if room.publisher == connection_id:
            raise Unauthorized(connection_id, room_id, "join as viewer of its own stream")
        room.viewers.add(connection_id)
        self.connections.join(connection_id, room_id, events.ROLE_VIEWER)
        logger.info(f"Viewer {connection_id} joined room: {room_id}")
        self.connections.send(connection_id, events.VIEWER_JOINED, room_id)
        self.connections.broadcast(room_id, events.VIEWER_CONNECTED, connection_id, exclude=connection_id)
        return room

    def _owned_room(self, connection_id: str, room_id: str, action: str) -> Room:
        room = self.rooms.get_room(room_id)
        if room is None:
            raise RoomNotFound(room_id, notify_sender=False)
        if room.publisher != connection_id:
            raise Unauthorized(connection_id, room_id, action)
        return room

    def start_stream(self, connection_id: str, room_id: str) -> Room:
        room = self._owned_room(connection_id, room_id, "start the stream")
        room.is_live = True
        self.connections.broadcast(room_id, events.STREAM_STARTED, room_id, exclude=connection_id)
        logger.info(f"Stream started in room: {room_id}")
        return room

    def stop_stream(self, connection_id: str, room_id: str) -> Room:
        room = self._owned_room(connection_id, room_id, "stop the stream")
        room.is_live = False
        self.connections.broadcast(room_id, events.STREAM_STOPPED, room_id, exclude=connection_id)
        logger.info(f"Stream stopped in room: {room_id}")
        return room

    def remove_viewer(self, connection_id: str, room_id: str, notify: bool = False) -> bool:
        """Drop a viewer from a room; the publisher is told only when ``notify`` is set."""
        room = self.rooms.get_room(room_id)
        if room is None or connection_id not in room.viewers:
            return False
        room.viewers.discard(connection_id)
        if notify and room.publisher is not None:
            self.connections.send(room.publisher, events.VIEWER_DISCONNECTED, connection_id)
        return True

    def leave_room(self, connection_id: str, room_id: str):
        # Leaving never touches the publisher slot or the live flag,
        # even when the publisher itself leaves.
        room = self.rooms.get_room(room_id)
        if room is None:
            return
        self.remove_viewer(connection_id, room_id, notify=self.announce_viewer_departure)
        self.connections.leave(connection_id, room_id, keep_role=room.publisher == connection_id)
        logger.info(f"User {connection_id} left room: {room_id}")

    def on_disconnect(self, connection_id: str):
        memberships = self.connections.memberships(connection_id)
        for room_id in sorted(memberships):
            room = self.rooms.get_room(room_id)
            if room is None:
                continue
            if room.publisher == connection_id:
                self.connections.send_many(
                    sorted(room.viewers), events.PUBLISHER_DISCONNECTED, exclude=connection_id
                )
                self.rooms.delete_room(room_id)
                logger.info(f"Stream ended in room: {room_id}")
            elif connection_id in room.viewers:
                self.remove_viewer(connection_id, room_id, notify=self.announce_viewer_departure)
        self.connections.unregister(connection_id)
