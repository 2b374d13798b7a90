import events
from backend import ConnectionRegistry, RoomRegistry
from constants import ANNOUNCE_VIEWER_DEPARTURE, OUTBOX_MAX_SIZE, STRICT_PUBLISHER_JOIN
from errors import SignalingError
from lifecycle import LifecycleController
from logging_config import get_logger
from relay import SignalingRelay
from schemas.messages import parse_message

logger = get_logger(__name__)


class SignalingServer:
    """Owns the room state for one process and routes inbound frames.

    Each call to ``handle_message`` or ``disconnect`` is one step: it runs to
    completion on the event loop without awaiting, so no other handler sees
    a half-applied change. Outbound events are only queued.
    """

    def __init__(
        self,
        strict_publisher_join: bool = STRICT_PUBLISHER_JOIN,
        announce_viewer_departure: bool = ANNOUNCE_VIEWER_DEPARTURE,
        outbox_size: int = OUTBOX_MAX_SIZE,
    ):
        self.rooms = RoomRegistry()
        self.connections = ConnectionRegistry(outbox_size=outbox_size)
        self.relay = SignalingRelay(self.rooms, self.connections)
        self.lifecycle = LifecycleController(
            self.rooms,
            self.connections,
            strict_publisher_join=strict_publisher_join,
            announce_viewer_departure=announce_viewer_departure,
        )
        self._handlers = {
            events.JOIN_AS_PUBLISHER: lambda conn, msg: self.lifecycle.join_as_publisher(conn, msg.data),
            events.JOIN_AS_VIEWER: lambda conn, msg: self.lifecycle.join_as_viewer(conn, msg.data),
            events.START_STREAM: lambda conn, msg: self.lifecycle.start_stream(conn, msg.data),
            events.STOP_STREAM: lambda conn, msg: self.lifecycle.stop_stream(conn, msg.data),
            events.LEAVE_ROOM: lambda conn, msg: self.lifecycle.leave_room(conn, msg.data),
            events.WEBRTC_OFFER: lambda conn, msg: self.relay.relay_offer(conn, msg.data.room_id, msg.data.offer),
            events.WEBRTC_ANSWER: lambda conn, msg: self.relay.relay_answer(conn, msg.data.room_id, msg.data.answer),
            events.ICE_CANDIDATE: lambda conn, msg: self.relay.relay_ice_candidate(
                conn, msg.data.room_id, msg.data.candidate
            ),
        }

    def connect(self, connection_id: str = None) -> str:
        connection_id = self.connections.register(connection_id)
        logger.info(f"User connected: {connection_id}")
        self.connections.send(connection_id, events.CONNECTED, {"connectionId": connection_id})
        return connection_id

    def handle_message(self, connection_id: str, raw: str) -> bool:
        """Parse and route one text frame. Returns False if it was dropped or rejected."""
        try:
            message = parse_message(raw)
        except SignalingError as e:
            logger.debug(f"Dropping frame from {connection_id}: {e}")
            return False
        return self.dispatch(connection_id, message)

    def dispatch(self, connection_id: str, message) -> bool:
        handler = self._handlers[message.type]
        try:
            handler(connection_id, message)
        except SignalingError as e:
            if e.notify_sender:
                logger.info(f"Rejected {message.type} from {connection_id}: {e}")
                self.connections.send(connection_id, events.ERROR, e.message)
            else:
                logger.debug(f"Dropped {message.type} from {connection_id}: {e}")
            return False
        return True

    def disconnect(self, connection_id: str):
        logger.info(f"User disconnected: {connection_id}")
        self.lifecycle.on_disconnect(connection_id)

    def shutdown(self):
        logger.info(f"Shutting down signaling state: {len(self.rooms)} room(s), {len(self.connections)} connection(s)")
        self.rooms.clear()
        self.connections.clear()
