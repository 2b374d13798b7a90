from constants import ERROR_STREAM_ALREADY_ACTIVE, ERROR_STREAM_NOT_FOUND


class SignalingError(Exception):
    """Base class for failures while handling one inbound message.

    ``notify_sender`` decides whether the sender gets an ``error`` event
    carrying ``message``; otherwise the message is dropped silently.
    """

    notify_sender = False
    message = "Signaling error"

    def __init__(self, detail: str = None):
        super().__init__(detail or self.message)


class RoomNotFound(SignalingError):
    notify_sender = True
    message = ERROR_STREAM_NOT_FOUND

    def __init__(self, room_id: str, notify_sender: bool = True):
        self.room_id = room_id
        self.notify_sender = notify_sender
        super().__init__(f"Room {room_id!r} not found")


class RoomAlreadyActive(SignalingError):
    notify_sender = True
    message = ERROR_STREAM_ALREADY_ACTIVE

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(f"Room {room_id!r} already has a publisher")


class Unauthorized(SignalingError):
    def __init__(self, connection_id: str, room_id: str, action: str):
        self.connection_id = connection_id
        self.room_id = room_id
        self.action = action
        super().__init__(f"Connection {connection_id} may not {action} in room {room_id!r}")


class MalformedMessage(SignalingError):
    pass
