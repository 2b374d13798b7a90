# client -> server
JOIN_AS_PUBLISHER = "join-as-publisher"
JOIN_AS_VIEWER = "join-as-viewer"
WEBRTC_OFFER = "webrtc-offer"  # {roomId, offer}
WEBRTC_ANSWER = "webrtc-answer"  # {roomId, answer}
ICE_CANDIDATE = "ice-candidate"  # {roomId, candidate}
START_STREAM = "start-stream"
STOP_STREAM = "stop-stream"
LEAVE_ROOM = "leave-room"

# server -> client
CONNECTED = "connected"  # {connectionId}
PUBLISHER_JOINED = "publisher-joined"
VIEWER_JOINED = "viewer-joined"
VIEWER_CONNECTED = "viewer-connected"  # viewer connection id
VIEWER_DISCONNECTED = "viewer-disconnected"  # viewer connection id
STREAM_STARTED = "stream-started"
STREAM_STOPPED = "stream-stopped"
PUBLISHER_DISCONNECTED = "publisher-disconnected"
ERROR = "error"

# roles a connection can hold in a room
ROLE_PUBLISHER = "publisher"
ROLE_VIEWER = "viewer"
