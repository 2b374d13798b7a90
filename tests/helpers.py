import asyncio
import json


def drain(server, connection_id):
    """Pop every queued outbound frame for a connection."""
    outbox = server.connections.outbox(connection_id)
    messages = []
    if outbox is None:
        return messages
    while True:
        try:
            messages.append(outbox.get_nowait())
        except asyncio.QueueEmpty:
            return messages


def frame(event, data):
    return json.dumps({"type": event, "data": data})
