from typing import Optional


class SocketIONotifier:
    """Outbound side of the transport: unicast to a sid or broadcast to a room.

    Uses the server-level ``socketio.emit`` so it works both inside handlers
    and from background tasks.
    """

    def __init__(self, socketio, namespace: str = '/ws'):
        self.socketio = socketio
        self.namespace = namespace

    def send(self, sid: str, event: str, payload: dict) -> None:
        self.socketio.emit(event, payload, to=sid, namespace=self.namespace)

    def broadcast(self, room_id: str, event: str, payload: dict, skip_sid: Optional[str] = None) -> None:
        self.socketio.emit(event, payload, to=room_id, namespace=self.namespace, skip_sid=skip_sid)

    def error(self, sid: str, message: str) -> None:
        self.send(sid, 'error', {'message': message})

    def close_room(self, room_id: str) -> None:
        """Remove every connection from the transport room."""
        self.socketio.server.close_room(room_id, namespace=self.namespace)
