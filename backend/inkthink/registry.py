import threading
from typing import Dict, List, Optional

from inkthink.models import Room


class RoomRegistry:
    """Owner of every live Room, keyed by room id.

    The registry lock only guards the mapping itself; operations on a single
    room serialize on ``Room.lock``.
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def get(self, room_id: Optional[str]) -> Optional[Room]:
        if room_id is None:
            return None
        with self._lock:
            return self._rooms.get(room_id)

    def set(self, room: Room) -> None:
        with self._lock:
            self._rooms[room.id] = room

    def add_if_absent(self, room: Room) -> bool:
        """Register ``room`` unless its id is taken. Returns True when added."""
        with self._lock:
            if room.id in self._rooms:
                return False
            self._rooms[room.id] = room
            return True

    def delete(self, room_id: str, room: Optional[Room] = None) -> None:
        """Remove a room. When ``room`` is given, only remove that exact instance."""
        with self._lock:
            current = self._rooms.get(room_id)
            if current is None:
                return
            if room is not None and current is not room:
                return
            del self._rooms[room_id]

    def room_ids(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def __contains__(self, room_id) -> bool:
        with self._lock:
            return room_id in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)
