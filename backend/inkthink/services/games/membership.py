import threading
from typing import Dict, List, Optional, Set

from .engine import DRAWER_LEFT, NOT_ENOUGH_PLAYERS


class Membership:
    """Create/join/leave plumbing and the cleanup it triggers in the engine.

    Tracks which rooms each connection joined so an abrupt disconnect runs
    the same cleanup as an explicit leave.
    """

    def __init__(self, engine, username_max_length: int = 20):
        self.engine = engine
        self.username_max_length = username_max_length
        self._rooms_by_sid: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()
        engine.room_closed_listeners.append(self._forget_room)

    @property
    def notifier(self):
        return self.engine.notifier

    def rooms_of(self, sid: str) -> List[str]:
        with self._lock:
            return sorted(self._rooms_by_sid.get(sid, ()))

    def _valid_username(self, username) -> bool:
        return isinstance(username, str) and bool(username.strip()) and len(username) <= self.username_max_length

    def _track(self, sid: str, room_id: str) -> None:
        with self._lock:
            self._rooms_by_sid.setdefault(sid, set()).add(room_id)

    def _untrack(self, sid: str, room_id: str) -> None:
        with self._lock:
            joined = self._rooms_by_sid.get(sid)
            if joined is None:
                return
            joined.discard(room_id)
            if not joined:
                del self._rooms_by_sid[sid]

    def _forget_room(self, room) -> None:
        for sid in set(room.members) | set(room.player_order) | set(room.display_names):
            self._untrack(sid, room.id)

    def create_room(self, sid: str, room_id: Optional[str], username) -> bool:
        if not isinstance(room_id, str) or not room_id.strip():
            self.notifier.error(sid, 'room_id is required')
            return False
        if not self._valid_username(username):
            self.notifier.error(sid, 'Invalid username')
            return False

        room = self.engine.new_room(room_id)
        room.add_member(sid, username)
        room.scores[sid] = 0
        if not self.engine.registry.add_if_absent(room):
            self.notifier.error(sid, 'The room already exists')
            return False
        self._track(sid, room_id)

        self.engine.logger.info(f"[room-created] room={room_id} owner={username}")
        self.notifier.send(sid, 'room_created', {
            'room_id': room_id,
            'username': username,
            'message': 'The room has been created!',
        })
        return True

    def join_room(self, sid: str, room_id: Optional[str], username) -> bool:
        with self.engine.locked(room_id) as room:
            if room is None:
                self.notifier.error(sid, 'This room does not exist')
                return False
            if not self._valid_username(username):
                self.notifier.error(sid, 'Invalid username')
                return False
            if room.game_active:
                self.notifier.error(sid, "Game has already started, you can't join")
                return False
            if room.has_member(sid):
                self.notifier.error(sid, 'You can not join the same room twice!')
                return False

            room.add_member(sid, username)
            self._track(sid, room_id)
            self.engine.logger.info(f"[room-joined] room={room_id} player={username} members={len(room.members)}")
            self.notifier.send(sid, 'room_joined', {
                'room_id': room_id,
                'username': username,
                'players': [room.name_of(p) for p in room.members],
                'message': 'You have joined the room',
            })
            self.notifier.broadcast(room_id, 'message', {
                'message': f'{username} joined room {room_id}',
            }, skip_sid=sid)
            return True

    def leave_room(self, sid: str, room_id: Optional[str]) -> bool:
        """Remove ``sid`` from a room, ending its round or game where needed."""
        self._untrack(sid, room_id)
        engine = self.engine
        with engine.locked(room_id) as room:
            if room is None or not room.has_member(sid):
                return False
            name = room.name_of(sid)

            if room.game_active and room.round_active and room.drawer == sid:
                engine._end_round(room, DRAWER_LEFT)
            if room.game_active and len(room.members) - 1 < engine.rules.min_players:
                engine._end_game(room, NOT_ENOUGH_PLAYERS)

            room.members.remove(sid)
            if not room.game_active:
                # Mid-game departures keep their name and score for the scoreboard
                room.display_names.pop(sid, None)
                room.scores.pop(sid, None)

            engine.logger.info(f"[player-left] room={room_id} player={name} members={len(room.members)}")
            payload = {'player': name, 'message': f'{name} left the game'}
            if engine.registry.get(room_id) is room:
                self.notifier.broadcast(room_id, 'player_left', payload, skip_sid=sid)
            else:
                # The game ended and closed the room, so reach the others directly
                for other in room.members:
                    self.notifier.send(other, 'player_left', payload)

            if not room.members:
                engine.destroy_room(room)
                engine.logger.info(f"[room-deleted] room={room_id}")
            return True

    def disconnect(self, sid: str) -> List[str]:
        left = []
        for room_id in self.rooms_of(sid):
            if self.leave_room(sid, room_id):
                left.append(room_id)
        with self._lock:
            self._rooms_by_sid.pop(sid, None)
        return left
