import threading
from typing import Dict, List, Optional


class Room:
    """In-memory state of one lobby/game session.

    Mutated only while holding ``lock``. ``epoch`` moves forward whenever the
    game ends or the room is torn down, so delayed callbacks scheduled under
    an older epoch can tell they are stale.
    """

    def __init__(self, room_id: str, timer=None):
        self.id = room_id
        self.lock = threading.RLock()
        self.members: List[str] = []
        self.display_names: Dict[str, str] = {}
        self.scores: Dict[str, int] = {}
        self.player_order: List[str] = []
        self.drawer: Optional[str] = None
        self.secret_word: Optional[str] = None
        self.round_active = False
        self.game_active = False
        self.round_index = 0
        self.total_rounds = 0
        self.remaining_ms: Optional[int] = None
        self.timer = timer
        self.last_cheat_check_at: Optional[float] = None
        self.epoch = 0

    def add_member(self, sid: str, username: str) -> None:
        if sid not in self.members:
            self.members.append(sid)
        self.display_names[sid] = username

    def has_member(self, sid: str) -> bool:
        return sid in self.members

    def name_of(self, sid: Optional[str]) -> Optional[str]:
        if sid is None:
            return None
        return self.display_names.get(sid, sid)

    def scoreboard(self) -> List[dict]:
        return [{'player': self.name_of(sid), 'score': score} for sid, score in self.scores.items()]

    def cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()

    def to_dict(self):
        # Public view: the secret word is never exposed here
        return {
            'room_id': self.id,
            'players': [self.name_of(sid) for sid in self.members],
            'game_active': self.game_active,
            'round_active': self.round_active,
            'round_index': self.round_index,
            'total_rounds': self.total_rounds,
            'drawer': self.name_of(self.drawer),
            'remaining_ms': self.remaining_ms,
            'scores': self.scoreboard(),
        }
