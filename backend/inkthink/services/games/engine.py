"""Game state machine: game start, drawer rotation, rounds and game end.

Every public operation takes the room's lock before touching state, and
re-checks that the room it locked is still the one registered under that id.
Internal ``_`` helpers expect the lock to be held already.
"""
import logging
import random
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional, Sequence

from inkthink.models import Room
from inkthink.words import WORDS
from .scoring import apply_penalty, award, is_correct_guess, winner_name
from .timer import RoundTimer

# Round end reasons
CORRECT = 'correct'
TIMEOUT = 'timeout'
DRAWER_LEFT = 'drawer_left'

# Game end reasons
FINISHED = 'finished'
NOT_ENOUGH_PLAYERS = 'not_enough_players'
NO_PLAYERS_LEFT = 'no_players_left'


@dataclass(frozen=True)
class GameRules:
    round_duration_ms: int = 60000
    tick_ms: int = 1000
    game_start_delay_ms: int = 1500
    next_round_delay_ms: int = 2500
    correct_guess_points: int = 20
    timeout_penalty: int = 10
    cheating_penalty: int = 10
    cheat_check_interval_ms: int = 3000
    min_players: int = 2

    @classmethod
    def from_config(cls, config) -> 'GameRules':
        defaults = cls()
        return cls(
            round_duration_ms=int(config.get('ROUND_DURATION_MS', defaults.round_duration_ms)),
            tick_ms=int(config.get('TIMER_TICK_MS', defaults.tick_ms)),
            game_start_delay_ms=int(config.get('GAME_START_DELAY_MS', defaults.game_start_delay_ms)),
            next_round_delay_ms=int(config.get('NEXT_ROUND_DELAY_MS', defaults.next_round_delay_ms)),
            correct_guess_points=int(config.get('CORRECT_GUESS_POINTS', defaults.correct_guess_points)),
            timeout_penalty=int(config.get('TIMEOUT_PENALTY', defaults.timeout_penalty)),
            cheating_penalty=int(config.get('CHEATING_PENALTY', defaults.cheating_penalty)),
            cheat_check_interval_ms=int(config.get('CHEAT_CHECK_INTERVAL_MS', defaults.cheat_check_interval_ms)),
            min_players=int(config.get('MIN_PLAYERS', defaults.min_players)),
        )


class GameEngine:

    def __init__(self, registry, notifier, scheduler, rules: Optional[GameRules] = None,
                 words: Sequence[str] = WORDS, rng: Optional[random.Random] = None, logger=None):
        self.registry = registry
        self.notifier = notifier
        self.scheduler = scheduler
        self.rules = rules or GameRules()
        self.words = list(words)
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger(__name__)
        # Called with the Room whenever it is torn down
        self.room_closed_listeners = []

    def new_room(self, room_id: str) -> Room:
        room = Room(room_id)
        room.timer = RoundTimer(self.scheduler, self.rules.tick_ms, lock=room.lock)
        return room

    @contextmanager
    def locked(self, room_id: str):
        """Yield the live room under its lock, or None if it no longer exists."""
        room = self.registry.get(room_id)
        if room is None:
            yield None
            return
        with room.lock:
            yield room if self.registry.get(room_id) is room else None

    # ---- client operations ----

    def start_game(self, room_id: str, sid: Optional[str] = None) -> bool:
        with self.locked(room_id) as room:
            if room is None:
                self._reject(sid, 'Room not found')
                return False
            if sid is not None and not room.has_member(sid):
                self._reject(sid, 'You are not in this room')
                return False
            if room.game_active:
                self._reject(sid, 'Game already running.')
                return False
            if len(room.members) < self.rules.min_players:
                self._reject(sid, f'Need at least {self.rules.min_players} players to start the game.')
                return False

            room.player_order = list(room.members)
            room.total_rounds = len(room.player_order)
            room.round_index = 0
            room.scores = {p: 0 for p in room.player_order}
            room.game_active = True
            room.round_active = False
            room.drawer = None
            room.secret_word = None
            room.last_cheat_check_at = None

            self.logger.info(f"[game-start] room={room.id} players={room.total_rounds}")
            self.notifier.broadcast(room.id, 'game_started', {
                'total_rounds': room.total_rounds,
                'players': [room.name_of(p) for p in room.player_order],
                'message': 'The Game has started',
            })
            self._schedule_start_round(room, self.rules.game_start_delay_ms)
            return True

    def start_round(self, room_id: str) -> None:
        with self.locked(room_id) as room:
            if room is None or not room.game_active or room.round_active:
                return
            self._start_round(room)

    def submit_guess(self, room_id: str, sid: str, text: Optional[str]) -> None:
        with self.locked(room_id) as room:
            if room is None:
                self._reject(sid, 'Room not found')
                return
            if not room.has_member(sid):
                self._reject(sid, 'You are not in this room')
                return
            if not room.round_active:
                return
            if sid == room.drawer:
                self._reject(sid, 'Drawer cannot guess')
                return
            if not is_correct_guess(text, room.secret_word):
                self.notifier.send(sid, 'guess_feedback', {'correct': False, 'guess': text})
                return

            award(room, sid, self.rules.correct_guess_points)
            guesser = room.name_of(sid)
            self.logger.info(f"[guess-correct] room={room.id} player={guesser} round={room.round_index}")
            self.notifier.broadcast(room.id, 'correct_guess', {
                'player': guesser,
                'guess': text,
                'message': f'{guesser} guessed correctly.',
            })
            self._end_round(room, CORRECT, winner=guesser)

    def relay_stroke(self, room_id: str, sid: str, stroke) -> bool:
        """Forward a stroke to everyone else, only from the active drawer."""
        with self.locked(room_id) as room:
            if room is None or not room.round_active or room.drawer != sid:
                return False
            self.notifier.broadcast(room.id, 'drawing', {'stroke': stroke}, skip_sid=sid)
            return True

    def end_round(self, room_id: str, reason: str, winner: Optional[str] = None) -> None:
        with self.locked(room_id) as room:
            if room is not None:
                self._end_round(room, reason, winner)

    def end_game(self, room_id: str, reason: str) -> None:
        with self.locked(room_id) as room:
            if room is not None:
                self._end_game(room, reason)

    # ---- transitions (room lock held) ----

    def _start_round(self, room: Room) -> None:
        if len(room.members) < self.rules.min_players:
            self._end_game(room, NOT_ENOUGH_PLAYERS)
            return
        drawer = self._pick_drawer(room)
        if drawer is None:
            self._end_game(room, NO_PLAYERS_LEFT)
            return

        room.drawer = drawer
        room.secret_word = self.rng.choice(self.words)
        room.round_active = True
        room.last_cheat_check_at = None
        room.remaining_ms = self.rules.round_duration_ms

        self.logger.info(
            f"[round-start] room={room.id} round={room.round_index}/{room.total_rounds} drawer={room.name_of(drawer)}"
        )
        self.notifier.send(drawer, 'your_turn', {
            'word': room.secret_word,
            'remaining_ms': room.remaining_ms,
        })
        self.notifier.broadcast(room.id, 'round_started', {
            'round_index': room.round_index,
            'drawer': room.name_of(drawer),
            'remaining_ms': room.remaining_ms,
            'message': 'The round has started!',
        })
        room.timer.arm(
            self.rules.round_duration_ms,
            on_tick=lambda remaining: self._on_timer_tick(room, remaining),
            on_expire=lambda: self._on_timer_expired(room),
        )

    def _pick_drawer(self, room: Room) -> Optional[str]:
        # Departed players are skipped for good: round_index moves past them
        while room.round_index < len(room.player_order):
            candidate = room.player_order[room.round_index]
            if room.has_member(candidate):
                return candidate
            room.round_index += 1
        return None

    def _end_round(self, room: Room, reason: str, winner: Optional[str] = None) -> None:
        if not room.round_active:
            return
        room.round_active = False
        room.cancel_timer()

        if reason == TIMEOUT:
            apply_penalty(room, room.drawer, self.rules.timeout_penalty)

        self.logger.info(f"[round-end] room={room.id} round={room.round_index} reason={reason} winner={winner}")
        self.notifier.broadcast(room.id, 'round_ended', {
            'reason': reason,
            'winner': winner,
            'word': room.secret_word,
            'scores': room.scoreboard(),
            'message': 'The round has ended',
        })

        room.round_index += 1
        if room.round_index >= room.total_rounds:
            self._end_game(room, FINISHED)
            return
        self._schedule_start_round(room, self.rules.next_round_delay_ms)

    def _end_game(self, room: Room, reason: str) -> None:
        room.game_active = False
        room.round_active = False
        winner = winner_name(room)

        self.logger.info(f"[game-end] room={room.id} reason={reason} winner={winner}")
        self.notifier.broadcast(room.id, 'game_ended', {
            'reason': reason,
            'winner': winner,
            'scores': room.scoreboard(),
            'message': f'{winner} won the game. The Game ends here.',
        })
        self.destroy_room(room)

    def destroy_room(self, room: Room) -> None:
        room.cancel_timer()
        if self.registry.get(room.id) is not room:
            return
        room.epoch += 1
        # Detach connections before the id can be reused by a new room
        self.notifier.close_room(room.id)
        self.registry.delete(room.id, room)
        for listener in self.room_closed_listeners:
            listener(room)

    # ---- timer and scheduling ----

    def _on_timer_tick(self, room: Room, remaining_ms: int) -> None:
        room.remaining_ms = remaining_ms
        self.notifier.broadcast(room.id, 'timer_update', {'remaining_ms': remaining_ms})

    def _on_timer_expired(self, room: Room) -> None:
        room.remaining_ms = 0
        self._end_round(room, TIMEOUT)

    def _schedule_start_round(self, room: Room, delay_ms: int) -> None:
        self.scheduler.call_later(delay_ms, self._run_scheduled_round, room, room.epoch)

    def _run_scheduled_round(self, room: Room, epoch: int) -> None:
        with room.lock:
            if self.registry.get(room.id) is not room or room.epoch != epoch:
                self.logger.info(f"[round-abort] room={room.id} stale epoch={epoch}")
                return
            if not room.game_active or room.round_active:
                return
            self._start_round(room)

    def _reject(self, sid: Optional[str], message: str) -> None:
        if sid is not None:
            self.notifier.error(sid, message)
