from typing import Dict, Optional

from inkthink.models import Room

NOBODY = 'Nobody'


def is_correct_guess(guess: Optional[str], word: Optional[str]) -> bool:
    """Case-insensitive comparison after trimming surrounding whitespace."""
    if not guess or not word:
        return False
    return guess.strip().lower() == word.strip().lower()


def award(room: Room, sid: str, points: int) -> int:
    room.scores[sid] = room.scores.get(sid, 0) + points
    return room.scores[sid]


def apply_penalty(room: Room, sid: Optional[str], penalty: int) -> Optional[int]:
    """Subtract ``penalty`` from a player's score, never going below zero.

    Flooring at zero is a product decision shared by the timeout and the
    cheating penalties.
    """
    if sid is None:
        return None
    room.scores[sid] = max(0, room.scores.get(sid, 0) - penalty)
    return room.scores[sid]


def find_winner(scores: Dict[str, int]) -> Optional[str]:
    """Return the id with the strictly highest score.

    Ties go to whoever appears first in ``scores`` (insertion order, i.e.
    player order at game start). Returns None for an empty scoreboard.
    """
    winner = None
    best = None
    for sid, score in scores.items():
        if best is None or score > best:
            best = score
            winner = sid
    return winner


def winner_name(room: Room) -> str:
    winner = find_winner(room.scores)
    if winner is None:
        return NOBODY
    return room.name_of(winner)
