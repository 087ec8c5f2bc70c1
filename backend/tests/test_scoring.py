import pytest

from inkthink.models import Room
from inkthink.services.games.scoring import (
    NOBODY, apply_penalty, find_winner, is_correct_guess, winner_name,
)


@pytest.mark.parametrize('guess,word,expected', [
    (' Apple ', 'apple', True),
    ('ICE CREAM', 'ice cream', True),
    ('apples', 'apple', False),
    ('', 'apple', False),
    (None, 'apple', False),
    ('apple', None, False),
])
def test_is_correct_guess(guess, word, expected):
    assert is_correct_guess(guess, word) is expected


def test_penalty_floors_at_zero():
    room = Room('r')
    room.scores = {'A': 5, 'B': 30}
    assert apply_penalty(room, 'A', 10) == 0
    assert apply_penalty(room, 'B', 10) == 20
    assert apply_penalty(room, None, 10) is None


def test_tie_goes_to_first_seen():
    assert find_winner({'A': 20, 'B': 20}) == 'A'
    assert find_winner({'B': 20, 'A': 20}) == 'B'
    assert find_winner({'A': 0, 'B': 5, 'C': 5}) == 'B'


def test_winner_name_for_empty_scoreboard():
    room = Room('r')
    assert find_winner(room.scores) is None
    assert winner_name(room) == NOBODY
    room.display_names = {'A': 'alice'}
    room.scores = {'A': 0}
    assert winner_name(room) == 'alice'
