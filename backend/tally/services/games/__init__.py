"""Game domain services: round lifecycle and scoring.

Imported by the HTTP routes; every state change is committed before it is
broadcast to the room's channel.
"""

from .lifecycle import end_game, get_history, start_game
from .scoring import adjust_score, decrement_score, increment_score

__all__ = [
    'start_game',
    'end_game',
    'get_history',
    'adjust_score',
    'increment_score',
    'decrement_score',
]
