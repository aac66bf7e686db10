import threading
import weakref
from typing import List

from flask import current_app
from sqlalchemy.orm import selectinload

from tally import db
from tally.errors import Conflict, NotFound
from tally.models import Game, Score, utcnow
from tally.realtime import get_broadcaster
from tally.services.rooms import ensure_usable, find_room

# One lock per room code; serializes the active-game check with the insert.
# Entries vanish once no request holds the lock.
_room_locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
_room_locks_guard = threading.Lock()


def _room_lock(code: str) -> threading.Lock:
    with _room_locks_guard:
        lock = _room_locks.get(code)
        if lock is None:
            lock = _room_locks[code] = threading.Lock()
        return lock


def _load_game(game_id: str) -> Game:
    game = (
        Game.query.options(selectinload(Game.scores).selectinload(Score.participant))
        .filter_by(id=game_id)
        .first()
    )
    if not game:
        raise NotFound('Game not found')
    return game


def start_game(code) -> Game:
    """Open a new game with a zero score for everyone currently in the room.

    Participants who join afterwards have no score until the next game.
    """
    room = find_room(code)
    ensure_usable(room)

    with _room_lock(room.code):
        active = Game.query.filter_by(room_id=room.id, ended_at=None).first()
        if active:
            raise Conflict('A game is already in progress for this room')
        game = Game(room_id=room.id, started_at=utcnow())
        game.scores = [Score(participant_id=p.id, value=0) for p in room.participants]
        db.session.add(game)
        db.session.commit()

    current_app.logger.info(f"[game-start] room={room.code} game={game.id} participants={len(game.scores)}")
    payload = game.to_dict()
    get_broadcaster().broadcast(room.code, 'game-started', payload)
    return game


def end_game(game_id: str) -> Game:
    """Stamp ``ended_at`` and announce the final scores.

    Ending a game twice keeps the first timestamp and does not re-broadcast.
    """
    game = _load_game(game_id)
    if not game.is_active:
        current_app.logger.info(f"[game-end] game={game.id} already ended at {game.ended_at}")
        return game

    game.ended_at = utcnow()
    db.session.add(game)
    db.session.commit()

    current_app.logger.info(f"[game-end] room={game.room.code} game={game.id}")
    get_broadcaster().broadcast(game.room.code, 'game-ended', game.to_dict(include_room=True))
    return game


def get_history(code) -> List[Game]:
    """Ended games for the room, most recent first."""
    room = find_room(code)
    return (
        Game.query.options(selectinload(Game.scores).selectinload(Score.participant))
        .filter(Game.room_id == room.id, Game.ended_at.isnot(None))
        .order_by(Game.started_at.desc())
        .all()
    )
