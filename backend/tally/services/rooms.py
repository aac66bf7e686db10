import re
from datetime import timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from tally import db
from tally.errors import Expired, NotFound, StoreError, ValidationError
from tally.models import Game, Participant, Room, Score, generate_room_code, utcnow
from tally.realtime import get_broadcaster

CODE_PATTERN = re.compile(r'^[0-9]{4}$')
MAX_NAME_LENGTH = 64


def validate_code(code) -> str:
    code = (code or '').strip() if isinstance(code, str) else ''
    if not CODE_PATTERN.match(code):
        raise ValidationError('Room code must be 4 digits')
    return code


def create_room() -> Room:
    """Create an active room under a fresh 4-digit code.

    Codes held by any stored room are skipped; a code taken between the check
    and the commit shows up as an IntegrityError and is redrawn.
    """
    ttl = timedelta(hours=int(current_app.config.get('ROOM_TTL_HOURS', 24)))
    attempts = int(current_app.config.get('ROOM_CODE_ATTEMPTS', 20))
    for _ in range(attempts):
        code = generate_room_code()
        if Room.query.filter_by(code=code).first():
            continue
        now = utcnow()
        room = Room(code=code, is_active=True, created_at=now, expires_at=now + ttl)
        db.session.add(room)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            current_app.logger.warning(f"[room-create] code {code} taken concurrently, redrawing")
            continue
        current_app.logger.info(f"[room-create] code={room.code} id={room.id} expires={room.expires_at}")
        return room
    raise StoreError('Failed to create room')


def find_room(code) -> Room:
    code = validate_code(code)
    room = Room.query.filter_by(code=code).first()
    if not room:
        raise NotFound('Room not found')
    return room


def ensure_usable(room: Room) -> None:
    if room.is_expired():
        raise Expired('Room has expired')


def get_room(code) -> Room:
    """Load a usable room with its participants and games (newest first)."""
    code = validate_code(code)
    room = (
        Room.query.options(
            selectinload(Room.participants),
            selectinload(Room.games).selectinload(Game.scores).selectinload(Score.participant),
        )
        .filter_by(code=code)
        .first()
    )
    if not room:
        raise NotFound('Room not found')
    # Checked on every read; the sweeper may not have run yet
    ensure_usable(room)
    return room


def add_participant(code, name) -> Participant:
    room = find_room(code)
    ensure_usable(room)
    name = name.strip() if isinstance(name, str) else ''
    if not name:
        raise ValidationError('Participant name is required')
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f'Participant name must be at most {MAX_NAME_LENGTH} characters')

    participant = Participant(name=name, room_id=room.id)
    db.session.add(participant)
    db.session.commit()
    current_app.logger.info(f"[participant] room={room.code} id={participant.id} name={participant.name!r}")

    get_broadcaster().broadcast(room.code, 'participant-added', participant.to_dict())
    return participant
