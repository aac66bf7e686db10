from tally import db
from datetime import datetime, timezone
import random
import uuid


def utcnow():
    """Naive UTC timestamp, matching what the DateTime columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id():
    return uuid.uuid4().hex


def isoformat(value):
    return value.isoformat() + 'Z' if value else None


def generate_room_code():
    """Draw a 4-digit room code; leading zeros are kept."""
    return f"{random.randint(0, 9999):04d}"


class Room(db.Model):
    __tablename__ = 'room'
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    code = db.Column(db.String(4), unique=True, nullable=False, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    participants = db.relationship(
        'Participant', back_populates='room', order_by='Participant.created_at'
    )
    games = db.relationship(
        'Game', back_populates='room', order_by='Game.started_at.desc()'
    )

    def is_expired(self, now=None):
        now = now or utcnow()
        return not self.is_active or now > self.expires_at

    def to_dict(self, include_children=False):
        data = {
            'id': self.id,
            'code': self.code,
            'isActive': self.is_active,
            'expiresAt': isoformat(self.expires_at),
            'createdAt': isoformat(self.created_at),
        }
        if include_children:
            data['participants'] = [p.to_dict() for p in self.participants]
            data['games'] = [g.to_dict() for g in self.games]
        return data


class Participant(db.Model):
    __tablename__ = 'participant'
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    name = db.Column(db.String(64), nullable=False)
    room_id = db.Column(db.String(32), db.ForeignKey('room.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    room = db.relationship('Room', back_populates='participants')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'roomId': self.room_id,
            'createdAt': isoformat(self.created_at),
        }


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    room_id = db.Column(db.String(32), db.ForeignKey('room.id'), nullable=False, index=True)
    started_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    ended_at = db.Column(db.DateTime, nullable=True)  # null while in progress
    room = db.relationship('Room', back_populates='games')
    scores = db.relationship('Score', back_populates='game')

    @property
    def is_active(self):
        return self.ended_at is None

    def to_dict(self, include_room=False):
        # Keep the participants' join order rather than row order
        ordered = sorted(self.scores, key=lambda s: (s.participant.created_at, s.participant.id))
        data = {
            'id': self.id,
            'roomId': self.room_id,
            'startedAt': isoformat(self.started_at),
            'endedAt': isoformat(self.ended_at),
            'scores': [s.to_dict() for s in ordered],
        }
        if include_room:
            data['room'] = self.room.to_dict()
        return data


class Score(db.Model):
    __tablename__ = 'score'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'participant_id', name='uq_score_game_participant'),
    )
    id = db.Column(db.String(32), primary_key=True, default=new_id)
    game_id = db.Column(db.String(32), db.ForeignKey('game.id'), nullable=False, index=True)
    participant_id = db.Column(db.String(32), db.ForeignKey('participant.id'), nullable=False)
    value = db.Column(db.Integer, default=0, nullable=False)
    game = db.relationship('Game', back_populates='scores')
    participant = db.relationship('Participant')

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'participantId': self.participant_id,
            'value': self.value,
            'participant': self.participant.to_dict() if self.participant else None,
        }
