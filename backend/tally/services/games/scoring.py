from flask import current_app

from tally import db
from tally.errors import NotFound, ValidationError
from tally.models import Score
from tally.realtime import get_broadcaster


def adjust_score(score_id: str, delta: int) -> dict:
    """Move a score by exactly one point and tell the room.

    The change is a single ``value = value + delta`` UPDATE so concurrent
    clicks on the same score never lose an update. Values are unbounded and
    may go negative.

    Returns the serialized score as this adjustment left it. The row is read
    back before the commit, while the UPDATE still holds it, so a concurrent
    adjustment cannot leak its value into this response or broadcast.
    """
    if delta not in (1, -1):
        raise ValidationError('Scores move by exactly one point')

    updated = (
        Score.query.filter_by(id=score_id)
        .update({Score.value: Score.value + delta}, synchronize_session=False)
    )
    if not updated:
        db.session.rollback()
        raise NotFound('Score not found')

    score = db.session.get(Score, score_id, populate_existing=True)
    snapshot = score.to_dict()
    code = score.game.room.code
    participant_name = score.participant.name
    db.session.commit()

    current_app.logger.info(f"[score] room={code} score={score_id} delta={delta:+d} value={snapshot['value']}")
    get_broadcaster().broadcast(code, 'score-updated', {
        'scoreId': snapshot['id'],
        'participantId': snapshot['participantId'],
        'value': snapshot['value'],
        'participantName': participant_name,
    })
    return snapshot


def increment_score(score_id: str) -> dict:
    return adjust_score(score_id, 1)


def decrement_score(score_id: str) -> dict:
    return adjust_score(score_id, -1)
