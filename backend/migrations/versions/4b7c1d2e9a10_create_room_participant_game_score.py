"""create room, participant, game and score tables

Revision ID: 4b7c1d2e9a10
Revises:
Create Date: 2026-10-17 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4b7c1d2e9a10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'room',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('code', sa.String(length=4), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('room') as batch_op:
        batch_op.create_index(batch_op.f('ix_room_code'), ['code'], unique=True)
        batch_op.create_index(batch_op.f('ix_room_expires_at'), ['expires_at'], unique=False)

    op.create_table(
        'participant',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=64), nullable=False),
        sa.Column('room_id', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['room_id'], ['room.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('participant') as batch_op:
        batch_op.create_index(batch_op.f('ix_participant_room_id'), ['room_id'], unique=False)

    op.create_table(
        'game',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('room_id', sa.String(length=32), nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('ended_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['room_id'], ['room.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    with op.batch_alter_table('game') as batch_op:
        batch_op.create_index(batch_op.f('ix_game_room_id'), ['room_id'], unique=False)

    op.create_table(
        'score',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('game_id', sa.String(length=32), nullable=False),
        sa.Column('participant_id', sa.String(length=32), nullable=False),
        sa.Column('value', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['game_id'], ['game.id']),
        sa.ForeignKeyConstraint(['participant_id'], ['participant.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('game_id', 'participant_id', name='uq_score_game_participant'),
    )
    with op.batch_alter_table('score') as batch_op:
        batch_op.create_index(batch_op.f('ix_score_game_id'), ['game_id'], unique=False)


def downgrade():
    with op.batch_alter_table('score') as batch_op:
        batch_op.drop_index(batch_op.f('ix_score_game_id'))
    op.drop_table('score')
    with op.batch_alter_table('game') as batch_op:
        batch_op.drop_index(batch_op.f('ix_game_room_id'))
    op.drop_table('game')
    with op.batch_alter_table('participant') as batch_op:
        batch_op.drop_index(batch_op.f('ix_participant_room_id'))
    op.drop_table('participant')
    with op.batch_alter_table('room') as batch_op:
        batch_op.drop_index(batch_op.f('ix_room_expires_at'))
        batch_op.drop_index(batch_op.f('ix_room_code'))
    op.drop_table('room')
