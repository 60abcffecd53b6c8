"""initial numguess schema: user, statistics, sessions, attempts

Revision ID: 4c2a9e7d1b30
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2a9e7d1b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)

    op.create_table(
        'user_game_statistics',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('games_played', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('games_won', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('best_attempts', sa.Integer(), nullable=True),
        sa.Column('last_updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_game_statistics_user_id', 'user_game_statistics', ['user_id'], unique=True)
    op.create_index('ix_user_game_statistics_total_score', 'user_game_statistics', ['total_score'])

    op.create_table(
        'game_session',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_game_statistics_id', sa.Integer(), nullable=False),
        sa.Column('secret_number', sa.Integer(), nullable=False),
        sa.Column('min_range', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('max_range', sa.Integer(), nullable=False, server_default='43'),
        sa.Column('max_attempts', sa.Integer(), nullable=False, server_default='8'),
        sa.Column('attempts_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('difficulty', sa.String(length=20), nullable=False),
        sa.Column('started_at', sa.DateTime(), nullable=False),
        sa.Column('ended_at', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['user_game_statistics_id'], ['user_game_statistics.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_game_session_user_game_statistics_id', 'game_session', ['user_game_statistics_id'])
    op.create_index('ix_game_session_status', 'game_session', ['status'])
    op.create_index('ix_game_session_difficulty', 'game_session', ['difficulty'])
    op.create_index('ix_game_session_started_at', 'game_session', ['started_at'])
    op.create_index('ix_game_session_stats_status', 'game_session', ['user_game_statistics_id', 'status'])
    op.create_index('ix_game_session_stats_started', 'game_session', ['user_game_statistics_id', 'started_at'])

    op.create_table(
        'game_attempt',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('game_session_id', sa.String(length=36), nullable=False),
        sa.Column('guessed_number', sa.Integer(), nullable=False),
        sa.Column('attempt_number', sa.Integer(), nullable=False),
        sa.Column('result', sa.String(length=20), nullable=False),
        sa.Column('hint', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('attempted_at', sa.DateTime(), nullable=False),
        sa.Column('time_taken_ms', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['game_session_id'], ['game_session.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('game_session_id', 'attempt_number', name='uq_game_attempt_session_number'),
    )
    op.create_index('ix_game_attempt_game_session_id', 'game_attempt', ['game_session_id'])


def downgrade():
    op.drop_index('ix_game_attempt_game_session_id', table_name='game_attempt')
    op.drop_table('game_attempt')
    for name in (
        'ix_game_session_stats_started',
        'ix_game_session_stats_status',
        'ix_game_session_started_at',
        'ix_game_session_difficulty',
        'ix_game_session_status',
        'ix_game_session_user_game_statistics_id',
    ):
        op.drop_index(name, table_name='game_session')
    op.drop_table('game_session')
    op.drop_index('ix_user_game_statistics_total_score', table_name='user_game_statistics')
    op.drop_index('ix_user_game_statistics_user_id', table_name='user_game_statistics')
    op.drop_table('user_game_statistics')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
