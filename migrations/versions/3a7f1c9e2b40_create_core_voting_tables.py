"""create core voting tables

Revision ID: 3a7f1c9e2b40
Revises: 
Create Date: 2026-10-02 09:12:44.118203

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3a7f1c9e2b40'
down_revision = None
branch_labels = None
depends_on = None

motion_status = sa.Enum(
    'not_yet_started', 'voting_active', 'voting_complete', name='motion_status'
)


def upgrade():
    op.create_table('users',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('username', sa.String(length=255), nullable=False),
    sa.Column('first_name', sa.String(length=255), nullable=False),
    sa.Column('last_name', sa.String(length=255), nullable=False),
    sa.Column('password_hash', sa.String(length=255), nullable=True),
    sa.Column('is_admin', sa.Boolean(), nullable=False),
    sa.Column('is_watcher', sa.Boolean(), nullable=False),
    sa.Column('is_disabled', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.CheckConstraint('NOT (is_admin AND is_watcher)', name='ck_users_role_exclusivity'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('username')
    )
    op.create_table('pools',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('pool_key', sa.String(length=255), nullable=False),
    sa.Column('pool_name', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('is_disabled', sa.Boolean(), nullable=False),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('pool_key')
    )
    op.create_table('user_pools',
    sa.Column('user_id', sa.Integer(), nullable=False),
    sa.Column('pool_id', sa.Integer(), nullable=False),
    sa.ForeignKeyConstraint(['pool_id'], ['pools.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('user_id', 'pool_id')
    )
    op.create_table('meetings',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('start_date', sa.DateTime(), nullable=False),
    sa.Column('end_date', sa.DateTime(), nullable=False),
    sa.Column('quorum_voting_pool_id', sa.Integer(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.CheckConstraint('end_date > start_date', name='ck_meetings_valid_dates'),
    sa.ForeignKeyConstraint(['quorum_voting_pool_id'], ['pools.id'], ondelete='RESTRICT'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_table('motions',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('meeting_id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('planned_duration', sa.Integer(), nullable=False),
    sa.Column('seat_count', sa.Integer(), nullable=False),
    sa.Column('voting_pool_id', sa.Integer(), nullable=True),
    sa.Column('status', motion_status, nullable=False),
    sa.Column('end_override', sa.DateTime(), nullable=True),
    sa.Column('voting_started_at', sa.DateTime(), nullable=True),
    sa.Column('voting_ended_at', sa.DateTime(), nullable=True),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.CheckConstraint('planned_duration > 0', name='ck_motions_valid_duration'),
    sa.CheckConstraint('seat_count >= 1', name='ck_motions_valid_seat_count'),
    sa.ForeignKeyConstraint(['meeting_id'], ['meetings.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['voting_pool_id'], ['pools.id'], ondelete='RESTRICT'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_motions_meeting_id', 'motions', ['meeting_id'])
    op.create_index('idx_motions_status', 'motions', ['status'])
    op.create_table('choices',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('motion_id', sa.Integer(), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('sort_order', sa.Integer(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.Column('updated_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['motion_id'], ['motions.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_choices_sort_order', 'choices', ['motion_id', 'sort_order'])
    op.create_table('votes',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('user_id', sa.Integer(), nullable=False),
    sa.Column('motion_id', sa.Integer(), nullable=False),
    sa.Column('is_abstain', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['motion_id'], ['motions.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('user_id', 'motion_id', name='uq_votes_user_motion')
    )
    op.create_index('idx_votes_motion_id', 'votes', ['motion_id'])
    op.create_table('vote_choices',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('vote_id', sa.Integer(), nullable=False),
    sa.Column('choice_id', sa.Integer(), nullable=False),
    sa.ForeignKeyConstraint(['choice_id'], ['choices.id'], ondelete='CASCADE'),
    sa.ForeignKeyConstraint(['vote_id'], ['votes.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('vote_id', 'choice_id', name='uq_vote_choices_vote_choice')
    )
    op.create_index('idx_vote_choices_choice_id', 'vote_choices', ['choice_id'])
    op.create_table('activity_logs',
    sa.Column('id', sa.Integer(), nullable=False),
    sa.Column('user_id', sa.Integer(), nullable=False),
    sa.Column('url_path', sa.String(length=500), nullable=False),
    sa.Column('created_at', sa.DateTime(), nullable=False),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_activity_logs_created_at', 'activity_logs', ['created_at'])
    op.create_index('idx_activity_logs_user_created', 'activity_logs', ['user_id', 'created_at'])


def downgrade():
    op.drop_index('idx_activity_logs_user_created', table_name='activity_logs')
    op.drop_index('idx_activity_logs_created_at', table_name='activity_logs')
    op.drop_table('activity_logs')
    op.drop_index('idx_vote_choices_choice_id', table_name='vote_choices')
    op.drop_table('vote_choices')
    op.drop_index('idx_votes_motion_id', table_name='votes')
    op.drop_table('votes')
    op.drop_index('idx_choices_sort_order', table_name='choices')
    op.drop_table('choices')
    op.drop_index('idx_motions_status', table_name='motions')
    op.drop_index('idx_motions_meeting_id', table_name='motions')
    op.drop_table('motions')
    motion_status.drop(op.get_bind(), checkfirst=True)
    op.drop_table('meetings')
    op.drop_table('user_pools')
    op.drop_table('pools')
    op.drop_table('users')
