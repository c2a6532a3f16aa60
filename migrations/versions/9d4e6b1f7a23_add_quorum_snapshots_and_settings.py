"""add quorum snapshots and system settings

Revision ID: 9d4e6b1f7a23
Revises: 3a7f1c9e2b40
Create Date: 2026-10-09 16:40:02.551930

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "9d4e6b1f7a23"
down_revision = "3a7f1c9e2b40"
branch_labels = None
depends_on = None


def upgrade():
    op.add_column("meetings", sa.Column("quorum_called_at", sa.DateTime(), nullable=True))

    op.create_table(
        "quorum_snapshots",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("meeting_id", sa.Integer(), nullable=False),
        sa.Column("called_at", sa.DateTime(), nullable=False),
        sa.Column("total_eligible_voters", sa.Integer(), nullable=False),
        sa.Column("active_voter_count", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["meeting_id"], ["meetings.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("meeting_id"),
    )
    op.create_table(
        "quorum_snapshot_voters",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("snapshot_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("last_activity", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["snapshot_id"], ["quorum_snapshots.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "system_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("setting_key", sa.String(length=255), nullable=False),
        sa.Column("setting_value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("setting_key"),
    )
    op.execute(
        "INSERT INTO system_settings (setting_key, setting_value, updated_at) "
        "VALUES ('non_admin_login_enabled', 'true', CURRENT_TIMESTAMP)"
    )


def downgrade():
    op.drop_table("system_settings")
    op.drop_table("quorum_snapshot_voters")
    op.drop_table("quorum_snapshots")
    op.drop_column("meetings", "quorum_called_at")
