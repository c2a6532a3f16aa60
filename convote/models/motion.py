import enum

from convote.extensions import db
from convote.utils import utcnow


class MotionStatus(enum.Enum):
    NOT_YET_STARTED = "not_yet_started"
    VOTING_ACTIVE = "voting_active"
    VOTING_COMPLETE = "voting_complete"


class Motion(db.Model):
    __tablename__ = "motions"

    id = db.Column(db.Integer, primary_key=True)
    meeting_id = db.Column(
        db.Integer, db.ForeignKey("meetings.id", ondelete="CASCADE"), nullable=False
    )
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    planned_duration = db.Column(db.Integer, nullable=False)
    seat_count = db.Column(db.Integer, nullable=False, default=1)
    voting_pool_id = db.Column(
        db.Integer, db.ForeignKey("pools.id", ondelete="RESTRICT"), nullable=True
    )
    status = db.Column(
        db.Enum(
            MotionStatus,
            name="motion_status",
            values_callable=lambda statuses: [status.value for status in statuses],
        ),
        nullable=False,
        default=MotionStatus.NOT_YET_STARTED,
    )
    end_override = db.Column(db.DateTime, nullable=True)
    voting_started_at = db.Column(db.DateTime, nullable=True)
    voting_ended_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    voting_pool = db.relationship("Pool", lazy=True)
    choices = db.relationship(
        "Choice",
        backref="motion",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="Choice.sort_order",
    )
    votes = db.relationship(
        "Vote", backref="motion", lazy=True, cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.CheckConstraint("planned_duration > 0", name="ck_motions_valid_duration"),
        db.CheckConstraint("seat_count >= 1", name="ck_motions_valid_seat_count"),
        db.Index("idx_motions_meeting_id", "meeting_id"),
        db.Index("idx_motions_status", "status"),
    )
