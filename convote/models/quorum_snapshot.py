from convote.extensions import db
from convote.utils import utcnow


class QuorumSnapshot(db.Model):
    """Quorum figures recorded when an administrator calls quorum.

    While a meeting has a snapshot its quorum report is replayed from here,
    never recomputed from the activity log.
    """

    __tablename__ = "quorum_snapshots"

    id = db.Column(db.Integer, primary_key=True)
    meeting_id = db.Column(
        db.Integer,
        db.ForeignKey("meetings.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    called_at = db.Column(db.DateTime, nullable=False)
    total_eligible_voters = db.Column(db.Integer, nullable=False)
    active_voter_count = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    voters = db.relationship(
        "QuorumSnapshotVoter",
        backref="snapshot",
        lazy=True,
        cascade="all, delete-orphan",
    )


class QuorumSnapshotVoter(db.Model):
    __tablename__ = "quorum_snapshot_voters"

    id = db.Column(db.Integer, primary_key=True)
    snapshot_id = db.Column(
        db.Integer,
        db.ForeignKey("quorum_snapshots.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    last_activity = db.Column(db.DateTime, nullable=False)

    user = db.relationship("User", lazy=True)
