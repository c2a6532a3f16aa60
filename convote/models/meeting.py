from convote.extensions import db
from convote.utils import utcnow


class Meeting(db.Model):
    __tablename__ = "meetings"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    quorum_voting_pool_id = db.Column(
        db.Integer, db.ForeignKey("pools.id", ondelete="RESTRICT"), nullable=False
    )
    # Set once an administrator freezes the quorum count; NULL means live.
    quorum_called_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    quorum_pool = db.relationship("Pool", lazy=True)
    motions = db.relationship(
        "Motion",
        backref="meeting",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="Motion.id",
    )
    quorum_snapshot = db.relationship(
        "QuorumSnapshot",
        backref="meeting",
        uselist=False,
        lazy=True,
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.CheckConstraint("end_date > start_date", name="ck_meetings_valid_dates"),
    )
