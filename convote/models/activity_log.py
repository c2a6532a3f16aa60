from convote.extensions import db
from convote.utils import utcnow


class ActivityLog(db.Model):
    __tablename__ = "activity_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    url_path = db.Column(db.String(500), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship("User", lazy=True)

    __table_args__ = (
        db.Index("idx_activity_logs_created_at", "created_at"),
        db.Index("idx_activity_logs_user_created", "user_id", "created_at"),
    )
