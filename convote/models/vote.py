from convote.extensions import db
from convote.utils import utcnow


class Vote(db.Model):
    __tablename__ = "votes"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    motion_id = db.Column(
        db.Integer, db.ForeignKey("motions.id", ondelete="CASCADE"), nullable=False
    )
    is_abstain = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship("User", lazy=True)
    selections = db.relationship(
        "VoteChoice", backref="vote", lazy=True, cascade="all, delete-orphan"
    )

    # One ballot per voter per motion, enforced by the database.
    __table_args__ = (
        db.UniqueConstraint("user_id", "motion_id", name="uq_votes_user_motion"),
        db.Index("idx_votes_motion_id", "motion_id"),
    )


class VoteChoice(db.Model):
    __tablename__ = "vote_choices"

    id = db.Column(db.Integer, primary_key=True)
    vote_id = db.Column(
        db.Integer, db.ForeignKey("votes.id", ondelete="CASCADE"), nullable=False
    )
    choice_id = db.Column(
        db.Integer, db.ForeignKey("choices.id", ondelete="CASCADE"), nullable=False
    )

    choice = db.relationship("Choice", lazy=True)

    __table_args__ = (
        db.UniqueConstraint("vote_id", "choice_id", name="uq_vote_choices_vote_choice"),
        db.Index("idx_vote_choices_choice_id", "choice_id"),
    )
