from flask_login import UserMixin

from convote.extensions import db
from convote.utils import utcnow


user_pools = db.Table(
    "user_pools",
    db.Column("user_id", db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    db.Column("pool_id", db.Integer, db.ForeignKey("pools.id", ondelete="CASCADE"), primary_key=True),
)


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(255), unique=True, nullable=False)
    first_name = db.Column(db.String(255), nullable=False, default="")
    last_name = db.Column(db.String(255), nullable=False, default="")
    password_hash = db.Column(db.String(255), nullable=True)
    is_admin = db.Column(db.Boolean, nullable=False, default=False)
    is_watcher = db.Column(db.Boolean, nullable=False, default=False)
    is_disabled = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    pools = db.relationship("Pool", secondary=user_pools, back_populates="users", lazy=True)

    __table_args__ = (
        db.CheckConstraint(
            "NOT (is_admin AND is_watcher)", name="ck_users_role_exclusivity"
        ),
    )

    @property
    def is_voter(self):
        return not self.is_admin and not self.is_watcher

    @property
    def is_active(self):
        return not self.is_disabled
