from convote.extensions import db
from convote.models.user import user_pools


class Pool(db.Model):
    __tablename__ = "pools"

    id = db.Column(db.Integer, primary_key=True)
    pool_key = db.Column(db.String(255), unique=True, nullable=False)
    pool_name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_disabled = db.Column(db.Boolean, nullable=False, default=False)

    users = db.relationship("User", secondary=user_pools, back_populates="pools", lazy=True)
