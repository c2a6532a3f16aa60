from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from convote.extensions import db
from convote.models import ActivityLog, User, user_pools
from convote.services.errors import NotFound

MAX_URL_PATH_LENGTH = 500
DEFAULT_ACTIVITY_LIMIT = 100


def log_activity(user_id, url_path):
    """Append an activity row for quorum tracking.

    Activity is tied to meetings at query time by user and timestamp, so no
    meeting is recorded here. A failed write is logged and dropped; it must
    never fail the request being logged.
    """
    path = (url_path or "").split("?", 1)[0][:MAX_URL_PATH_LENGTH]
    try:
        db.session.add(ActivityLog(user_id=user_id, url_path=path))
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.warning(
            "Could not record activity for user %s on %s", user_id, path, exc_info=True
        )


def get_activity_logs_for_user(user_id, start, end, limit=DEFAULT_ACTIVITY_LIMIT):
    if db.session.get(User, user_id) is None:
        raise NotFound(f"User with ID {user_id} not found")
    return (
        ActivityLog.query.filter(
            ActivityLog.user_id == user_id,
            ActivityLog.created_at >= start,
            ActivityLog.created_at <= end,
        )
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(limit)
        .all()
    )


def last_activity_by_pool_member(pool_id, start, end):
    """Map user id to latest activity for pool members active in [start, end]."""
    if end < start:
        return {}

    rows = db.session.execute(
        db.select(ActivityLog.user_id, db.func.max(ActivityLog.created_at))
        .join(user_pools, user_pools.c.user_id == ActivityLog.user_id)
        .where(
            user_pools.c.pool_id == pool_id,
            ActivityLog.created_at >= start,
            ActivityLog.created_at <= end,
        )
        .group_by(ActivityLog.user_id)
    ).all()
    return {user_id: last_activity for user_id, last_activity in rows}


def count_active_users_in_pool(pool_id, start, end):
    if end < start:
        return 0
    return db.session.execute(
        db.select(db.func.count(db.distinct(ActivityLog.user_id)))
        .join(user_pools, user_pools.c.user_id == ActivityLog.user_id)
        .where(
            user_pools.c.pool_id == pool_id,
            ActivityLog.created_at >= start,
            ActivityLog.created_at <= end,
        )
    ).scalar_one()
