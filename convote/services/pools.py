from flask import current_app

from convote.extensions import db
from convote.models import Pool, User, user_pools
from convote.services.errors import NotFound, ValidationError


def effective_pool_id(motion, meeting=None):
    """Pool that decides who may vote on ``motion``.

    A motion without its own voting pool falls back to the meeting's quorum
    pool. Every eligibility and participation figure goes through here;
    `get_open_motions_for_user` applies the same rule in SQL with COALESCE.
    """
    if motion.voting_pool_id is not None:
        return motion.voting_pool_id
    meeting = meeting or motion.meeting
    return meeting.quorum_voting_pool_id


def is_user_in_pool(user_id, pool_id):
    row = db.session.execute(
        db.select(user_pools.c.user_id).where(
            user_pools.c.user_id == user_id, user_pools.c.pool_id == pool_id
        )
    ).first()
    return row is not None


def count_pool_members(pool_id):
    return db.session.execute(
        db.select(db.func.count(db.distinct(user_pools.c.user_id))).where(
            user_pools.c.pool_id == pool_id
        )
    ).scalar_one()


def get_pool_or_404(pool_id):
    pool = db.session.get(Pool, pool_id)
    if pool is None:
        raise NotFound(f"Pool with ID {pool_id} not found")
    return pool


def create_pool(pool_key, pool_name, description=None):
    pool_key = (pool_key or "").strip()
    pool_name = (pool_name or "").strip()
    if not pool_key or not pool_name:
        raise ValidationError("Missing required fields: poolKey, poolName")

    if Pool.query.filter_by(pool_key=pool_key).first() is not None:
        raise ValidationError(f"Pool key '{pool_key}' already exists")

    pool = Pool(pool_key=pool_key, pool_name=pool_name, description=description)
    db.session.add(pool)
    db.session.commit()
    return pool


def add_user_to_pool(pool_id, user_id):
    pool = get_pool_or_404(pool_id)
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound(f"User with ID {user_id} not found")

    if user not in pool.users:
        pool.users.append(user)
        db.session.commit()
        current_app.logger.info("User %s added to pool %s", user.id, pool.id)
    return pool


def remove_user_from_pool(pool_id, user_id):
    pool = get_pool_or_404(pool_id)
    user = db.session.get(User, user_id)
    if user is None or user not in pool.users:
        raise NotFound(f"User with ID {user_id} is not in pool {pool_id}")

    pool.users.remove(user)
    db.session.commit()
    current_app.logger.info("User %s removed from pool %s", user.id, pool.id)


def set_pool_disabled(pool_id, disabled):
    pool = get_pool_or_404(pool_id)
    pool.is_disabled = bool(disabled)
    db.session.commit()
    current_app.logger.info("Pool %s %s", pool.pool_key, "disabled" if disabled else "enabled")
    return pool
