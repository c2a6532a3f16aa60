from datetime import timedelta

from flask import current_app

from convote.extensions import db
from convote.models import Motion, MotionStatus
from convote.services.errors import (
    InvalidTransition,
    MotionLocked,
    NotFound,
    ValidationError,
    VotingNotActive,
)
from convote.utils import utcnow

# Forward-only: each status may only advance to the next one.
ALLOWED_TRANSITIONS = {
    MotionStatus.NOT_YET_STARTED: frozenset({MotionStatus.VOTING_ACTIVE}),
    MotionStatus.VOTING_ACTIVE: frozenset({MotionStatus.VOTING_COMPLETE}),
    MotionStatus.VOTING_COMPLETE: frozenset(),
}


def parse_status(value):
    if isinstance(value, MotionStatus):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"Invalid status value '{value}'")
    try:
        return MotionStatus(value.strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid status value '{value}'") from None


def get_motion_or_404(motion_id):
    motion = db.session.get(Motion, motion_id)
    if motion is None:
        raise NotFound(f"Motion with ID {motion_id} not found")
    return motion


def is_configurable(motion):
    return motion.status is MotionStatus.NOT_YET_STARTED


def ensure_configurable(motion, what="motion"):
    if not is_configurable(motion):
        raise MotionLocked(f"Cannot modify {what} after voting has started")


def claim_configurable(motion_id, what="motion"):
    """Re-check the configuration lock inside the writing transaction.

    Call just before commit. The guarded UPDATE holds the motion row until
    the commit, so a concurrent transition cannot slip in between.
    """
    result = db.session.execute(
        db.update(Motion)
        .where(Motion.id == motion_id, Motion.status == MotionStatus.NOT_YET_STARTED)
        .values(updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.session.rollback()
        raise MotionLocked(f"Cannot modify {what} after voting has started")


def voting_deadline(motion):
    """Advisory end of voting: the override if set, else start + planned duration.

    Closing a motion is always an explicit transition; this value is only
    used for display and never rejects a ballot.
    """
    if motion.end_override is not None:
        return motion.end_override
    if motion.voting_started_at is None:
        return None
    return motion.voting_started_at + timedelta(minutes=motion.planned_duration)


def transition_motion_status(motion_id, new_status, end_override=None, now=None):
    new_status = parse_status(new_status)
    motion = get_motion_or_404(motion_id)
    current_status = motion.status

    if new_status not in ALLOWED_TRANSITIONS[current_status]:
        raise InvalidTransition(
            f"Invalid status transition: cannot change from "
            f"'{current_status.value}' to '{new_status.value}'"
        )

    if end_override is not None and new_status is not MotionStatus.VOTING_ACTIVE:
        raise ValidationError("end_override can only be set when status is 'voting_active'")

    now = now or utcnow()
    values = {"status": new_status, "updated_at": now}
    if new_status is MotionStatus.VOTING_ACTIVE:
        values["voting_started_at"] = now
        if end_override is not None:
            values["end_override"] = end_override
    elif new_status is MotionStatus.VOTING_COMPLETE:
        values["voting_ended_at"] = now

    # Compare-and-set on the prior status so two concurrent requests cannot
    # both advance the motion from the same state.
    result = db.session.execute(
        db.update(Motion)
        .where(Motion.id == motion_id, Motion.status == current_status)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.session.rollback()
        raise InvalidTransition(
            f"Motion {motion_id} changed status concurrently; transition to "
            f"'{new_status.value}' rejected"
        )

    db.session.commit()
    db.session.refresh(motion)
    current_app.logger.info(
        "Motion %s status changed from %s to %s",
        motion.id,
        current_status.value,
        new_status.value,
    )
    return motion


def set_motion_end_override(motion_id, end_override):
    get_motion_or_404(motion_id)
    result = db.session.execute(
        db.update(Motion)
        .where(Motion.id == motion_id, Motion.status == MotionStatus.VOTING_ACTIVE)
        .values(end_override=end_override, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.session.rollback()
        raise VotingNotActive(
            "end_override can only be set when motion status is 'voting_active'"
        )

    db.session.commit()
    motion = get_motion_or_404(motion_id)
    db.session.refresh(motion)
    current_app.logger.info("Motion %s end override set to %s", motion.id, end_override)
    return motion
