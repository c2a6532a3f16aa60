from flask import current_app
from sqlalchemy.exc import IntegrityError

from convote.extensions import db
from convote.models import Meeting, Motion, MotionStatus, Vote, VoteChoice, user_pools
from convote.services.errors import (
    AlreadyVoted,
    InvalidChoiceSelection,
    NotEligible,
    NotFound,
    VotingNotActive,
)
from convote.services.pools import effective_pool_id, is_user_in_pool
from convote.services.voting.lifecycle import get_motion_or_404, voting_deadline

ALREADY_VOTED = "already_voted"
NOT_IN_POOL = "not_in_pool"
NOT_ACTIVE = "not_active"


def has_user_voted(user_id, motion_id):
    return (
        Vote.query.filter_by(user_id=user_id, motion_id=motion_id).first() is not None
    )


def get_user_vote(user_id, motion_id):
    return Vote.query.filter_by(user_id=user_id, motion_id=motion_id).first()


def validate_choice_selection(motion, choice_ids, abstain):
    if abstain:
        if choice_ids:
            raise InvalidChoiceSelection("Cannot select choices when abstaining")
        return []

    if not choice_ids:
        raise InvalidChoiceSelection("Must select at least one choice or abstain")

    if len(set(choice_ids)) != len(choice_ids):
        raise InvalidChoiceSelection("Duplicate choices are not allowed")

    if len(choice_ids) > motion.seat_count:
        raise InvalidChoiceSelection(
            f"You can only select up to {motion.seat_count} choice(s)"
        )

    valid_ids = {choice.id for choice in motion.choices}
    if any(choice_id not in valid_ids for choice_id in choice_ids):
        raise InvalidChoiceSelection("Invalid choice selection")

    return list(choice_ids)


def cast_vote(user_id, motion_id, choice_ids, abstain):
    """Record one immutable ballot for ``user_id`` on ``motion_id``.

    The vote row and its choice rows are committed together or not at all.
    The (user, motion) unique constraint is the final arbiter of duplicates:
    a race that slips past the pre-check surfaces as AlreadyVoted.
    """
    choice_ids = list(choice_ids or [])

    # Shared lock: a concurrent close waits for this ballot to commit.
    motion = db.session.execute(
        db.select(Motion)
        .where(Motion.id == motion_id)
        .with_for_update(read=True)
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if motion is None:
        raise NotFound(f"Motion with ID {motion_id} not found")

    try:
        if motion.status is not MotionStatus.VOTING_ACTIVE:
            raise VotingNotActive()

        if not is_user_in_pool(user_id, effective_pool_id(motion)):
            raise NotEligible()

        if has_user_voted(user_id, motion.id):
            raise AlreadyVoted()

        selected = validate_choice_selection(motion, choice_ids, abstain)
    except Exception:
        db.session.rollback()
        raise

    vote = Vote(user_id=user_id, motion_id=motion.id, is_abstain=bool(abstain))
    vote.selections = [VoteChoice(choice_id=choice_id) for choice_id in selected]
    db.session.add(vote)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise AlreadyVoted() from None

    current_app.logger.info("Ballot %s recorded on motion %s", vote.id, motion.id)
    return vote


def get_open_motions_for_user(user_id):
    """Active motions the user may vote on and has not voted on yet, oldest first."""
    already_voted = (
        db.select(Vote.id)
        .where(Vote.motion_id == Motion.id, Vote.user_id == user_id)
        .exists()
    )
    # effective_pool_id, expressed in SQL.
    pool_id = db.func.coalesce(Motion.voting_pool_id, Meeting.quorum_voting_pool_id)

    query = (
        db.select(Motion)
        .join(Meeting, Motion.meeting_id == Meeting.id)
        .join(user_pools, user_pools.c.pool_id == pool_id)
        .where(
            Motion.status == MotionStatus.VOTING_ACTIVE,
            user_pools.c.user_id == user_id,
            ~already_voted,
        )
        .order_by(Motion.voting_started_at.asc(), Motion.id.asc())
    )
    return list(db.session.execute(query).scalars())


def get_motion_for_voting(motion_id, user_id):
    motion = get_motion_or_404(motion_id)
    voted = has_user_voted(user_id, motion.id)
    in_pool = is_user_in_pool(user_id, effective_pool_id(motion))

    reason = None
    if voted:
        reason = ALREADY_VOTED
    elif not in_pool:
        reason = NOT_IN_POOL
    elif motion.status is not MotionStatus.VOTING_ACTIVE:
        reason = NOT_ACTIVE

    return {
        "motion": motion,
        "choices": sorted(motion.choices, key=lambda choice: (choice.sort_order, choice.id)),
        "has_voted": voted,
        "can_vote": reason is None,
        "voting_ended_reason": reason,
        "voting_ends_at": voting_deadline(motion),
    }
