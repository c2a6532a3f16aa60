from datetime import datetime, timedelta
from unittest import mock

import pytest

from convote.extensions import db
from convote.models import Motion, MotionStatus
from convote.services.errors import (
    InvalidTransition,
    MotionLocked,
    ValidationError,
    VotingNotActive,
)
from convote.services.meetings import create_choice, update_motion
from convote.services.voting import (
    set_motion_end_override,
    transition_motion_status,
    voting_deadline,
)


def test_motion_advances_forward_through_every_status(db_session, make_motion):
    motion = make_motion()
    started = datetime(2024, 6, 1, 10, 0, 0)
    ended = datetime(2024, 6, 1, 10, 12, 0)

    motion = transition_motion_status(motion.id, "voting_active", now=started)
    assert motion.status is MotionStatus.VOTING_ACTIVE
    assert motion.voting_started_at == started

    motion = transition_motion_status(motion.id, MotionStatus.VOTING_COMPLETE, now=ended)
    assert motion.status is MotionStatus.VOTING_COMPLETE
    assert motion.voting_ended_at == ended


@pytest.mark.parametrize(
    "current, requested",
    [
        (MotionStatus.NOT_YET_STARTED, "voting_complete"),
        (MotionStatus.NOT_YET_STARTED, "not_yet_started"),
        (MotionStatus.VOTING_ACTIVE, "not_yet_started"),
        (MotionStatus.VOTING_ACTIVE, "voting_active"),
        (MotionStatus.VOTING_COMPLETE, "voting_active"),
        (MotionStatus.VOTING_COMPLETE, "not_yet_started"),
    ],
)
def test_illegal_transitions_leave_status_unchanged(db_session, make_motion, current, requested):
    motion = make_motion(status=current)

    with pytest.raises(InvalidTransition):
        transition_motion_status(motion.id, requested)

    assert db_session.get(Motion, motion.id).status is current


def test_unknown_status_value_is_rejected(db_session, make_motion):
    motion = make_motion()

    with pytest.raises(ValidationError):
        transition_motion_status(motion.id, "paused")


def test_end_override_only_accepted_when_activating(db_session, make_motion):
    motion = make_motion(status=MotionStatus.VOTING_ACTIVE)

    with pytest.raises(ValidationError):
        transition_motion_status(
            motion.id, "voting_complete", end_override=datetime(2024, 6, 1, 11, 0)
        )
    assert db_session.get(Motion, motion.id).status is MotionStatus.VOTING_ACTIVE


def test_deadline_prefers_override_over_planned_duration(db_session, make_motion):
    motion = make_motion()
    started = datetime(2024, 6, 1, 10, 0, 0)
    override = datetime(2024, 6, 1, 10, 30, 0)

    motion = transition_motion_status(motion.id, "voting_active", now=started)
    assert voting_deadline(motion) == started + timedelta(minutes=10)

    motion = set_motion_end_override(motion.id, override)
    assert voting_deadline(motion) == override

    motion = set_motion_end_override(motion.id, None)
    assert voting_deadline(motion) == started + timedelta(minutes=10)


def test_end_override_requires_active_motion(db_session, make_motion):
    motion = make_motion()

    with pytest.raises(VotingNotActive):
        set_motion_end_override(motion.id, datetime(2024, 6, 1, 11, 0))


def test_motion_configuration_locks_once_voting_starts(db_session, make_motion):
    motion = make_motion()
    transition_motion_status(motion.id, "voting_active")

    with pytest.raises(MotionLocked):
        update_motion(motion.id, seat_count=2)
    with pytest.raises(MotionLocked):
        create_choice(motion.id, "Maybe")

    assert db_session.get(Motion, motion.id).seat_count == 1


def _race_to_active(db_session, started_at):
    """Return a motion loader that lets another connection activate the motion first."""

    def load(motion_id):
        motion = db_session.get(Motion, motion_id)
        assert motion.status is MotionStatus.NOT_YET_STARTED
        with db.engine.begin() as connection:
            connection.execute(
                db.update(Motion)
                .where(Motion.id == motion_id)
                .values(status=MotionStatus.VOTING_ACTIVE, voting_started_at=started_at)
            )
        return motion

    return load


def test_losing_a_concurrent_transition_keeps_the_winner(db_session, make_motion):
    motion = make_motion()
    winner_started = datetime(2024, 6, 1, 10, 0, 0)

    with mock.patch(
        "convote.services.voting.lifecycle.get_motion_or_404",
        side_effect=_race_to_active(db_session, winner_started),
    ):
        with pytest.raises(InvalidTransition):
            transition_motion_status(
                motion.id, "voting_active", now=datetime(2024, 6, 1, 10, 5, 0)
            )

    stored = db_session.get(Motion, motion.id)
    assert stored.status is MotionStatus.VOTING_ACTIVE
    assert stored.voting_started_at == winner_started


def test_choice_edit_racing_activation_is_rejected(db_session, make_motion):
    motion = make_motion()

    with mock.patch(
        "convote.services.meetings.get_motion_or_404",
        side_effect=_race_to_active(db_session, datetime(2024, 6, 1, 10, 0, 0)),
    ):
        with pytest.raises(MotionLocked):
            create_choice(motion.id, "Maybe")

    assert [choice.name for choice in db_session.get(Motion, motion.id).choices] == ["Yes", "No"]
