import pytest

from convote.models import MotionStatus
from convote.services.errors import VotingNotActive
from convote.services.voting import cast_vote, get_motion_vote_stats


def test_vote_stats_count_ballots_without_revealing_choices(db_session, make_voter, make_motion):
    first, second, _, _ = [make_voter(f"voter{index}") for index in range(4)]
    motion = make_motion(status=MotionStatus.VOTING_ACTIVE)
    cast_vote(first.id, motion.id, [motion.choices[0].id], False)
    cast_vote(second.id, motion.id, [], True)

    stats = get_motion_vote_stats(motion.id)

    assert stats["total_votes"] == 2
    assert stats["eligible_voters"] == 4
    assert stats["participation_rate"] == 50.0
    assert set(stats) == {
        "motion_id",
        "total_votes",
        "eligible_voters",
        "participation_rate",
        "last_updated",
    }


def test_vote_stats_unavailable_before_voting_starts(db_session, make_motion):
    motion = make_motion()

    with pytest.raises(VotingNotActive):
        get_motion_vote_stats(motion.id)


def test_vote_stats_with_empty_pool(db_session, make_motion):
    motion = make_motion(status=MotionStatus.VOTING_COMPLETE)

    stats = get_motion_vote_stats(motion.id)

    assert stats["eligible_voters"] == 0
    assert stats["participation_rate"] == 0
