from convote.models import MotionStatus, Vote
from convote.services.errors import VotingNotActive
from convote.services.pools import count_pool_members, effective_pool_id
from convote.services.voting.lifecycle import get_motion_or_404
from convote.utils import utcnow

REPORTABLE_STATUSES = (MotionStatus.VOTING_ACTIVE, MotionStatus.VOTING_COMPLETE)


def get_motion_vote_stats(motion_id):
    """Ballot count and participation for live monitoring.

    Only the number of ballots is exposed. Per-choice counts and abstentions
    stay hidden so polling during an active vote cannot leak partial results.
    """
    motion = get_motion_or_404(motion_id)
    if motion.status not in REPORTABLE_STATUSES:
        raise VotingNotActive("Vote statistics are not available before voting starts")

    total_votes = Vote.query.filter_by(motion_id=motion.id).count()
    eligible = count_pool_members(effective_pool_id(motion))

    return {
        "motion_id": motion.id,
        "total_votes": total_votes,
        "eligible_voters": eligible,
        "participation_rate": (total_votes / eligible * 100) if eligible > 0 else 0,
        "last_updated": utcnow(),
    }
