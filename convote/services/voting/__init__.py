from convote.services.voting.ballots import (
    cast_vote,
    get_motion_for_voting,
    get_open_motions_for_user,
    get_user_vote,
)
from convote.services.voting.lifecycle import (
    ALLOWED_TRANSITIONS,
    set_motion_end_override,
    transition_motion_status,
    voting_deadline,
)
from convote.services.voting.results import get_detailed_results, tally_choices
from convote.services.voting.stats import get_motion_vote_stats

__all__ = [
    "ALLOWED_TRANSITIONS",
    "cast_vote",
    "get_detailed_results",
    "get_motion_for_voting",
    "get_motion_vote_stats",
    "get_open_motions_for_user",
    "get_user_vote",
    "set_motion_end_override",
    "tally_choices",
    "transition_motion_status",
    "voting_deadline",
]
