from convote.models import MotionStatus
from convote.services.errors import ResultsNotAvailable
from convote.services.pools import count_pool_members, effective_pool_id
from convote.services.voting.lifecycle import get_motion_or_404


def _percent(part, whole):
    return (part / whole * 100) if whole > 0 else 0


def tally_choices(motion):
    """Count selections per choice and flag the top ``seat_count`` as winners.

    Choices are ranked by vote count descending; equal counts are ordered
    by ascending choice id, so a tie at the last seat is always resolved the
    same way. ``tie_at_boundary`` reports when that rule decided a seat.
    """
    options_by_id = {choice.id: choice for choice in motion.choices}
    choice_counts = {choice_id: 0 for choice_id in options_by_id}

    total_votes = 0
    abstentions = 0
    for vote in motion.votes:
        total_votes += 1
        if vote.is_abstain:
            abstentions += 1
            continue
        for selection in vote.selections:
            if selection.choice_id in choice_counts:
                choice_counts[selection.choice_id] += 1

    votes_for_choices = total_votes - abstentions

    ranked = sorted(options_by_id.values(), key=lambda c: (-choice_counts[c.id], c.id))
    seat_count = motion.seat_count or 1

    choice_results = []
    for index, choice in enumerate(ranked):
        count = choice_counts[choice.id]
        choice_results.append(
            {
                "choice_id": choice.id,
                "choice_name": choice.name,
                "vote_count": count,
                "percentage": _percent(count, votes_for_choices),
                "is_winner": index < seat_count,
            }
        )

    tie_at_boundary = (
        len(ranked) > seat_count
        and choice_counts[ranked[seat_count - 1].id] == choice_counts[ranked[seat_count].id]
    )

    return {
        "total_votes_including_abstentions": total_votes,
        "abstention_count": abstentions,
        "total_votes_for_choices": votes_for_choices,
        "choice_results": choice_results,
        "tie_at_boundary": tie_at_boundary,
    }


def get_detailed_results(motion_id):
    motion = get_motion_or_404(motion_id)
    if motion.status is not MotionStatus.VOTING_COMPLETE:
        raise ResultsNotAvailable()

    tally = tally_choices(motion)
    total = tally["total_votes_including_abstentions"]
    eligible = count_pool_members(effective_pool_id(motion))

    return {
        "motion_id": motion.id,
        "motion_name": motion.name,
        "seat_count": motion.seat_count,
        "total_votes_including_abstentions": total,
        "total_votes_for_choices": tally["total_votes_for_choices"],
        "abstention_count": tally["abstention_count"],
        "abstention_percentage": _percent(tally["abstention_count"], total),
        "eligible_voters": eligible,
        "participation_rate": _percent(total, eligible),
        "choice_results": tally["choice_results"],
        "tie_at_boundary": tally["tie_at_boundary"],
    }
