"""Read-only report projections for the watcher role.

Watchers see aggregate tallies and who voted, never what anyone voted for.
Results and voter lists are gated on the motion being complete, exactly as
the admin results are.
"""
from convote.extensions import db
from convote.models import MotionStatus, User, Vote
from convote.services.errors import ResultsNotAvailable
from convote.services.meetings import get_meeting_or_404, list_meetings
from convote.services.pools import count_pool_members, effective_pool_id
from convote.services.quorum import get_active_voters_for_quorum, get_quorum_report
from convote.services.voting.lifecycle import get_motion_or_404, voting_deadline
from convote.services.voting.results import tally_choices


def _motion_result(motion):
    tally = tally_choices(motion)
    return {
        "seat_count": motion.seat_count,
        "tie_at_boundary": tally["tie_at_boundary"],
        "choice_tallies": [
            {
                "choice_id": row["choice_id"],
                "choice_name": row["choice_name"],
                "vote_count": row["vote_count"],
                "is_winner": row["is_winner"],
            }
            for row in tally["choice_results"]
        ],
    }


def _require_complete(motion, what):
    if motion.status is not MotionStatus.VOTING_COMPLETE:
        raise ResultsNotAvailable(
            f"{what} are only available for completed motions (status: voting_complete)"
        )


def _motion_summary(motion):
    abstentions = sum(1 for vote in motion.votes if vote.is_abstain)
    return {
        "motion_id": motion.id,
        "motion_name": motion.name,
        "status": motion.status.value,
        "voting_pool_name": motion.voting_pool.pool_name if motion.voting_pool else None,
        "total_votes_cast": len(motion.votes),
        "total_abstentions": abstentions,
        "voting_started_at": motion.voting_started_at,
        "voting_ended_at": motion.voting_ended_at,
        "result": _motion_result(motion)
        if motion.status is MotionStatus.VOTING_COMPLETE
        else None,
    }


def _meeting_report(meeting):
    return {
        "meeting_id": meeting.id,
        "meeting_name": meeting.name,
        "description": meeting.description,
        "start_date": meeting.start_date,
        "end_date": meeting.end_date,
        "quorum_pool_name": meeting.quorum_pool.pool_name,
        "quorum_called_at": meeting.quorum_called_at,
        "motion_summaries": [_motion_summary(motion) for motion in meeting.motions],
    }


def get_watcher_meetings(page=1, limit=50):
    meetings, total = list_meetings(page, limit)
    return [_meeting_report(meeting) for meeting in meetings], total


def get_watcher_meeting_report(meeting_id):
    return _meeting_report(get_meeting_or_404(meeting_id))


def get_watcher_quorum_report(meeting_id):
    return get_quorum_report(meeting_id)


def get_watcher_quorum_voters(meeting_id):
    return get_active_voters_for_quorum(meeting_id)


def get_watcher_motion_detail(motion_id):
    motion = get_motion_or_404(motion_id)
    started = motion.status is not MotionStatus.NOT_YET_STARTED

    return {
        "motion_id": motion.id,
        "motion_name": motion.name,
        "description": motion.description,
        "status": motion.status.value,
        "seat_count": motion.seat_count,
        "meeting_id": motion.meeting_id,
        "meeting_name": motion.meeting.name,
        "voting_pool_name": motion.voting_pool.pool_name if motion.voting_pool else None,
        "eligible_voter_count": count_pool_members(effective_pool_id(motion)),
        "planned_duration": motion.planned_duration,
        "voting_started_at": motion.voting_started_at,
        "voting_ended_at": motion.voting_ended_at,
        "voting_ends_at": voting_deadline(motion),
        "end_override": motion.end_override,
        "total_votes_cast": Vote.query.filter_by(motion_id=motion.id).count() if started else None,
        "result": _motion_result(motion)
        if motion.status is MotionStatus.VOTING_COMPLETE
        else None,
    }


def get_watcher_motion_result(motion_id):
    motion = get_motion_or_404(motion_id)
    _require_complete(motion, "Results")
    return _motion_result(motion)


def get_watcher_motion_voters(motion_id):
    motion = get_motion_or_404(motion_id)
    _require_complete(motion, "Voter lists")

    rows = db.session.execute(
        db.select(User.first_name, User.last_name, Vote.created_at)
        .join(Vote, Vote.user_id == User.id)
        .where(Vote.motion_id == motion.id)
        .order_by(User.last_name.asc(), User.first_name.asc(), User.id.asc())
    ).all()
    return [
        {"first_name": first_name, "last_name": last_name, "voted_at": voted_at}
        for first_name, last_name, voted_at in rows
    ]
