"""Quorum estimation from API activity.

A meeting's quorum is live until an administrator calls it. Calling quorum
records a snapshot (the count and the roster behind it) and from then on
every report replays that snapshot, however much activity accrues later.
Clearing the call drops the snapshot and returns to live counting.
"""
from flask import current_app

from convote.extensions import db
from convote.models import Meeting, QuorumSnapshot, QuorumSnapshotVoter, User
from convote.services.activity import count_active_users_in_pool, last_activity_by_pool_member
from convote.services.errors import NotFound
from convote.services.pools import count_pool_members
from convote.utils import utcnow


def _get_meeting_or_404(meeting_id):
    meeting = db.session.get(Meeting, meeting_id)
    if meeting is None:
        raise NotFound(f"Meeting with ID {meeting_id} not found")
    return meeting


def _window_end(meeting, cutoff):
    return min(cutoff, meeting.end_date)


def _percent(part, whole):
    return (part / whole * 100) if whole > 0 else 0


def _roster_rows(last_activity_by_user):
    if not last_activity_by_user:
        return []
    users = User.query.filter(User.id.in_(last_activity_by_user)).all()
    rows = [
        {
            "user_id": user.id,
            "username": user.username,
            "first_name": user.first_name,
            "last_name": user.last_name,
            "last_activity": last_activity_by_user[user.id],
        }
        for user in users
    ]
    rows.sort(key=lambda row: (row["last_activity"], row["user_id"]), reverse=True)
    return rows


def get_quorum_report(meeting_id, now=None):
    meeting = _get_meeting_or_404(meeting_id)
    snapshot = meeting.quorum_snapshot

    if meeting.quorum_called_at is not None and snapshot is not None:
        total_eligible = snapshot.total_eligible_voters
        active_count = snapshot.active_voter_count
        calculated_as_of = snapshot.called_at
        frozen = True
    else:
        calculated_as_of = now or utcnow()
        total_eligible = count_pool_members(meeting.quorum_voting_pool_id)
        active_count = count_active_users_in_pool(
            meeting.quorum_voting_pool_id,
            meeting.start_date,
            _window_end(meeting, calculated_as_of),
        )
        frozen = False

    return {
        "meeting_id": meeting.id,
        "meeting_name": meeting.name,
        "quorum_pool_name": meeting.quorum_pool.pool_name,
        "total_eligible_voters": total_eligible,
        "active_voter_count": active_count,
        "active_voter_percentage": _percent(active_count, total_eligible),
        "quorum_called_at": meeting.quorum_called_at,
        "calculated_as_of": calculated_as_of,
        "meeting_start_date": meeting.start_date,
        "meeting_end_date": meeting.end_date,
        "is_frozen": frozen,
    }


def call_quorum(meeting_id, called_at):
    """Freeze the quorum count as of ``called_at``, or unfreeze with None.

    Calling again with a new timestamp moves the freeze point and replaces
    the snapshot.
    """
    meeting = _get_meeting_or_404(meeting_id)

    if called_at is None:
        meeting.quorum_called_at = None
        meeting.quorum_snapshot = None
        db.session.commit()
        current_app.logger.info("Quorum cleared for meeting %s", meeting.id)
        return meeting

    pool_id = meeting.quorum_voting_pool_id
    last_activity = last_activity_by_pool_member(
        pool_id, meeting.start_date, _window_end(meeting, called_at)
    )
    total_eligible = count_pool_members(pool_id)
    voters = [
        QuorumSnapshotVoter(user_id=user_id, last_activity=seen_at)
        for user_id, seen_at in last_activity.items()
    ]

    # Keep the snapshot out of autoflush until every column is set.
    with db.session.no_autoflush:
        snapshot = meeting.quorum_snapshot
        if snapshot is None:
            meeting.quorum_snapshot = QuorumSnapshot(
                meeting_id=meeting.id,
                called_at=called_at,
                total_eligible_voters=total_eligible,
                active_voter_count=len(voters),
                voters=voters,
            )
            snapshot = meeting.quorum_snapshot
        else:
            snapshot.called_at = called_at
            snapshot.total_eligible_voters = total_eligible
            snapshot.active_voter_count = len(voters)
            snapshot.voters = voters

    meeting.quorum_called_at = called_at
    db.session.commit()
    current_app.logger.info(
        "Quorum called for meeting %s at %s with %s active voters",
        meeting.id,
        called_at,
        snapshot.active_voter_count,
    )
    return meeting


def get_active_voters_for_quorum(meeting_id, now=None):
    meeting = _get_meeting_or_404(meeting_id)
    snapshot = meeting.quorum_snapshot

    if meeting.quorum_called_at is not None and snapshot is not None:
        return _roster_rows({voter.user_id: voter.last_activity for voter in snapshot.voters})

    cutoff = _window_end(meeting, now or utcnow())
    return _roster_rows(
        last_activity_by_pool_member(meeting.quorum_voting_pool_id, meeting.start_date, cutoff)
    )
