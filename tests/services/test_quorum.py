from datetime import datetime, timedelta

import pytest

from convote.models import ActivityLog, QuorumSnapshot
from convote.services.activity import get_activity_logs_for_user, log_activity
from convote.services.errors import NotFound
from convote.services.quorum import call_quorum, get_active_voters_for_quorum, get_quorum_report

CALLED_AT = datetime(2024, 6, 1, 10, 0, 0)
LATER = datetime(2024, 6, 1, 12, 0, 0)


def _seen(db_session, user, at):
    db_session.add(ActivityLog(user_id=user.id, url_path="/voter/motions/open", created_at=at))
    db_session.commit()


def test_live_report_counts_pool_members_active_during_meeting(
    db_session, meeting, make_voter, admin_user
):
    alice, bob, _ = [make_voter(name) for name in ("alice", "bob", "carol")]
    outsider = make_voter("outsider", in_pool=False)
    _seen(db_session, alice, datetime(2024, 6, 1, 9, 30))
    _seen(db_session, alice, datetime(2024, 6, 1, 9, 45))
    _seen(db_session, bob, datetime(2024, 5, 31, 23, 0))
    _seen(db_session, outsider, datetime(2024, 6, 1, 9, 30))
    _seen(db_session, admin_user, datetime(2024, 6, 1, 9, 30))

    report = get_quorum_report(meeting.id, now=LATER)

    assert report["total_eligible_voters"] == 3
    assert report["active_voter_count"] == 1
    assert round(report["active_voter_percentage"], 2) == 33.33
    assert report["is_frozen"] is False
    assert report["calculated_as_of"] == LATER
    assert report["quorum_pool_name"] == "Members"


def test_live_window_ends_at_meeting_end(db_session, meeting, make_voter):
    alice = make_voter("alice")
    _seen(db_session, alice, meeting.end_date + timedelta(minutes=5))

    report = get_quorum_report(meeting.id, now=meeting.end_date + timedelta(hours=1))

    assert report["active_voter_count"] == 0


def test_called_quorum_ignores_later_activity_until_cleared(db_session, meeting, make_voter):
    alice, bob = make_voter("alice"), make_voter("bob")
    _seen(db_session, alice, datetime(2024, 6, 1, 9, 30))

    call_quorum(meeting.id, CALLED_AT)
    _seen(db_session, bob, datetime(2024, 6, 1, 10, 30))
    make_voter("latecomer")

    frozen = get_quorum_report(meeting.id, now=LATER)
    assert frozen["is_frozen"] is True
    assert frozen["active_voter_count"] == 1
    assert frozen["total_eligible_voters"] == 2
    assert frozen["quorum_called_at"] == CALLED_AT
    assert frozen["calculated_as_of"] == CALLED_AT
    assert get_quorum_report(meeting.id, now=LATER)["active_voter_count"] == 1

    call_quorum(meeting.id, None)

    live = get_quorum_report(meeting.id, now=LATER)
    assert live["is_frozen"] is False
    assert live["quorum_called_at"] is None
    assert live["active_voter_count"] == 2
    assert live["total_eligible_voters"] == 3
    assert QuorumSnapshot.query.count() == 0


def test_roster_is_frozen_with_the_count(db_session, meeting, make_voter):
    alice, bob = make_voter("alice"), make_voter("bob")
    _seen(db_session, alice, datetime(2024, 6, 1, 9, 30))
    call_quorum(meeting.id, CALLED_AT)
    _seen(db_session, bob, datetime(2024, 6, 1, 10, 30))
    _seen(db_session, alice, datetime(2024, 6, 1, 10, 45))

    roster = get_active_voters_for_quorum(meeting.id, now=LATER)

    assert [row["username"] for row in roster] == ["alice"]
    assert roster[0]["last_activity"] == datetime(2024, 6, 1, 9, 30)

    call_quorum(meeting.id, None)
    roster = get_active_voters_for_quorum(meeting.id, now=LATER)
    assert [row["username"] for row in roster] == ["alice", "bob"]
    assert roster[0]["last_activity"] == datetime(2024, 6, 1, 10, 45)


def test_recalling_quorum_moves_the_freeze_point(db_session, meeting, make_voter):
    alice, bob = make_voter("alice"), make_voter("bob")
    _seen(db_session, alice, datetime(2024, 6, 1, 9, 30))
    _seen(db_session, bob, datetime(2024, 6, 1, 10, 30))

    call_quorum(meeting.id, CALLED_AT)
    assert get_quorum_report(meeting.id)["active_voter_count"] == 1

    call_quorum(meeting.id, datetime(2024, 6, 1, 11, 0))
    report = get_quorum_report(meeting.id)
    assert report["active_voter_count"] == 2
    assert QuorumSnapshot.query.count() == 1


def test_log_activity_strips_query_and_truncates(db_session, voter):
    log_activity(voter.id, "/voter/motions/open?page=2")
    log_activity(voter.id, "/" + "a" * 600)

    paths = [row.url_path for row in ActivityLog.query.order_by(ActivityLog.id).all()]
    assert paths[0] == "/voter/motions/open"
    assert len(paths[1]) == 500


def test_activity_logs_for_user_newest_first(db_session, voter):
    _seen(db_session, voter, datetime(2024, 6, 1, 9, 30))
    _seen(db_session, voter, datetime(2024, 6, 1, 9, 45))
    _seen(db_session, voter, datetime(2024, 6, 2, 9, 45))

    logs = get_activity_logs_for_user(
        voter.id, datetime(2024, 6, 1, 0, 0), datetime(2024, 6, 1, 23, 59)
    )

    assert [row.created_at for row in logs] == [
        datetime(2024, 6, 1, 9, 45),
        datetime(2024, 6, 1, 9, 30),
    ]


def test_first_quorum_call_stores_complete_snapshot(db_session, meeting, make_voter):
    alice = make_voter("alice")
    make_voter("bob")
    _seen(db_session, alice, datetime(2024, 6, 1, 9, 30))

    call_quorum(meeting.id, CALLED_AT)

    snapshot = QuorumSnapshot.query.filter_by(meeting_id=meeting.id).one()
    assert snapshot.called_at == CALLED_AT
    assert snapshot.total_eligible_voters == 2
    assert snapshot.active_voter_count == 1
    assert [voter.user_id for voter in snapshot.voters] == [alice.id]


def test_activity_logs_for_unknown_user(db_session):
    with pytest.raises(NotFound):
        get_activity_logs_for_user(999, CALLED_AT, LATER)
