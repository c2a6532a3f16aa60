from datetime import datetime

import pytest

from convote.models import Choice, Meeting, Motion, MotionStatus
from convote.services import meetings as meeting_service
from convote.services.errors import MotionLocked, NotFound, ValidationError


def test_create_meeting_requires_valid_dates_and_pool(db_session, pool):
    start = datetime(2024, 7, 1, 9, 0)

    with pytest.raises(ValidationError):
        meeting_service.create_meeting("Board", start, start, pool.id)
    with pytest.raises(NotFound):
        meeting_service.create_meeting("Board", start, datetime(2024, 7, 1, 12, 0), 999)

    meeting = meeting_service.create_meeting(
        "Board", start, datetime(2024, 7, 1, 12, 0), pool.id, description="  "
    )
    assert meeting.description is None
    assert Meeting.query.count() == 1


def test_update_meeting_rechecks_date_order(db_session, meeting):
    with pytest.raises(ValidationError):
        meeting_service.update_meeting(meeting.id, end_date=datetime(2024, 6, 1, 8, 0))

    updated = meeting_service.update_meeting(meeting.id, name="Special Meeting")
    assert updated.name == "Special Meeting"


def test_list_meetings_paginates_newest_first(db_session, pool):
    for day in (1, 2, 3):
        meeting_service.create_meeting(
            f"Day {day}", datetime(2024, 7, day, 9, 0), datetime(2024, 7, day, 17, 0), pool.id
        )

    meetings, total = meeting_service.list_meetings(page=1, limit=2)

    assert total == 3
    assert [meeting.name for meeting in meetings] == ["Day 3", "Day 2"]


def test_new_motion_starts_not_yet_started(db_session, meeting):
    motion = meeting_service.create_motion(meeting.id, "Elect officers", 15, seat_count=None)

    assert motion.status is MotionStatus.NOT_YET_STARTED
    assert motion.seat_count == 1

    with pytest.raises(ValidationError):
        meeting_service.create_motion(meeting.id, "Bad", 0)


def test_choices_get_dense_sort_order(db_session, make_motion):
    motion = make_motion(choices=())
    first = meeting_service.create_choice(motion.id, "First")
    second = meeting_service.create_choice(motion.id, "Second")
    third = meeting_service.create_choice(motion.id, "Third")
    assert [first.sort_order, second.sort_order, third.sort_order] == [0, 1, 2]

    reordered = meeting_service.reorder_choices(motion.id, [third.id, first.id, second.id])
    assert [choice.name for choice in reordered] == ["Third", "First", "Second"]

    meeting_service.delete_choice(first.id)
    remaining = meeting_service.list_choices_for_motion(motion.id)
    assert [(choice.name, choice.sort_order) for choice in remaining] == [
        ("Third", 0),
        ("Second", 1),
    ]


def test_reorder_must_name_every_choice_once(db_session, make_motion):
    motion = make_motion(choices=("A", "B"))
    first = motion.choices[0]

    with pytest.raises(ValidationError):
        meeting_service.reorder_choices(motion.id, [first.id])
    with pytest.raises(ValidationError):
        meeting_service.reorder_choices(motion.id, [first.id, first.id])


def test_choices_locked_once_voting_started(db_session, make_motion):
    motion = make_motion(status=MotionStatus.VOTING_ACTIVE)
    choice = motion.choices[0]

    with pytest.raises(MotionLocked):
        meeting_service.update_choice(choice.id, name="Changed")
    with pytest.raises(MotionLocked):
        meeting_service.delete_choice(choice.id)

    assert db_session.get(Choice, choice.id).name == "Yes"


def test_deleting_meeting_removes_its_motions(db_session, meeting, make_motion):
    make_motion()

    meeting_service.delete_meeting(meeting.id)

    assert Motion.query.count() == 0
    assert Choice.query.count() == 0
