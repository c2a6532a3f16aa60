from flask import current_app

from convote.extensions import db
from convote.models import Choice, Meeting, Motion
from convote.services.errors import NotFound, ValidationError
from convote.services.pools import get_pool_or_404
from convote.services.voting.lifecycle import (
    claim_configurable,
    ensure_configurable,
    get_motion_or_404,
)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50
DEFAULT_SEAT_COUNT = 1


def get_meeting_or_404(meeting_id):
    meeting = db.session.get(Meeting, meeting_id)
    if meeting is None:
        raise NotFound(f"Meeting with ID {meeting_id} not found")
    return meeting


def get_choice_or_404(choice_id):
    choice = db.session.get(Choice, choice_id)
    if choice is None:
        raise NotFound(f"Choice with ID {choice_id} not found")
    return choice


def _optional_text(value, field):
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string.")
    return value.strip() or None


def _required_text(value, field):
    text = _optional_text(value, field)
    if not text:
        raise ValidationError(f"{field} is required.")
    return text


def _positive_int(value, field, minimum=1):
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer.")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer.") from None
    if number < minimum:
        raise ValidationError(f"{field} must be at least {minimum}.")
    return number


def _check_dates(start_date, end_date):
    if end_date <= start_date:
        raise ValidationError("Meeting end date must be after its start date.")


def create_meeting(name, start_date, end_date, quorum_voting_pool_id, description=None):
    name = _required_text(name, "Meeting name")
    _check_dates(start_date, end_date)
    get_pool_or_404(quorum_voting_pool_id)

    meeting = Meeting(
        name=name,
        description=_optional_text(description, "Description"),
        start_date=start_date,
        end_date=end_date,
        quorum_voting_pool_id=quorum_voting_pool_id,
    )
    db.session.add(meeting)
    db.session.commit()
    current_app.logger.info("Meeting %s created", meeting.id)
    return meeting


def update_meeting(meeting_id, **updates):
    meeting = get_meeting_or_404(meeting_id)
    if not updates:
        raise ValidationError("No fields to update")

    if "name" in updates:
        meeting.name = _required_text(updates["name"], "Meeting name")
    if "description" in updates:
        meeting.description = _optional_text(updates["description"], "Description")
    if "quorum_voting_pool_id" in updates:
        get_pool_or_404(updates["quorum_voting_pool_id"])
        meeting.quorum_voting_pool_id = updates["quorum_voting_pool_id"]

    start_date = updates.get("start_date", meeting.start_date)
    end_date = updates.get("end_date", meeting.end_date)
    _check_dates(start_date, end_date)
    meeting.start_date = start_date
    meeting.end_date = end_date

    db.session.commit()
    return meeting


def delete_meeting(meeting_id):
    meeting = get_meeting_or_404(meeting_id)
    db.session.delete(meeting)
    db.session.commit()
    current_app.logger.info("Meeting %s deleted", meeting_id)


def list_meetings(page=DEFAULT_PAGE, limit=DEFAULT_LIMIT):
    page = max(page, 1)
    limit = max(limit, 1)
    query = Meeting.query.order_by(Meeting.start_date.desc(), Meeting.id.desc())
    total = query.count()
    meetings = query.offset((page - 1) * limit).limit(limit).all()
    return meetings, total


def create_motion(
    meeting_id,
    name,
    planned_duration,
    seat_count=DEFAULT_SEAT_COUNT,
    voting_pool_id=None,
    description=None,
):
    meeting = get_meeting_or_404(meeting_id)
    if voting_pool_id is not None:
        get_pool_or_404(voting_pool_id)

    motion = Motion(
        meeting_id=meeting.id,
        name=_required_text(name, "Motion name"),
        description=_optional_text(description, "Description"),
        planned_duration=_positive_int(planned_duration, "Planned duration"),
        seat_count=_positive_int(
            DEFAULT_SEAT_COUNT if seat_count is None else seat_count, "Seat count"
        ),
        voting_pool_id=voting_pool_id,
    )
    db.session.add(motion)
    db.session.commit()
    current_app.logger.info("Motion %s created in meeting %s", motion.id, meeting.id)
    return motion


def update_motion(motion_id, **updates):
    motion = get_motion_or_404(motion_id)
    ensure_configurable(motion)
    if not updates:
        raise ValidationError("No fields to update")

    if "name" in updates:
        motion.name = _required_text(updates["name"], "Motion name")
    if "description" in updates:
        motion.description = _optional_text(updates["description"], "Description")
    if "planned_duration" in updates:
        motion.planned_duration = _positive_int(updates["planned_duration"], "Planned duration")
    if "seat_count" in updates:
        motion.seat_count = _positive_int(updates["seat_count"], "Seat count")
    if "voting_pool_id" in updates:
        if updates["voting_pool_id"] is not None:
            get_pool_or_404(updates["voting_pool_id"])
        motion.voting_pool_id = updates["voting_pool_id"]

    claim_configurable(motion.id)
    db.session.commit()
    return motion


def delete_motion(motion_id):
    motion = get_motion_or_404(motion_id)
    db.session.delete(motion)
    db.session.commit()
    current_app.logger.info("Motion %s deleted", motion_id)


def list_motions_for_meeting(meeting_id):
    meeting = get_meeting_or_404(meeting_id)
    return list(meeting.motions)


def list_choices_for_motion(motion_id):
    get_motion_or_404(motion_id)
    return (
        Choice.query.filter_by(motion_id=motion_id)
        .order_by(Choice.sort_order.asc(), Choice.id.asc())
        .all()
    )


def create_choice(motion_id, name, sort_order=None):
    motion = get_motion_or_404(motion_id)
    ensure_configurable(motion, "choices")

    if sort_order is None:
        max_order = db.session.execute(
            db.select(db.func.max(Choice.sort_order)).where(Choice.motion_id == motion.id)
        ).scalar()
        sort_order = 0 if max_order is None else max_order + 1
    else:
        sort_order = _positive_int(sort_order, "Sort order", minimum=0)

    choice = Choice(motion_id=motion.id, name=_required_text(name, "Choice name"), sort_order=sort_order)
    db.session.add(choice)
    claim_configurable(motion.id, "choices")
    db.session.commit()
    return choice


def update_choice(choice_id, **updates):
    choice = get_choice_or_404(choice_id)
    ensure_configurable(choice.motion, "choices")
    if not updates:
        raise ValidationError("No fields to update")

    if "name" in updates:
        choice.name = _required_text(updates["name"], "Choice name")
    if "sort_order" in updates:
        choice.sort_order = _positive_int(updates["sort_order"], "Sort order", minimum=0)

    claim_configurable(choice.motion_id, "choices")
    db.session.commit()
    return choice


def reorder_choices(motion_id, choice_ids):
    motion = get_motion_or_404(motion_id)
    ensure_configurable(motion, "choices")

    choices_by_id = {choice.id: choice for choice in motion.choices}
    if sorted(choice_ids) != sorted(choices_by_id):
        raise ValidationError("Reorder must list every choice of the motion exactly once.")

    for index, choice_id in enumerate(choice_ids):
        choices_by_id[choice_id].sort_order = index

    claim_configurable(motion.id, "choices")
    db.session.commit()
    return list_choices_for_motion(motion.id)


def delete_choice(choice_id):
    choice = get_choice_or_404(choice_id)
    motion = choice.motion
    ensure_configurable(motion, "choices")

    db.session.delete(choice)
    remaining = sorted(
        (other for other in motion.choices if other.id != choice.id),
        key=lambda other: (other.sort_order, other.id),
    )
    for index, other in enumerate(remaining):
        other.sort_order = index
    claim_configurable(motion.id, "choices")
    db.session.commit()
