from convote.extensions import db
from convote.models import Pool
from convote.services.pools import effective_pool_id
from convote.services.voting.lifecycle import voting_deadline


def user_to_dict(user):
    return {
        "id": user.id,
        "username": user.username,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "is_admin": user.is_admin,
        "is_watcher": user.is_watcher,
        "is_disabled": user.is_disabled,
    }


def pool_to_dict(pool):
    return {
        "id": pool.id,
        "pool_key": pool.pool_key,
        "pool_name": pool.pool_name,
        "description": pool.description,
        "is_disabled": pool.is_disabled,
    }


def meeting_to_dict(meeting):
    return {
        "id": meeting.id,
        "name": meeting.name,
        "description": meeting.description,
        "start_date": meeting.start_date,
        "end_date": meeting.end_date,
        "quorum_voting_pool_id": meeting.quorum_voting_pool_id,
        "quorum_pool_name": meeting.quorum_pool.pool_name if meeting.quorum_pool else None,
        "quorum_called_at": meeting.quorum_called_at,
        "created_at": meeting.created_at,
        "updated_at": meeting.updated_at,
    }


def choice_to_dict(choice):
    return {
        "id": choice.id,
        "motion_id": choice.motion_id,
        "name": choice.name,
        "sort_order": choice.sort_order,
    }


def motion_to_dict(motion, include_choices=False):
    data = {
        "id": motion.id,
        "meeting_id": motion.meeting_id,
        "name": motion.name,
        "description": motion.description,
        "planned_duration": motion.planned_duration,
        "seat_count": motion.seat_count,
        "voting_pool_id": motion.voting_pool_id,
        "voting_pool_name": motion.voting_pool.pool_name if motion.voting_pool else None,
        "status": motion.status.value,
        "end_override": motion.end_override,
        "voting_started_at": motion.voting_started_at,
        "voting_ended_at": motion.voting_ended_at,
        "voting_ends_at": voting_deadline(motion),
        "created_at": motion.created_at,
        "updated_at": motion.updated_at,
    }
    if include_choices:
        data["choices"] = [choice_to_dict(choice) for choice in motion.choices]
    return data


def voter_motion_to_dict(motion):
    meeting = motion.meeting
    pool = db.session.get(Pool, effective_pool_id(motion, meeting))
    return {
        "id": motion.id,
        "name": motion.name,
        "description": motion.description,
        "planned_duration": motion.planned_duration,
        "seat_count": motion.seat_count,
        "voting_pool_name": pool.pool_name if pool else None,
        "meeting_id": meeting.id,
        "meeting_name": meeting.name,
        "voting_started_at": motion.voting_started_at,
        "voting_ends_at": voting_deadline(motion),
    }


def activity_to_dict(entry):
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "url_path": entry.url_path,
        "created_at": entry.created_at,
    }
