from flask import request
from flask_login import current_user

from convote.routes.common import (
    admin_required,
    first_present,
    get_payload,
    ok,
    paginated,
    pagination_args,
    parse_datetime,
    parse_flag,
    parse_int,
    parse_int_list,
    parse_optional_datetime,
    parse_optional_int,
    parse_optional_text,
)
from convote.routes.serializers import (
    activity_to_dict,
    choice_to_dict,
    meeting_to_dict,
    motion_to_dict,
    pool_to_dict,
    user_to_dict,
)
from convote.services import meetings as meeting_service
from convote.services.activity import DEFAULT_ACTIVITY_LIMIT, get_activity_logs_for_user
from convote.services.errors import ValidationError
from convote.services.pools import (
    add_user_to_pool,
    create_pool,
    remove_user_from_pool,
    set_pool_disabled,
)
from convote.services.quorum import call_quorum, get_active_voters_for_quorum, get_quorum_report
from convote.services.security import create_user, set_password, set_user_disabled
from convote.services.settings import get_system_settings, set_non_admin_login_enabled
from convote.services.voting import (
    get_detailed_results,
    get_motion_vote_stats,
    set_motion_end_override,
    transition_motion_status,
)
from convote.services.voting.lifecycle import get_motion_or_404

MEETING_FIELDS = (
    ("name", ("name",), parse_optional_text),
    ("description", ("description",), parse_optional_text),
    ("start_date", ("startDate", "start_date"), parse_datetime),
    ("end_date", ("endDate", "end_date"), parse_datetime),
    ("quorum_voting_pool_id", ("quorumVotingPoolId", "quorum_voting_pool_id"), parse_int),
)

MOTION_FIELDS = (
    ("name", ("name",), parse_optional_text),
    ("description", ("description",), parse_optional_text),
    ("planned_duration", ("plannedDuration", "planned_duration"), parse_int),
    ("seat_count", ("seatCount", "seat_count"), parse_int),
    ("voting_pool_id", ("votingPoolId", "voting_pool_id"), parse_optional_int),
)

CHOICE_FIELDS = (
    ("name", ("name",), parse_optional_text),
    ("sort_order", ("sortOrder", "sort_order"), parse_int),
)


def _collect(payload, fields):
    values = {}
    for name, keys, parser in fields:
        present, raw = first_present(payload, *keys)
        if present:
            values[name] = parser(raw, keys[0])
    return values


def _require(values, *names):
    missing = [name for name in names if values.get(name) is None]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")


def register_admin_routes(app):
    # Meetings

    @app.route("/admin/meetings")
    @admin_required
    def admin_meetings():
        page, limit = pagination_args()
        meetings, total = meeting_service.list_meetings(page, limit)
        return paginated([meeting_to_dict(meeting) for meeting in meetings], page, limit, total)

    @app.route("/admin/meetings", methods=["POST"])
    @admin_required
    def create_meeting():
        values = _collect(get_payload(), MEETING_FIELDS)
        _require(values, "name", "start_date", "end_date", "quorum_voting_pool_id")
        meeting = meeting_service.create_meeting(**values)
        return ok(meeting_to_dict(meeting), status_code=201)

    @app.route("/admin/meetings/<int:meeting_id>")
    @admin_required
    def meeting_detail(meeting_id):
        meeting = meeting_service.get_meeting_or_404(meeting_id)
        data = meeting_to_dict(meeting)
        data["motions"] = [motion_to_dict(motion) for motion in meeting.motions]
        return ok(data)

    @app.route("/admin/meetings/<int:meeting_id>", methods=["PUT"])
    @admin_required
    def update_meeting(meeting_id):
        values = _collect(get_payload(), MEETING_FIELDS)
        meeting = meeting_service.update_meeting(meeting_id, **values)
        return ok(meeting_to_dict(meeting))

    @app.route("/admin/meetings/<int:meeting_id>", methods=["DELETE"])
    @admin_required
    def delete_meeting(meeting_id):
        meeting_service.delete_meeting(meeting_id)
        return ok(message="Meeting deleted.")

    # Motions

    @app.route("/admin/meetings/<int:meeting_id>/motions")
    @admin_required
    def meeting_motions(meeting_id):
        motions = meeting_service.list_motions_for_meeting(meeting_id)
        return ok([motion_to_dict(motion) for motion in motions])

    @app.route("/admin/meetings/<int:meeting_id>/motions", methods=["POST"])
    @admin_required
    def create_motion(meeting_id):
        values = _collect(get_payload(), MOTION_FIELDS)
        _require(values, "name", "planned_duration")
        motion = meeting_service.create_motion(meeting_id, **values)
        return ok(motion_to_dict(motion, include_choices=True), status_code=201)

    @app.route("/admin/motions/<int:motion_id>")
    @admin_required
    def motion_detail(motion_id):
        return ok(motion_to_dict(get_motion_or_404(motion_id), include_choices=True))

    @app.route("/admin/motions/<int:motion_id>", methods=["PUT"])
    @admin_required
    def update_motion(motion_id):
        values = _collect(get_payload(), MOTION_FIELDS)
        motion = meeting_service.update_motion(motion_id, **values)
        return ok(motion_to_dict(motion, include_choices=True))

    @app.route("/admin/motions/<int:motion_id>", methods=["DELETE"])
    @admin_required
    def delete_motion(motion_id):
        meeting_service.delete_motion(motion_id)
        return ok(message="Motion deleted.")

    @app.route("/motions/<int:motion_id>/status", methods=["PUT"])
    @app.route("/admin/motions/<int:motion_id>/status", methods=["PUT"])
    @admin_required
    def update_motion_status(motion_id):
        payload = get_payload()
        if not payload.get("status"):
            raise ValidationError("Missing required field: status")
        _, raw_override = first_present(payload, "endOverride", "end_override")
        motion = transition_motion_status(
            motion_id,
            payload["status"],
            end_override=parse_optional_datetime(raw_override, "endOverride"),
        )
        return ok(motion_to_dict(motion))

    @app.route("/admin/motions/<int:motion_id>/end-override", methods=["PUT"])
    @admin_required
    def update_motion_end_override(motion_id):
        _, raw_override = first_present(get_payload(), "endOverride", "end_override")
        motion = set_motion_end_override(
            motion_id, parse_optional_datetime(raw_override, "endOverride")
        )
        return ok(motion_to_dict(motion))

    @app.route("/admin/motions/<int:motion_id>/vote-stats")
    @admin_required
    def motion_vote_stats(motion_id):
        return ok(get_motion_vote_stats(motion_id))

    @app.route("/admin/motions/<int:motion_id>/results")
    @admin_required
    def motion_results(motion_id):
        return ok(get_detailed_results(motion_id))

    # Choices

    @app.route("/admin/motions/<int:motion_id>/choices")
    @admin_required
    def motion_choices(motion_id):
        choices = meeting_service.list_choices_for_motion(motion_id)
        return ok([choice_to_dict(choice) for choice in choices])

    @app.route("/admin/motions/<int:motion_id>/choices", methods=["POST"])
    @admin_required
    def create_choice(motion_id):
        values = _collect(get_payload(), CHOICE_FIELDS)
        _require(values, "name")
        choice = meeting_service.create_choice(motion_id, **values)
        return ok(choice_to_dict(choice), status_code=201)

    @app.route("/admin/motions/<int:motion_id>/choices/order", methods=["PUT"])
    @admin_required
    def reorder_choices(motion_id):
        _, raw_ids = first_present(get_payload(), "choiceIds", "choice_ids")
        choices = meeting_service.reorder_choices(
            motion_id, parse_int_list(raw_ids, "choiceIds")
        )
        return ok([choice_to_dict(choice) for choice in choices])

    @app.route("/admin/choices/<int:choice_id>", methods=["PUT"])
    @admin_required
    def update_choice(choice_id):
        values = _collect(get_payload(), CHOICE_FIELDS)
        choice = meeting_service.update_choice(choice_id, **values)
        return ok(choice_to_dict(choice))

    @app.route("/admin/choices/<int:choice_id>", methods=["DELETE"])
    @admin_required
    def delete_choice(choice_id):
        meeting_service.delete_choice(choice_id)
        return ok(message="Choice deleted.")

    # Quorum

    @app.route("/admin/meetings/<int:meeting_id>/quorum")
    @admin_required
    def meeting_quorum(meeting_id):
        return ok(get_quorum_report(meeting_id))

    @app.route("/admin/meetings/<int:meeting_id>/quorum", methods=["PUT"])
    @admin_required
    def call_meeting_quorum(meeting_id):
        payload = get_payload()
        present, raw_called_at = first_present(payload, "quorumCalledAt", "quorum_called_at")
        if not present:
            raise ValidationError("Missing required field: quorumCalledAt")
        call_quorum(meeting_id, parse_optional_datetime(raw_called_at, "quorumCalledAt"))
        return ok(get_quorum_report(meeting_id))

    @app.route("/admin/meetings/<int:meeting_id>/quorum/voters")
    @admin_required
    def meeting_quorum_voters(meeting_id):
        return ok(get_active_voters_for_quorum(meeting_id))

    # Settings, users and pools

    @app.route("/admin/settings")
    @admin_required
    def system_settings():
        return ok(get_system_settings())

    @app.route("/admin/settings/login-enabled", methods=["PUT"])
    @admin_required
    def update_login_enabled():
        enabled = get_payload().get("enabled")
        if not isinstance(enabled, bool):
            raise ValidationError("enabled must be a boolean value")
        return ok(set_non_admin_login_enabled(enabled))

    @app.route("/admin/users", methods=["POST"])
    @admin_required
    def create_user_account():
        payload = get_payload()
        _, first_name = first_present(payload, "firstName", "first_name")
        _, last_name = first_present(payload, "lastName", "last_name")
        _, is_admin = first_present(payload, "isAdmin", "is_admin")
        _, is_watcher = first_present(payload, "isWatcher", "is_watcher")
        user = create_user(
            parse_optional_text(payload.get("username"), "username"),
            first_name=parse_optional_text(first_name, "firstName") or "",
            last_name=parse_optional_text(last_name, "lastName") or "",
            password=parse_optional_text(payload.get("password"), "password"),
            is_admin=parse_flag(is_admin, "isAdmin"),
            is_watcher=parse_flag(is_watcher, "isWatcher"),
        )
        return ok(user_to_dict(user), status_code=201)

    @app.route("/admin/pools", methods=["POST"])
    @admin_required
    def create_voting_pool():
        payload = get_payload()
        _, pool_key = first_present(payload, "poolKey", "pool_key")
        _, pool_name = first_present(payload, "poolName", "pool_name")
        pool = create_pool(
            parse_optional_text(pool_key, "poolKey"),
            parse_optional_text(pool_name, "poolName"),
            parse_optional_text(payload.get("description"), "description"),
        )
        return ok(pool_to_dict(pool), status_code=201)

    @app.route("/admin/pools/<int:pool_id>/users/<int:user_id>", methods=["POST"])
    @admin_required
    def add_pool_member(pool_id, user_id):
        add_user_to_pool(pool_id, user_id)
        return ok(message="User added to pool successfully")

    @app.route("/admin/pools/<int:pool_id>/users/<int:user_id>", methods=["DELETE"])
    @admin_required
    def remove_pool_member(pool_id, user_id):
        remove_user_from_pool(pool_id, user_id)
        return ok(message="User removed from pool successfully")

    @app.route("/admin/users/<int:user_id>/password", methods=["PUT"])
    @admin_required
    def update_user_password(user_id):
        user = set_password(
            user_id, parse_optional_text(get_payload().get("password"), "password")
        )
        return ok(user_to_dict(user))

    @app.route("/admin/users/<int:user_id>/disable", methods=["PUT"])
    @admin_required
    def disable_user(user_id):
        if user_id == current_user.id:
            raise ValidationError("You cannot disable your own account")
        return ok(user_to_dict(set_user_disabled(user_id, True)))

    @app.route("/admin/users/<int:user_id>/enable", methods=["PUT"])
    @admin_required
    def enable_user(user_id):
        return ok(user_to_dict(set_user_disabled(user_id, False)))

    @app.route("/admin/pools/<int:pool_id>/disable", methods=["PUT"])
    @admin_required
    def disable_pool(pool_id):
        return ok(pool_to_dict(set_pool_disabled(pool_id, True)))

    @app.route("/admin/pools/<int:pool_id>/enable", methods=["PUT"])
    @admin_required
    def enable_pool(pool_id):
        return ok(pool_to_dict(set_pool_disabled(pool_id, False)))

    @app.route("/admin/users/<int:user_id>/activity")
    @admin_required
    def user_activity(user_id):
        start = request.args.get("start")
        end = request.args.get("end")
        if not start or not end:
            raise ValidationError("Missing required query parameters: start, end")
        limit = request.args.get("limit", DEFAULT_ACTIVITY_LIMIT, type=int) or DEFAULT_ACTIVITY_LIMIT
        entries = get_activity_logs_for_user(
            user_id,
            parse_datetime(start, "start"),
            parse_datetime(end, "end"),
            limit=max(limit, 1),
        )
        return ok([activity_to_dict(entry) for entry in entries])
