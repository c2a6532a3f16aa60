from datetime import date, datetime
from functools import wraps

from flask import jsonify, request
from flask_login import current_user, login_required

from convote.services.activity import log_activity
from convote.services.errors import ValidationError
from convote.utils import isoformat, parse_timestamp

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50


def to_json(value):
    if isinstance(value, datetime):
        return isoformat(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_json(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]
    return value


def ok(data=None, status_code=200, **extra):
    body = {"ok": True}
    if data is not None:
        body["data"] = to_json(data)
    body.update(to_json(extra))
    return jsonify(body), status_code


def error_response(message, status, code=None):
    body = {"ok": False, "error": message}
    if code:
        body["code"] = code
    return jsonify(body), status


def get_payload():
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    return payload


def first_present(payload, *keys):
    """Return (True, value) for the first key present in ``payload``."""
    for key in keys:
        if key in payload:
            return True, payload[key]
    return False, None


def parse_int(value, field):
    # JSON numbers arrive as int or float; 3.0 is accepted, 3.9 is not.
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise ValidationError(f"{field} must be an integer.") from None
    raise ValidationError(f"{field} must be an integer.")


def parse_optional_int(value, field):
    return None if value is None else parse_int(value, field)


def parse_optional_text(value, field):
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field} must be a string.")
    return value


def parse_flag(value, field):
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be a boolean value")
    return value


def parse_int_list(value, field):
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{field} must be a list of integers.")
    return [parse_int(item, field) for item in value]


def parse_datetime(value, field):
    try:
        return parse_timestamp(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an ISO 8601 timestamp.") from None


def parse_optional_datetime(value, field):
    return None if value is None else parse_datetime(value, field)


def pagination_args():
    page = request.args.get("page", DEFAULT_PAGE, type=int) or DEFAULT_PAGE
    limit = request.args.get("limit", DEFAULT_LIMIT, type=int) or DEFAULT_LIMIT
    return max(page, 1), max(limit, 1)


def paginated(items, page, limit, total):
    return ok(
        items,
        pagination={
            "page": page,
            "limit": limit,
            "total": total,
            "total_pages": (total + limit - 1) // limit,
        },
    )


def role_required(check, message):
    """Require an authenticated user passing ``check``; log the request for quorum."""

    def decorator(view):
        @wraps(view)
        @login_required
        def wrapped(*args, **kwargs):
            if not check(current_user):
                return error_response(message, 403, "Forbidden")
            log_activity(current_user.id, request.path)
            return view(*args, **kwargs)

        return wrapped

    return decorator


admin_required = role_required(lambda user: user.is_admin, "Admin privileges required")
watcher_required = role_required(lambda user: user.is_watcher, "Watcher privileges required")
# Admins and watchers never vote.
voter_required = role_required(lambda user: user.is_voter, "Voting privileges required")
