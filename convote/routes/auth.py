from flask import current_app
from flask_login import current_user, login_required

from convote.routes.common import get_payload, ok, parse_optional_text
from convote.routes.serializers import user_to_dict
from convote.services.errors import AuthenticationError
from convote.services.security import generate_auth_token, validate_login


def register_auth_routes(app):
    @app.route("/auth/login", methods=["POST"])
    def login():
        payload = get_payload()
        username = (parse_optional_text(payload.get("username"), "username") or "").strip()
        password = parse_optional_text(payload.get("password"), "password") or ""

        try:
            user = validate_login(username, password)
        except AuthenticationError as error:
            current_app.logger.warning(
                "Rejected login for %s: %s", username, error.error_code
            )
            raise

        return ok({"token": generate_auth_token(user), "user": user_to_dict(user)})

    @app.route("/auth/me")
    @login_required
    def me():
        return ok(user_to_dict(current_user))
