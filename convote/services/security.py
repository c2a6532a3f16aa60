from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from convote.extensions import db
from convote.models import User
from convote.services.errors import AuthenticationError, NotFound, ValidationError
from convote.services.settings import get_system_settings

INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
ACCOUNT_DISABLED = "ACCOUNT_DISABLED"
NO_PASSWORD_SET = "NO_PASSWORD_SET"
LOGIN_DISABLED = "LOGIN_DISABLED"


def _token_serializer():
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"])


def generate_auth_token(user):
    return _token_serializer().dumps({"sub": user.id}, salt="auth-token")


def verify_auth_token(token, max_age=None):
    if max_age is None:
        max_age = current_app.config.get("TOKEN_MAX_AGE", 86400)
    try:
        payload = _token_serializer().loads(token, salt="auth-token", max_age=max_age)
    except (BadSignature, SignatureExpired):
        return None
    if not isinstance(payload, dict) or not isinstance(payload.get("sub"), int):
        return None
    return payload["sub"]


def load_user_from_bearer(header_value):
    if not header_value or not header_value.startswith("Bearer "):
        return None
    user_id = verify_auth_token(header_value[len("Bearer "):].strip())
    if user_id is None:
        return None
    user = db.session.get(User, user_id)
    if user is None or user.is_disabled:
        return None
    return user


def hash_password(password):
    return generate_password_hash(password, method="pbkdf2:sha256")


def validate_login(username, password):
    """Check credentials and return the user, or raise AuthenticationError.

    Admins bypass the site-wide non-admin login switch.
    """
    user = User.query.filter_by(username=(username or "").strip()).first()
    if user is None:
        raise AuthenticationError("Invalid username or password.", INVALID_CREDENTIALS)

    if not user.is_admin and not get_system_settings()["non_admin_login_enabled"]:
        raise AuthenticationError("Login is currently disabled.", LOGIN_DISABLED)

    if user.password_hash is None:
        raise AuthenticationError("No password has been set for this account.", NO_PASSWORD_SET)

    if not check_password_hash(user.password_hash, password or ""):
        raise AuthenticationError("Invalid username or password.", INVALID_CREDENTIALS)

    if user.is_disabled:
        raise AuthenticationError("This account has been disabled.", ACCOUNT_DISABLED)

    return user


def create_user(username, first_name="", last_name="", password=None, is_admin=False, is_watcher=False):
    username = (username or "").strip()
    if not username:
        raise ValidationError("Username is required.")
    if is_admin and is_watcher:
        raise ValidationError("A user cannot be both admin and watcher.")
    if User.query.filter_by(username=username).first() is not None:
        raise ValidationError(f"Username '{username}' already exists")
    if password is not None and len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long.")

    user = User(
        username=username,
        first_name=(first_name or "").strip(),
        last_name=(last_name or "").strip(),
        password_hash=hash_password(password) if password else None,
        is_admin=bool(is_admin),
        is_watcher=bool(is_watcher),
    )
    db.session.add(user)
    db.session.commit()
    current_app.logger.info("User %s created", user.username)
    return user


def set_password(user_id, password):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound(f"User with ID {user_id} not found")
    if not password or len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long.")

    user.password_hash = hash_password(password)
    db.session.commit()
    current_app.logger.info("Password updated for user %s", user.username)
    return user


def ensure_admin_user(username, password):
    """Create or repair the bootstrap administrator; a no-op unless both are set.

    An existing account of that name is promoted to an enabled admin and its
    password is reset.
    """
    username = (username or "").strip()
    if not username or not password:
        return None

    user = User.query.filter_by(username=username).first()
    if user is None:
        user = User(username=username, first_name="Admin", last_name="User")
        db.session.add(user)
    user.password_hash = hash_password(password)
    user.is_admin = True
    user.is_watcher = False
    user.is_disabled = False
    db.session.commit()
    current_app.logger.info("Bootstrap admin %s ensured", user.username)
    return user


def set_user_disabled(user_id, disabled):
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFound(f"User with ID {user_id} not found")

    user.is_disabled = bool(disabled)
    db.session.commit()
    current_app.logger.info("User %s %s", user.username, "disabled" if disabled else "enabled")
    return user
