from datetime import datetime
from pathlib import Path
import sys
import os

import pytest
from flask import g

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

# Safety default for any module-level app creation during test imports.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from convote import create_app
from convote.extensions import db
from convote.models import Choice, Meeting, Motion, MotionStatus, Pool, User
from convote.services.security import generate_auth_token, hash_password

MEETING_START = datetime(2024, 6, 1, 9, 0, 0)
MEETING_END = datetime(2024, 6, 1, 17, 0, 0)


@pytest.fixture()
def app(tmp_path: Path):
    db_file = tmp_path / "test.sqlite3"
    app = create_app(
        {
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_file}",
            "SQLALCHEMY_ENGINE_OPTIONS": {},
            "SECRET_KEY": "test-secret",
        }
    )

    with app.app_context():
        driver = db.engine.url.drivername
        if driver != "sqlite":
            raise RuntimeError(
                f"Test database must be SQLite, got '{driver}'. Refusing to run destructive test setup."
            )
        db.drop_all()
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    @app.before_request
    def forget_cached_user():
        # The test app context outlives each request, so Flask-Login would
        # otherwise keep serving the first bearer it resolved.
        g.pop("_login_user", None)

    return app.test_client()


@pytest.fixture()
def db_session(app):
    with app.app_context():
        yield db.session


@pytest.fixture()
def pool(db_session):
    pool = Pool(pool_key="members", pool_name="Members")
    db_session.add(pool)
    db_session.commit()
    return pool


@pytest.fixture()
def admin_user(db_session):
    user = User(
        username="admin1",
        first_name="Ada",
        last_name="Admin",
        password_hash=hash_password("admin-password"),
        is_admin=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def watcher_user(db_session):
    user = User(
        username="watcher1",
        first_name="Wes",
        last_name="Watcher",
        password_hash=hash_password("watcher-password"),
        is_watcher=True,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def make_voter(db_session, pool):
    def _make_voter(username, in_pool=True, first_name="Val", last_name=None):
        user = User(
            username=username,
            first_name=first_name,
            last_name=last_name or username.capitalize(),
            password_hash=hash_password("voter-password"),
        )
        if in_pool:
            user.pools.append(pool)
        db_session.add(user)
        db_session.commit()
        return user

    return _make_voter


@pytest.fixture()
def voter(make_voter):
    return make_voter("voter1")


@pytest.fixture()
def meeting(db_session, pool):
    meeting = Meeting(
        name="Annual General Meeting",
        start_date=MEETING_START,
        end_date=MEETING_END,
        quorum_voting_pool_id=pool.id,
    )
    db_session.add(meeting)
    db_session.commit()
    return meeting


@pytest.fixture()
def make_motion(db_session, meeting):
    def _make_motion(
        choices=("Yes", "No"),
        seat_count=1,
        status=MotionStatus.NOT_YET_STARTED,
        name="Adopt the budget",
        voting_pool_id=None,
    ):
        motion = Motion(
            meeting_id=meeting.id,
            name=name,
            planned_duration=10,
            seat_count=seat_count,
            voting_pool_id=voting_pool_id,
            status=status,
        )
        if status is not MotionStatus.NOT_YET_STARTED:
            motion.voting_started_at = MEETING_START
        if status is MotionStatus.VOTING_COMPLETE:
            motion.voting_ended_at = MEETING_END
        motion.choices = [
            Choice(name=choice_name, sort_order=index)
            for index, choice_name in enumerate(choices)
        ]
        db_session.add(motion)
        db_session.commit()
        return motion

    return _make_motion


@pytest.fixture()
def auth_headers(app):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {generate_auth_token(user)}"}

    return _auth_headers
