import click
from flask import Flask

from convote.config import Config
from convote.extensions import db, login_manager, migrate
from convote.models import User
from convote.routes import register_routes
from convote.routes.common import error_response
from convote.services.errors import ConvoteError
from convote.services.security import ensure_admin_user, load_user_from_bearer


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.from_mapping(test_config)

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.request_loader
    def load_user_from_request(req):
        return load_user_from_bearer(req.headers.get("Authorization"))

    @login_manager.unauthorized_handler
    def unauthorized():
        return error_response("Authentication required.", 401, "Unauthorized")

    @app.errorhandler(ConvoteError)
    def handle_convote_error(error):
        db.session.rollback()
        code = getattr(error, "error_code", None) or error.code
        return error_response(error.message, error.status_code, code)

    @app.errorhandler(404)
    def handle_not_found(error):
        return error_response("Resource not found.", 404, "NotFound")

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return error_response("Method not allowed.", 405, "MethodNotAllowed")

    @app.cli.command("ensure-admin")
    def ensure_admin_command():
        """Create or repair the ADMIN_USERNAME account."""
        user = ensure_admin_user(app.config["ADMIN_USERNAME"], app.config["ADMIN_PASSWORD"])
        if user is None:
            click.echo("ADMIN_USERNAME and ADMIN_PASSWORD are not set; nothing to do.")
        else:
            click.echo(f"Admin user {user.username} is ready.")

    register_routes(app)
    return app


app = create_app()

__all__ = ["app", "db", "migrate", "create_app"]
