from convote.routes.common import ok
from convote.utils import utcnow


def register_public_routes(app):
    @app.route("/health")
    def health():
        return ok(status="ok", timestamp=utcnow())
