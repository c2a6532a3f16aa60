from convote.routes.admin import register_admin_routes
from convote.routes.auth import register_auth_routes
from convote.routes.public import register_public_routes
from convote.routes.voter import register_voter_routes
from convote.routes.watcher import register_watcher_routes


def register_routes(app):
    register_auth_routes(app)
    register_public_routes(app)
    register_admin_routes(app)
    register_voter_routes(app)
    register_watcher_routes(app)
