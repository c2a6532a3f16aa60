from convote.routes.common import ok, paginated, pagination_args, watcher_required
from convote.services.watcher import (
    get_watcher_meeting_report,
    get_watcher_meetings,
    get_watcher_motion_detail,
    get_watcher_motion_result,
    get_watcher_motion_voters,
    get_watcher_quorum_report,
    get_watcher_quorum_voters,
)


def register_watcher_routes(app):
    @app.route("/watcher/meetings")
    @watcher_required
    def watcher_meetings():
        page, limit = pagination_args()
        meetings, total = get_watcher_meetings(page, limit)
        return paginated(meetings, page, limit, total)

    @app.route("/watcher/meetings/<int:meeting_id>")
    @watcher_required
    def watcher_meeting_report(meeting_id):
        return ok(get_watcher_meeting_report(meeting_id))

    @app.route("/watcher/meetings/<int:meeting_id>/quorum")
    @watcher_required
    def watcher_quorum_report(meeting_id):
        return ok(get_watcher_quorum_report(meeting_id))

    @app.route("/watcher/meetings/<int:meeting_id>/quorum/voters")
    @watcher_required
    def watcher_quorum_voters(meeting_id):
        return ok(get_watcher_quorum_voters(meeting_id))

    @app.route("/watcher/motions/<int:motion_id>")
    @watcher_required
    def watcher_motion_detail(motion_id):
        return ok(get_watcher_motion_detail(motion_id))

    @app.route("/watcher/motions/<int:motion_id>/results")
    @watcher_required
    def watcher_motion_results(motion_id):
        return ok(get_watcher_motion_result(motion_id))

    @app.route("/watcher/motions/<int:motion_id>/voters")
    @watcher_required
    def watcher_motion_voters(motion_id):
        return ok(get_watcher_motion_voters(motion_id))
