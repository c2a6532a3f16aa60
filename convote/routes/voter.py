from flask_login import current_user

from convote.routes.common import (
    first_present,
    get_payload,
    ok,
    parse_int_list,
    voter_required,
)
from convote.routes.serializers import choice_to_dict, voter_motion_to_dict
from convote.services.errors import ValidationError
from convote.services.voting import cast_vote, get_motion_for_voting, get_open_motions_for_user


def register_voter_routes(app):
    @app.route("/voter/motions/open")
    @voter_required
    def voter_open_motions():
        motions = get_open_motions_for_user(current_user.id)
        return ok([voter_motion_to_dict(motion) for motion in motions])

    @app.route("/voter/motions/<int:motion_id>")
    @voter_required
    def voter_motion_detail(motion_id):
        view = get_motion_for_voting(motion_id, current_user.id)
        data = voter_motion_to_dict(view["motion"])
        data.update(
            {
                "choices": [choice_to_dict(choice) for choice in view["choices"]],
                "has_voted": view["has_voted"],
                "can_vote": view["can_vote"],
                "voting_ended_reason": view["voting_ended_reason"],
            }
        )
        return ok(data)

    @app.route("/voter/motions/<int:motion_id>/vote", methods=["POST"])
    @voter_required
    def voter_cast_vote(motion_id):
        payload = get_payload()
        _, raw_choice_ids = first_present(payload, "choiceIds", "choice_ids")
        abstain = payload.get("abstain", False)
        if not isinstance(abstain, bool):
            raise ValidationError("abstain must be a boolean.")

        vote = cast_vote(
            current_user.id,
            motion_id,
            parse_int_list(raw_choice_ids, "choiceIds"),
            abstain,
        )
        # Only the ballot id is returned; selections are never echoed back.
        return ok({"id": vote.id}, status_code=201)
