from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask.views import MethodView

from ..errors import SantaError
from ..services.rounds import (
    list_all_assignments,
    list_participants,
    request_assignments,
    reset_round,
)


api_bp = Blueprint("api", __name__, url_prefix="/api")


def _store():
    return current_app.extensions["round_store"]


def _json_field(name: str) -> str | None:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return None
    value = body.get(name)
    return value.strip() if isinstance(value, str) else None


@api_bp.errorhandler(SantaError)
def handle_santa_error(e: SantaError):
    return jsonify(e.to_response()), e.http_status


class ParticipantsView(MethodView):
    def get(self):
        return jsonify({"participants": list_participants()})


class AssignView(MethodView):
    def post(self):
        participant = _json_field("participant")
        payload = request_assignments(
            _store(),
            participant,
            rng=current_app.extensions["round_rng"],
        )
        return jsonify(payload)


class AllAssignmentsView(MethodView):
    """Debug surface: the whole active round."""

    def get(self):
        return jsonify({"assignments": list_all_assignments(_store())})


class AdminResetView(MethodView):
    def post(self):
        deleted = reset_round(
            _store(),
            _json_field("token"),
            current_app.config.get("SANTA_RESET_TOKEN"),
        )
        return jsonify({
            "success": True,
            "message": "All assignments have been reset.",
            "deleted": deleted,
        })


api_bp.add_url_rule("/participants", view_func=ParticipantsView.as_view("participants"))
api_bp.add_url_rule("/assign", view_func=AssignView.as_view("assign"), methods=["POST"])
api_bp.add_url_rule("/all-assignments", view_func=AllAssignmentsView.as_view("all_assignments"))
api_bp.add_url_rule("/admin/reset", view_func=AdminResetView.as_view("admin_reset"), methods=["POST"])
