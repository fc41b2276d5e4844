# src/teamtask/api/stats_routes.py

from __future__ import annotations

from flask import Blueprint, jsonify

from .security import current_actor, get_state, login_required
from .serializers import stats_to_dict

bp = Blueprint("stats", __name__, url_prefix="/api/stats")


@bp.get("/overview")
@login_required
def overview():
    stats = get_state().task_service.overview(current_actor())
    return jsonify({"success": True, "data": stats_to_dict(stats)})
