# src/teamtask/api/user_routes.py

from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..core.paging import Pagination
from .security import current_actor, get_state, json_body, login_required
from .serializers import pagination_to_dict, user_to_dict

bp = Blueprint("users", __name__, url_prefix="/api/users")


@bp.get("")
@login_required
def list_users():
    pagination = Pagination.from_query(request.args.get("page"), request.args.get("limit"))
    page = get_state().user_service.list_users(current_actor(), pagination)
    return jsonify(
        {
            "success": True,
            "count": len(page.items),
            "pagination": pagination_to_dict(page),
            "data": [user_to_dict(u) for u in page.items],
        }
    )


@bp.get("/<int:user_id>")
@login_required
def get_user(user_id: int):
    user = get_state().user_service.get_user(current_actor(), user_id)
    return jsonify({"success": True, "data": user_to_dict(user)})


@bp.patch("/<int:user_id>/role")
@login_required
def update_role(user_id: int):
    body = json_body()
    user = get_state().user_service.update_user_role(current_actor(), user_id, body.get("role"))
    return jsonify({"success": True, "data": user_to_dict(user)})


@bp.patch("/<int:user_id>/deactivate")
@login_required
def deactivate(user_id: int):
    get_state().user_service.set_user_active(current_actor(), user_id, False)
    return jsonify({"success": True, "message": "User deactivated successfully"})


@bp.patch("/<int:user_id>/activate")
@login_required
def activate(user_id: int):
    get_state().user_service.set_user_active(current_actor(), user_id, True)
    return jsonify({"success": True, "message": "User activated successfully"})
