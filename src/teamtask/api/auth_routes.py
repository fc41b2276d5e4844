# src/teamtask/api/auth_routes.py

from __future__ import annotations

from flask import Blueprint, jsonify

from .security import current_actor, get_state, json_body, login_required
from .serializers import user_to_dict

bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@bp.post("/register")
def register():
    user, token = get_state().accounts.register(json_body())
    return jsonify({"success": True, "token": token, "user": user_to_dict(user)}), 201


@bp.post("/login")
def login():
    body = json_body()
    user, token = get_state().accounts.login(body.get("email"), body.get("password"))
    return jsonify({"success": True, "token": token, "user": user_to_dict(user)})


@bp.get("/me")
@login_required
def me():
    return jsonify({"success": True, "user": user_to_dict(current_actor())})


@bp.put("/profile")
@login_required
def update_profile():
    user = get_state().accounts.update_profile(current_actor(), json_body())
    return jsonify({"success": True, "user": user_to_dict(user)})


@bp.put("/password")
@login_required
def change_password():
    body = json_body()
    get_state().accounts.change_password(
        current_actor(), body.get("currentPassword"), body.get("newPassword")
    )
    return jsonify({"success": True, "message": "Password updated successfully"})
