# src/teamtask/api/task_routes.py

from __future__ import annotations

from flask import Blueprint, jsonify, request

from ..core.paging import Pagination
from ..tasks.task_service import parse_filters, parse_task_patch
from .security import current_actor, get_state, json_body, login_required
from .serializers import pagination_to_dict, task_to_dict

bp = Blueprint("tasks", __name__, url_prefix="/api/tasks")


@bp.get("")
@login_required
def list_tasks():
    args = request.args
    filters = parse_filters(
        search=args.get("search"),
        status=args.get("status"),
        priority=args.get("priority"),
    )
    pagination = Pagination.from_query(args.get("page"), args.get("limit"), args.get("sort"))
    page = get_state().task_service.list_tasks(current_actor(), filters, pagination)
    return jsonify(
        {
            "success": True,
            "count": len(page.items),
            "pagination": pagination_to_dict(page),
            "data": [task_to_dict(v) for v in page.items],
        }
    )


@bp.post("")
@login_required
def create_task():
    view = get_state().task_service.create_task(current_actor(), json_body())
    return jsonify({"success": True, "data": task_to_dict(view)}), 201


@bp.get("/<int:task_id>")
@login_required
def get_task(task_id: int):
    view = get_state().task_service.get_task(current_actor(), task_id)
    return jsonify({"success": True, "data": task_to_dict(view)})


@bp.put("/<int:task_id>")
@login_required
def update_task(task_id: int):
    # 404/403 take precedence over body validation.
    service = get_state().task_service
    actor = current_actor()
    service.get_task(actor, task_id)
    patch = parse_task_patch(json_body())
    view = service.update_task(actor, task_id, patch)
    return jsonify({"success": True, "data": task_to_dict(view)})


@bp.delete("/<int:task_id>")
@login_required
def delete_task(task_id: int):
    get_state().task_service.delete_task(current_actor(), task_id)
    return jsonify({"success": True, "message": "Task deleted successfully"})
