# modules/tasks/routes.py
from __future__ import annotations

from flask import Blueprint, jsonify, request

from modules.auth.guards import current_user_id
from modules.common.errors import Unauthenticated
from modules.tasks.engine import complete_task, list_tasks_for_user
from modules.tasks.ledger import get_completion_history

tasks_bp = Blueprint("tasks", __name__)


@tasks_bp.route("/", methods=["GET"], endpoint="index")
def index():
    """Active tasks with per-user status; anonymous callers get []."""
    return jsonify(list_tasks_for_user(current_user_id()))


@tasks_bp.route("/<int:task_id>/complete", methods=["POST"], endpoint="complete")
def complete(task_id: int):
    result = complete_task(current_user_id(), task_id)
    return jsonify(result.as_dict())


@tasks_bp.route("/history", methods=["GET"], endpoint="history")
def history():
    user_id = current_user_id()
    if user_id is None:
        raise Unauthenticated("User not authenticated.")

    try:
        limit = max(1, min(int(request.args.get("limit", 50)), 200))
    except (TypeError, ValueError):
        limit = 50

    task_id = request.args.get("task_id", type=int)
    rows = get_completion_history(user_id, limit=limit, task_id=task_id)
    return jsonify([r.as_dict() for r in rows])
