# modules/admin/routes.py
from __future__ import annotations

from flask import Blueprint, jsonify, request

from models import AdminActionLog
from modules.auth.guards import admin_required, current_user_id
from modules.profiles.store import admin_update_user_role
from modules.tasks.catalog import create_task, update_task

admin_bp = Blueprint("admin", __name__)


# ---------------------------------------------------------------------
# Admin · Task catalog
# ---------------------------------------------------------------------
@admin_bp.route("/tasks", methods=["POST"], endpoint="task_create")
def task_create():
    task = create_task(current_user_id(), request.get_json(silent=True) or {})
    return jsonify(task.as_dict()), 201


@admin_bp.route("/tasks/<int:task_id>", methods=["PATCH"], endpoint="task_update")
def task_update(task_id: int):
    task = update_task(current_user_id(), task_id, request.get_json(silent=True) or {})
    return jsonify(task.as_dict())


# ---------------------------------------------------------------------
# Admin · Roles
# ---------------------------------------------------------------------
@admin_bp.route("/users/<int:user_id>/role", methods=["POST"], endpoint="user_role")
def user_role(user_id: int):
    data = request.get_json(silent=True) or {}
    return jsonify(admin_update_user_role(current_user_id(), user_id, data.get("role")))


# ---------------------------------------------------------------------
# Admin · Audit
# ---------------------------------------------------------------------
@admin_bp.route("/audit", methods=["GET"], endpoint="audit")
@admin_required
def audit():
    logs = AdminActionLog.query.order_by(AdminActionLog.created_at.desc(), AdminActionLog.id.desc()).limit(100).all()
    return jsonify([
        {
            "id": log.id,
            "action_type": log.action_type,
            "performed_by_user_id": log.performed_by_user_id,
            "target_user_id": log.target_user_id,
            "meta": log.meta_json or {},
            "created_at": log.created_at.isoformat() if log.created_at else None,
        }
        for log in logs
    ])
