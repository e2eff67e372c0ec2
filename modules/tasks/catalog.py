# modules/tasks/catalog.py
"""
Task catalog: definitions of earnable actions.

Read-only from the engine's side. Admins create and update tasks here
(never delete: tasks are switched off via is_active). seed_initial_tasks()
fills an empty catalog and is safe to call any number of times.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from flask import current_app

from models import Task, db
from modules.admin.audit import log_admin_action
from modules.auth.guards import require_admin
from modules.common.errors import InvalidTaskData, TaskNotFound
from modules.tasks.config import SEED_TASKS, TASK_TYPES

TASK_FIELDS = ("name", "description", "points", "task_type", "is_active")
REQUIRED_FIELDS = ("name", "description", "points", "task_type")


# -----------------------------
# Validation
# -----------------------------
def _clean_fields(fields: Dict[str, Any], *, partial: bool) -> Dict[str, Any]:
    if not isinstance(fields, dict):
        raise InvalidTaskData("Task fields must be an object.")

    unknown = sorted(set(fields) - set(TASK_FIELDS))
    if unknown:
        raise InvalidTaskData(f"Unknown task fields: {', '.join(unknown)}")

    if not partial:
        missing = [k for k in REQUIRED_FIELDS if fields.get(k) is None]
        if missing:
            raise InvalidTaskData(f"Missing task fields: {', '.join(missing)}")

    clean: Dict[str, Any] = {}

    if "name" in fields:
        name = fields["name"]
        if not isinstance(name, str) or not name.strip():
            raise InvalidTaskData("name must be a non-empty string.")
        clean["name"] = name.strip()

    if "description" in fields:
        description = fields["description"]
        if not isinstance(description, str):
            raise InvalidTaskData("description must be a string.")
        clean["description"] = description.strip()

    if "points" in fields:
        points = fields["points"]
        # bool is an int subclass; reject it explicitly
        if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
            raise InvalidTaskData("points must be a positive integer.")
        clean["points"] = points

    if "task_type" in fields:
        task_type = fields["task_type"]
        if task_type not in TASK_TYPES:
            raise InvalidTaskData(f"Unknown task_type: {task_type}")
        clean["task_type"] = task_type

    if "is_active" in fields:
        is_active = fields["is_active"]
        if not isinstance(is_active, bool):
            raise InvalidTaskData("is_active must be a boolean.")
        clean["is_active"] = is_active

    return clean


# -----------------------------
# Queries
# -----------------------------
def get_task(task_id) -> Optional[Task]:
    return db.session.get(Task, task_id)


def list_active_tasks() -> List[Task]:
    return Task.query.filter_by(is_active=True).order_by(Task.id.asc()).all()


def get_active_task_for_type(task_type: str) -> Optional[Task]:
    """The active task configured for a type (first by id if several)."""
    return (
        Task.query.filter_by(task_type=task_type, is_active=True)
        .order_by(Task.id.asc())
        .first()
    )


# -----------------------------
# Admin mutations
# -----------------------------
def create_task(admin_user_id, fields: Dict[str, Any]) -> Task:
    admin_profile = require_admin(admin_user_id)
    clean = _clean_fields(fields, partial=False)
    clean.setdefault("is_active", True)

    task = Task(**clean)
    db.session.add(task)
    db.session.flush()

    log_admin_action(
        "task_create",
        performed_by_user_id=admin_profile.user_id,
        meta={"after": task.as_dict()},
    )

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Task %s (%s) created by admin %s", task.id, task.task_type, admin_profile.user_id)
    return task


def update_task(admin_user_id, task_id, partial_fields: Dict[str, Any]) -> Task:
    admin_profile = require_admin(admin_user_id)
    clean = _clean_fields(partial_fields, partial=True)

    task = get_task(task_id)
    if task is None:
        raise TaskNotFound("Task not found.")

    before = task.as_dict()
    for key, value in clean.items():
        setattr(task, key, value)

    log_admin_action(
        "task_update",
        performed_by_user_id=admin_profile.user_id,
        meta={"before": before, "after": task.as_dict()},
    )

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Task %s updated by admin %s: %s", task.id, admin_profile.user_id, sorted(clean))
    return task


# -----------------------------
# Seed
# -----------------------------
def seed_initial_tasks() -> str:
    """Insert the default tasks when the catalog is empty."""
    if Task.query.first() is not None:
        current_app.logger.info("Tasks already seeded.")
        return "Tasks already seeded."

    seed = current_app.config.get("SEED_TASKS", SEED_TASKS)
    for task_data in seed:
        db.session.add(Task(**_clean_fields(dict(task_data), partial=False)))

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info("Initial tasks seeded (%d).", len(seed))
    return "Initial tasks seeded successfully."
