# tests/test_catalog.py

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from models import AdminActionLog, Task, db
from modules.common.errors import InvalidTaskData, NotAuthorized, TaskNotFound
from modules.tasks.catalog import create_task, get_active_task_for_type, seed_initial_tasks, update_task

NEW_TASK = {
    "name": "Attend a Webinar",
    "description": "Join a live career webinar",
    "points": 15,
    "task_type": "UPLOAD_RESUME",
}


def test_seed_is_idempotent(app):
    assert seed_initial_tasks() == "Initial tasks seeded successfully."
    assert seed_initial_tasks() == "Tasks already seeded."

    assert Task.query.count() == 5
    points = {t.task_type: t.points for t in Task.query.all()}
    assert points == {
        "DAILY_SIGN_IN": 10,
        "COMPLETE_PROFILE": 50,
        "REFER_PEER": 200,
        "APPLY_JOB": 5,
        "UPLOAD_RESUME": 20,
    }


def test_seed_skips_non_empty_catalog(app, make_user):
    admin_id = make_user("boss", role="admin")
    create_task(admin_id, NEW_TASK)

    assert seed_initial_tasks() == "Tasks already seeded."
    assert Task.query.count() == 1


def test_non_admin_cannot_create_task(tasks, make_user):
    student_id = make_user("kid")

    with pytest.raises(NotAuthorized):
        create_task(student_id, NEW_TASK)

    assert Task.query.count() == 5


def test_admin_creates_task_with_audit_row(tasks, make_user):
    admin_id = make_user("boss", role="admin")

    task = create_task(admin_id, NEW_TASK)

    assert task.id is not None
    assert task.is_active is True
    assert task.as_dict()["name"] == "Attend a Webinar"

    log = AdminActionLog.query.filter_by(action_type="task_create").one()
    assert log.performed_by_user_id == admin_id
    assert log.meta_json["after"]["points"] == 15


@pytest.mark.parametrize(
    "bad",
    [
        {**NEW_TASK, "points": 0},
        {**NEW_TASK, "points": -5},
        {**NEW_TASK, "points": True},
        {**NEW_TASK, "points": "10"},
        {**NEW_TASK, "task_type": "WATCH_ADS"},
        {**NEW_TASK, "name": "   "},
        {**NEW_TASK, "is_active": "yes"},
        {**NEW_TASK, "color": "red"},
        {k: v for k, v in NEW_TASK.items() if k != "points"},
    ],
)
def test_create_task_validates_fields(tasks, make_user, bad):
    admin_id = make_user("boss", role="admin")

    with pytest.raises(InvalidTaskData):
        create_task(admin_id, bad)

    assert Task.query.count() == 5


def test_update_task_changes_only_given_fields(tasks, make_user):
    admin_id = make_user("boss", role="admin")
    task = tasks["DAILY_SIGN_IN"]

    updated = update_task(admin_id, task.id, {"points": 25})

    assert updated.points == 25
    assert updated.name == "Daily Sign-In"
    assert updated.is_active is True

    log = AdminActionLog.query.filter_by(action_type="task_update").one()
    assert log.meta_json["before"]["points"] == 10
    assert log.meta_json["after"]["points"] == 25


def test_update_task_can_soft_disable(tasks, make_user):
    admin_id = make_user("boss", role="admin")

    update_task(admin_id, tasks["APPLY_JOB"].id, {"is_active": False})

    assert get_active_task_for_type("APPLY_JOB") is None
    assert Task.query.count() == 5


def test_update_task_errors(tasks, make_user):
    admin_id = make_user("boss", role="admin")
    student_id = make_user("kid")

    with pytest.raises(TaskNotFound):
        update_task(admin_id, 9999, {"points": 5})
    with pytest.raises(InvalidTaskData):
        update_task(admin_id, tasks["APPLY_JOB"].id, {"points": 0})
    with pytest.raises(NotAuthorized):
        update_task(student_id, tasks["APPLY_JOB"].id, {"points": 500})

    assert tasks["APPLY_JOB"].points == 5


def test_get_active_task_for_type(tasks):
    assert get_active_task_for_type("REFER_PEER").name == "Refer a Peer"
    assert get_active_task_for_type("NOPE") is None


def test_database_rejects_non_positive_task_points(app):
    db.session.add(Task(name="Freebie", description="", points=0, task_type="UPLOAD_RESUME"))

    with pytest.raises(IntegrityError):
        db.session.commit()
    db.session.rollback()

    assert Task.query.filter_by(name="Freebie").count() == 0
