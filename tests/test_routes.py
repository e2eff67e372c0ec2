# tests/test_routes.py

from __future__ import annotations

import pytest

from models import Job, Task, User, db
from modules.profiles.store import get_profile


def _register(client, name="dana", **extra):
    payload = {"name": name, "email": f"{name}@example.com", "password": "pw-12345", **extra}
    return client.post("/auth/register", json=payload)


# ---------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------
def test_anonymous_task_list_is_empty(client, tasks):
    resp = client.get("/tasks/")
    assert resp.status_code == 200
    assert resp.get_json() == []


def test_daily_sign_in_scenario(client, tasks):
    resp = _register(client)
    assert resp.status_code == 201
    user_id = resp.get_json()["user"]["id"]
    task_id = tasks["DAILY_SIGN_IN"].id

    first = client.post(f"/tasks/{task_id}/complete")
    assert first.status_code == 200
    assert first.get_json()["success"] is True
    assert first.get_json()["points_awarded"] == 10

    retry = client.post(f"/tasks/{task_id}/complete")
    assert retry.status_code == 409
    assert retry.get_json()["error"] == "already_completed"
    assert retry.get_json()["ok"] is False

    assert get_profile(user_id).points == 10

    listed = {t["task_type"]: t for t in client.get("/tasks/").get_json()}
    assert listed["DAILY_SIGN_IN"]["is_completed"] is True
    assert listed["DAILY_SIGN_IN"]["can_complete"] is False


def test_complete_requires_login(client, tasks):
    resp = client.post(f"/tasks/{tasks['DAILY_SIGN_IN'].id}/complete")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "unauthenticated"


def test_complete_event_only_and_inactive(client, tasks):
    _register(client)

    resp = client.post(f"/tasks/{tasks['REFER_PEER'].id}/complete")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "unsupported_completion_path"

    tasks["UPLOAD_RESUME"].is_active = False
    db.session.commit()
    resp = client.post(f"/tasks/{tasks['UPLOAD_RESUME'].id}/complete")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "inactive_task"

    resp = client.post("/tasks/9999/complete")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "task_not_found"


def test_history_lists_completions(client, tasks):
    _register(client)
    client.post(f"/tasks/{tasks['UPLOAD_RESUME'].id}/complete")
    client.post(f"/tasks/{tasks['UPLOAD_RESUME'].id}/complete")

    rows = client.get("/tasks/history?limit=5").get_json()
    assert len(rows) == 2
    assert {r["task_id"] for r in rows} == {tasks["UPLOAD_RESUME"].id}


def test_history_filters_by_task(client, tasks):
    _register(client)
    client.post(f"/tasks/{tasks['UPLOAD_RESUME'].id}/complete")
    client.post(f"/tasks/{tasks['DAILY_SIGN_IN'].id}/complete")

    rows = client.get(f"/tasks/history?task_id={tasks['DAILY_SIGN_IN'].id}").get_json()
    assert [r["task_id"] for r in rows] == [tasks["DAILY_SIGN_IN"].id]

    assert len(client.get("/tasks/history").get_json()) == 2


# ---------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------
def test_profile_endpoints_for_anonymous(client):
    assert client.get("/profile/me").get_json() is None
    assert client.get("/profile/referral-code").get_json() is None
    assert client.post("/profile/ensure", json={}).status_code == 401


def test_profile_me_and_referral_code(client):
    _register(client, role="recruiter")

    me = client.get("/profile/me").get_json()
    assert me["email"] == "dana@example.com"
    assert me["profile"]["role"] == "recruiter"
    assert me["profile"]["points"] == 0

    code = client.get("/profile/referral-code").get_json()
    assert code == me["profile"]["referral_code"]

    again = client.post("/profile/ensure", json={"role": "student"}).get_json()
    assert again["id"] == me["profile"]["id"]
    assert again["role"] == "recruiter"


def test_admin_role_cannot_be_self_selected(client):
    resp = _register(client, role="admin")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid_role"


def test_dashboard_for_student(client, tasks):
    _register(client)
    body = client.get("/profile/dashboard").get_json()
    assert body["role"] == "student"
    assert len(body["dashboard"]["open_tasks"]) == 3


def test_logout(client):
    _register(client)
    assert client.post("/auth/logout").get_json() == {"ok": True}
    assert client.get("/profile/me").get_json() is None


def test_login_with_bad_password(client):
    _register(client)
    client.post("/auth/logout")
    resp = client.post("/auth/login", json={"email": "dana@example.com", "password": "nope"})
    assert resp.status_code == 401


def test_register_leaves_no_user_when_profile_creation_fails(client, monkeypatch):
    def _exhausted():
        raise RuntimeError("Could not generate a unique referral code")

    monkeypatch.setattr("modules.profiles.store.generate_referral_code", _exhausted)

    with pytest.raises(RuntimeError):
        _register(client)

    assert User.query.filter_by(email="dana@example.com").count() == 0

    monkeypatch.undo()
    resp = _register(client)
    assert resp.status_code == 201
    assert resp.get_json()["profile"]["points"] == 0


# ---------------------------------------------------------------------
# Referral + jobs
# ---------------------------------------------------------------------
def test_register_with_referral_code_awards_referrer(app, tasks, make_user):
    referrer_id = make_user("alice")
    code = get_profile(referrer_id).referral_code

    resp = _register(app.test_client(), name="bob", referral_code=code)

    assert resp.status_code == 201
    assert resp.get_json()["referral"]["award"]["points_awarded"] == 200
    assert get_profile(referrer_id).points == 200


def test_apply_to_job(client, tasks, make_user):
    recruiter_id = make_user("hr", role="recruiter")
    job = Job(recruiter_id=recruiter_id, title="QA Intern", company="Acme")
    db.session.add(job)
    db.session.commit()

    user_id = _register(client).get_json()["user"]["id"]
    resp = client.post(f"/jobs/{job.id}/apply")

    assert resp.status_code == 201
    assert resp.get_json()["award"]["points_awarded"] == 5
    assert get_profile(user_id).points == 5

    assert client.post("/jobs/9999/apply").status_code == 404


# ---------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------
NEW_TASK = {"name": "Mock Interview", "description": "Book a mock interview", "points": 30, "task_type": "UPLOAD_RESUME"}


def test_student_cannot_create_task(client, tasks):
    _register(client)

    resp = client.post("/admin/tasks", json=NEW_TASK)

    assert resp.status_code == 403
    assert resp.get_json()["error"] == "not_authorized"
    assert Task.query.count() == 5


def test_admin_manages_tasks_and_roles(client, tasks, make_user, login):
    admin_id = make_user("boss", role="admin")
    target_id = make_user("kid")
    login(admin_id)

    created = client.post("/admin/tasks", json=NEW_TASK)
    assert created.status_code == 201
    task_id = created.get_json()["id"]

    patched = client.patch(f"/admin/tasks/{task_id}", json={"is_active": False})
    assert patched.status_code == 200
    assert patched.get_json()["is_active"] is False

    bad = client.patch(f"/admin/tasks/{task_id}", json={"points": -1})
    assert bad.status_code == 400
    assert bad.get_json()["error"] == "invalid_task_data"

    role = client.post(f"/admin/users/{target_id}/role", json={"role": "recruiter"})
    assert role.get_json() == {"success": True, "message": "User role updated to recruiter"}

    missing = client.post("/admin/users/4242/role", json={"role": "recruiter"})
    assert missing.status_code == 404
    assert missing.get_json()["error"] == "target_not_found"

    audit = client.get("/admin/audit").get_json()
    assert {row["action_type"] for row in audit} == {"task_create", "task_update", "role_change"}


def test_audit_is_admin_only(client):
    assert client.get("/admin/audit").status_code == 401
    _register(client)
    assert client.get("/admin/audit").status_code == 403
