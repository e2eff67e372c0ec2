# tests/conftest.py

from __future__ import annotations

from datetime import datetime

import pytest

from app import create_app
from models import Task, User, db
from modules.profiles.store import ensure_profile
from modules.tasks.catalog import seed_initial_tasks

PASSWORD = "s3cret-pass"

# A fixed mid-morning UTC instant; engine calls take it via `now=`.
MORNING = datetime(2025, 3, 10, 9, 30)


@pytest.fixture()
def app(tmp_path, monkeypatch):
    """
    App bound to a throwaway SQLite file.

    The app context stays pushed for the whole test so tests can call the
    engine directly and inspect rows after HTTP requests.
    """
    monkeypatch.setenv("AUTO_MIGRATE", "0")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("LOGTAIL_TOKEN", raising=False)

    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
        "TASK_DAY_TIMEZONE": "UTC",
    })

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def tasks(app) -> dict[str, Task]:
    """The default catalog, keyed by task_type."""
    seed_initial_tasks()
    return {t.task_type: t for t in Task.query.all()}


@pytest.fixture()
def make_user(app):
    """Create a user (+ profile unless with_profile=False) and return its id."""
    counter = {"n": 0}

    def _make(name: str | None = None, *, role: str = "student", with_profile: bool = True) -> int:
        counter["n"] += 1
        name = name or f"user{counter['n']}"
        u = User(name=name, email=f"{name}@example.com")
        u.set_password(PASSWORD)
        db.session.add(u)
        db.session.commit()

        if with_profile:
            profile = ensure_profile(u.id)
            if role != profile.role:
                profile.role = role
                db.session.commit()
        return u.id

    return _make


@pytest.fixture()
def login(client):
    def _login(user_id: int):
        user = db.session.get(User, user_id)
        resp = client.post("/auth/login", json={"email": user.email, "password": PASSWORD})
        assert resp.status_code == 200
        return resp

    return _login
