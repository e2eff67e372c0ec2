# modules/profiles/store.py
"""
Profile store: one Profile per user, holding role, points and referral code.

- ensure_profile() is idempotent; role is only honoured on creation.
- Points are credited only through credit_points(), which the task engine
  calls inside its own transaction.
- Role changes go through admin_update_user_role() (admin-gated, audited).
"""

from __future__ import annotations

import secrets
import string
from typing import Any, Callable, Dict, Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import Profile, db
from modules.admin.audit import log_admin_action
from modules.auth.guards import require_admin
from modules.common.errors import InvalidRole, TargetNotFound
from modules.tasks.config import DEFAULT_ROLE, REFERRAL_CODE_ATTEMPTS, REFERRAL_CODE_LENGTH, ROLES

REFERRAL_ALPHABET = string.ascii_uppercase + string.digits


__all__ = [
    "get_profile",
    "get_profile_for_update",
    "get_profile_by_referral_code",
    "ensure_profile",
    "credit_points",
    "admin_update_user_role",
    "dashboard_for",
]


# -----------------------------
# Lookups
# -----------------------------
def get_profile(user_id) -> Optional[Profile]:
    if user_id is None:
        return None
    return Profile.query.filter_by(user_id=user_id).first()


def get_profile_for_update(user_id) -> Optional[Profile]:
    """
    Load the profile row locked for the rest of the transaction.
    SELECT ... FOR UPDATE on Postgres; SQLite ignores the hint and relies on
    its database-level write lock.
    """
    return Profile.query.filter_by(user_id=user_id).with_for_update().first()


def get_profile_by_referral_code(code: str | None) -> Optional[Profile]:
    code = str(code or "").strip().upper()
    if not code:
        return None
    return Profile.query.filter_by(referral_code=code).first()


# -----------------------------
# Referral codes
# -----------------------------
def _random_code(length: int) -> str:
    return "".join(secrets.choice(REFERRAL_ALPHABET) for _ in range(length))


def generate_referral_code(generator: Callable[[int], str] | None = None) -> str:
    """
    Short random code, retried against existing codes.

    The unique index on profile.referral_code still backs this up if two
    signups race for the same code.
    """
    length = int(current_app.config.get("REFERRAL_CODE_LENGTH", REFERRAL_CODE_LENGTH))
    attempts = int(current_app.config.get("REFERRAL_CODE_ATTEMPTS", REFERRAL_CODE_ATTEMPTS))
    make = generator or _random_code

    for _ in range(max(1, attempts)):
        code = make(length)
        if not Profile.query.filter_by(referral_code=code).first():
            return code

    raise RuntimeError(f"Could not generate a unique referral code after {attempts} attempts")


# -----------------------------
# Lifecycle
# -----------------------------
def ensure_profile(user_id: int, requested_role: str | None = None, *, commit: bool = True) -> Profile:
    """
    Return the user's Profile, creating it on first call.

    requested_role is ignored when a profile already exists: role changes
    after creation are admin-only. With commit=False the new row is only
    flushed and the caller owns the transaction.
    """
    existing = get_profile(user_id)
    if existing is not None:
        return existing

    role = (requested_role or DEFAULT_ROLE).strip().lower()
    if role not in ROLES:
        raise InvalidRole(f"Unknown role: {requested_role}")

    profile = Profile(
        user_id=user_id,
        role=role,
        points=0,
        referral_code=generate_referral_code(),
    )
    db.session.add(profile)

    if not commit:
        db.session.flush()
        return profile

    try:
        db.session.commit()
    except IntegrityError:
        # A concurrent call created it first; hand back that one.
        db.session.rollback()
        existing = get_profile(user_id)
        if existing is None:
            raise
        return existing

    current_app.logger.info("Profile created for user %s (role=%s)", user_id, role)
    return profile


def credit_points(profile: Profile, amount: int) -> None:
    """
    Increment points as `points = points + amount` in SQL.
    Caller owns the transaction (commit/rollback).
    """
    amount = int(amount)
    if amount <= 0:
        raise ValueError("Credit amount must be positive.")
    profile.points = Profile.points + amount


def admin_update_user_role(admin_user_id, target_user_id: int, new_role: str) -> Dict[str, Any]:
    admin_profile = require_admin(admin_user_id)

    role = (new_role or "").strip().lower()
    if role not in ROLES:
        raise InvalidRole(f"Unknown role: {new_role}")

    target = get_profile(target_user_id)
    if target is None:
        raise TargetNotFound("Target user profile not found.")

    before = target.role
    target.role = role

    log_admin_action(
        "role_change",
        performed_by_user_id=admin_profile.user_id,
        target_user_id=target.user_id,
        meta={"before": {"role": before}, "after": {"role": role}},
    )

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Role change by admin %s: user %s %s -> %s", admin_profile.user_id, target.user_id, before, role
    )
    return {"success": True, "message": f"User role updated to {role}"}


# -----------------------------
# Role-tagged dashboard view
# -----------------------------
def _student_dashboard(profile: Profile) -> Dict[str, Any]:
    from modules.tasks.engine import list_tasks_for_user

    tasks = list_tasks_for_user(profile.user_id)
    return {
        "points": int(profile.points or 0),
        "referral_code": profile.referral_code,
        "open_tasks": [t for t in tasks if t["can_complete"]],
    }


def _recruiter_dashboard(profile: Profile) -> Dict[str, Any]:
    from models import Job

    jobs = Job.query.filter_by(recruiter_id=profile.user_id).order_by(Job.created_at.desc()).all()
    return {"jobs": [{"id": j.id, "title": j.title, "status": j.status} for j in jobs]}


def _admin_dashboard(profile: Profile) -> Dict[str, Any]:
    from models import Task

    return {
        "active_tasks": Task.query.filter_by(is_active=True).count(),
        "total_tasks": Task.query.count(),
        "total_profiles": Profile.query.count(),
    }


DASHBOARDS: Dict[str, Callable[[Profile], Dict[str, Any]]] = {
    "student": _student_dashboard,
    "recruiter": _recruiter_dashboard,
    "admin": _admin_dashboard,
}


def dashboard_for(profile: Profile) -> Dict[str, Any]:
    """Dispatch on profile.role; each role gets its own dashboard payload."""
    build = DASHBOARDS.get(profile.role, _student_dashboard)
    return {"role": profile.role, "dashboard": build(profile)}
