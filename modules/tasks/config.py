# modules/tasks/config.py
"""
Central configuration for CareerQuest tasks & points.

Everything here is meant to be easy to tweak WITHOUT touching the engine:
- TASK_TYPES / ROLES: the closed sets the catalog and profile store accept.
- ELIGIBILITY_RULES: which per-period rule each task type follows.
- SEED_TASKS: what seed_initial_tasks() inserts into an empty catalog.
- EVENT_AWARD_DEDUP: opt-in de-duplication for event-driven awards.
- TASK_DAY_TIMEZONE: where "today" starts for DAILY_SIGN_IN.

create_app() copies these into app.config with setdefault, so any of them can
be overridden per deployment (or per test) without editing this file.
"""

from __future__ import annotations

import os
from typing import Any, Dict, List, Literal

TaskType = Literal[
    "DAILY_SIGN_IN",
    "REFER_PEER",
    "APPLY_JOB",
    "UPLOAD_RESUME",
    "COMPLETE_PROFILE",
]
Role = Literal["student", "recruiter", "admin"]
EligibilityRule = Literal["daily", "once", "repeatable", "event_only"]

TASK_TYPES = (
    "DAILY_SIGN_IN",
    "REFER_PEER",
    "APPLY_JOB",
    "UPLOAD_RESUME",
    "COMPLETE_PROFILE",
)

ROLES = ("student", "recruiter", "admin")
DEFAULT_ROLE = "student"

# -----------------------------
# Eligibility per task type
# -----------------------------
# "daily"      -> one completion per calendar day (TASK_DAY_TIMEZONE)
# "once"       -> one completion ever
# "repeatable" -> no blocking; every completion is recorded and credited
# "event_only" -> never self-service; only award_for_event() may record it
#
# A task type missing from this map is treated as "event_only".
ELIGIBILITY_RULES: Dict[str, EligibilityRule] = {
    "DAILY_SIGN_IN": "daily",
    "COMPLETE_PROFILE": "once",
    "UPLOAD_RESUME": "repeatable",
    "REFER_PEER": "event_only",
    "APPLY_JOB": "event_only",
}

# -----------------------------
# Event award de-duplication
# -----------------------------
# True -> a given (user, task, related_id) is awarded at most once.
# All off by default: every event awards points.
EVENT_AWARD_DEDUP: Dict[str, bool] = {
    "REFER_PEER": False,
    "APPLY_JOB": False,
}

# -----------------------------
# Daily boundary
# -----------------------------
TASK_DAY_TIMEZONE = os.getenv("TASK_DAY_TIMEZONE", "UTC")

# -----------------------------
# Referral codes
# -----------------------------
REFERRAL_CODE_LENGTH = 8
REFERRAL_CODE_ATTEMPTS = 10

# -----------------------------
# Seed catalog
# -----------------------------
SEED_TASKS: List[Dict[str, Any]] = [
    {
        "name": "Daily Sign-In",
        "description": "Check in once per day",
        "points": 10,
        "task_type": "DAILY_SIGN_IN",
        "is_active": True,
    },
    {
        "name": "Complete Your Profile",
        "description": "Fill out all profile fields (education, skills)",
        "points": 50,
        "task_type": "COMPLETE_PROFILE",
        "is_active": True,
    },
    {
        "name": "Refer a Peer",
        "description": "Unique referral link generates points on signup",
        "points": 200,
        "task_type": "REFER_PEER",
        "is_active": True,
    },
    {
        "name": "Apply for a Job",
        "description": "Click “Apply” on a job listing via portal",
        "points": 5,
        "task_type": "APPLY_JOB",
        "is_active": True,
    },
    {
        "name": "Upload Resume",
        "description": "Add or update resume PDF/profile document",
        "points": 20,
        "task_type": "UPLOAD_RESUME",
        "is_active": True,
    },
]


def init_task_config(app) -> None:
    """Attach task defaults to app config if not provided."""
    app.config.setdefault("ELIGIBILITY_RULES", ELIGIBILITY_RULES)
    app.config.setdefault("EVENT_AWARD_DEDUP", EVENT_AWARD_DEDUP)
    app.config.setdefault("TASK_DAY_TIMEZONE", TASK_DAY_TIMEZONE)
    app.config.setdefault("SEED_TASKS", SEED_TASKS)
    app.config.setdefault("REFERRAL_CODE_LENGTH", REFERRAL_CODE_LENGTH)
    app.config.setdefault("REFERRAL_CODE_ATTEMPTS", REFERRAL_CODE_ATTEMPTS)
