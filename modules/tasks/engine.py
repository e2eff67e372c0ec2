# modules/tasks/engine.py
"""
Task engine for CareerQuest.

Features:
- Per-type eligibility (daily / once / repeatable / event_only), always
  re-derived from the completion ledger, never from client state
- Self-service completion: complete_task()
- Event-driven awards from other workflows: award_for_event()
- Ledger append + points credit committed as ONE transaction

Concurrency:
- The profile row is locked (SELECT ... FOR UPDATE where supported) before
  the ledger is read, so two completions for the same user serialize.
- Limited-period completions carry a period_key; the unique constraint on
  (user_id, task_id, period_key) rejects a duplicate that slips past the lock.
- Points are incremented in SQL (points = points + n), not read-then-written.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple
from zoneinfo import ZoneInfo

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import CompletionRecord, Task, db
from modules.common.errors import (
    AlreadyCompleted,
    InactiveTask,
    ProfileNotFound,
    TaskEngineError,
    TaskNotFound,
    Unauthenticated,
    UnsupportedCompletionPath,
)
from modules.profiles.store import credit_points, get_profile, get_profile_for_update
from modules.tasks.catalog import get_active_task_for_type, get_task, list_active_tasks
from modules.tasks.config import ELIGIBILITY_RULES, EVENT_AWARD_DEDUP, TASK_DAY_TIMEZONE, TASK_TYPES, EligibilityRule
from modules.tasks.ledger import append_completion, latest_completion, latest_completions_for_user

SELF_SERVICE_RULES = ("daily", "once", "repeatable")
LIFETIME_PERIOD = "lifetime"


__all__ = [
    "AwardResult",
    "list_tasks_for_user",
    "complete_task",
    "award_for_event",
]


@dataclass
class AwardResult:
    success: bool
    points_awarded: Optional[int] = None
    task_name: Optional[str] = None
    message: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"success": self.success}
        if self.points_awarded is not None:
            out["points_awarded"] = self.points_awarded
        if self.task_name is not None:
            out["task_name"] = self.task_name
        if self.message is not None:
            out["message"] = self.message
        return out


# -----------------------------
# Internal helpers
# -----------------------------
def _utcnow() -> datetime:
    return datetime.utcnow()


def _rule_for(task_type: str) -> EligibilityRule:
    rules = current_app.config.get("ELIGIBILITY_RULES", ELIGIBILITY_RULES)
    return rules.get(task_type, "event_only")


def _day_window(now: datetime) -> Tuple[str, datetime]:
    """
    For a naive-UTC `now`, return (local day key, local midnight as naive UTC).
    "Local" is TASK_DAY_TIMEZONE.
    """
    tz = ZoneInfo(current_app.config.get("TASK_DAY_TIMEZONE", TASK_DAY_TIMEZONE))
    local_now = now.replace(tzinfo=timezone.utc).astimezone(tz)
    local_midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
    start_utc = local_midnight.astimezone(timezone.utc).replace(tzinfo=None)
    return local_now.date().isoformat(), start_utc


def _status(rule: str, latest: Optional[CompletionRecord], day_start: datetime) -> Tuple[bool, bool]:
    """(is_completed, can_complete) for one task given its latest record."""
    if rule == "daily":
        done = latest is not None and latest.completed_at >= day_start
        return done, not done
    if rule == "once":
        done = latest is not None
        return done, not done
    if rule == "repeatable":
        return latest is not None, True
    return False, False


def _record_and_credit(
    user_id: int,
    task: Task,
    *,
    completed_at: datetime,
    period_key: Optional[str] = None,
    related_id: Optional[str] = None,
    guard: Optional[Callable[[Optional[CompletionRecord]], None]] = None,
) -> AwardResult:
    """
    Lock profile -> (optional) eligibility guard -> append record -> credit.
    Commits once; any failure rolls back both writes.
    """
    task_id, points, name = task.id, int(task.points), task.name

    try:
        profile = get_profile_for_update(user_id)
        if profile is None:
            raise ProfileNotFound("User profile not found.")

        if guard is not None:
            guard(latest_completion(user_id, task_id))

        append_completion(
            user_id,
            task_id,
            completed_at=completed_at,
            period_key=period_key,
            related_id=related_id,
        )
        credit_points(profile, points)
        db.session.commit()
    except TaskEngineError:
        db.session.rollback()
        raise
    except IntegrityError:
        db.session.rollback()
        if period_key is None:
            # Unkeyed completions cannot collide; this is some other constraint.
            current_app.logger.exception("Task award failed (user=%s task=%s)", user_id, task_id)
            raise
        current_app.logger.warning(
            "Duplicate completion rejected (user=%s task=%s period=%s)", user_id, task_id, period_key
        )
        raise AlreadyCompleted("Task already completed for this period.")
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Task award failed (user=%s task=%s)", user_id, task_id)
        raise

    current_app.logger.info("Awarded %s points to user %s for task %s (%s)", points, user_id, task_id, name)
    return AwardResult(success=True, points_awarded=points, task_name=name)


# -----------------------------
# Public API - Query
# -----------------------------
def list_tasks_for_user(user_id, *, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """
    Every active task plus `is_completed` / `can_complete` for this user.
    Anonymous callers get an empty list.
    """
    if user_id is None:
        return []

    tasks = list_active_tasks()
    latest = latest_completions_for_user(user_id, [t.id for t in tasks])
    _day_key, day_start = _day_window(now or _utcnow())

    out: List[Dict[str, Any]] = []
    for task in tasks:
        is_completed, can_complete = _status(_rule_for(task.task_type), latest.get(task.id), day_start)
        row = task.as_dict()
        row["is_completed"] = is_completed
        row["can_complete"] = can_complete
        out.append(row)
    return out


# -----------------------------
# Public API - Self-service completion
# -----------------------------
def complete_task(user_id, task_id, *, now: Optional[datetime] = None) -> AwardResult:
    """
    Complete a self-service task (daily sign-in, profile, resume upload).

    Raises Unauthenticated, TaskNotFound, InactiveTask, ProfileNotFound,
    UnsupportedCompletionPath or AlreadyCompleted.
    """
    if user_id is None:
        raise Unauthenticated("User not authenticated.")

    task = get_task(task_id)
    if task is None:
        raise TaskNotFound("Task not found.")
    if not task.is_active:
        raise InactiveTask("Task is not active.")

    if get_profile(user_id) is None:
        raise ProfileNotFound("User profile not found.")

    rule = _rule_for(task.task_type)
    if rule not in SELF_SERVICE_RULES:
        raise UnsupportedCompletionPath(f"Task type {task.task_type} cannot be completed this way.")

    now = now or _utcnow()
    day_key, day_start = _day_window(now)

    if rule == "daily":
        period_key = day_key

        def guard(latest):
            if latest is not None and latest.completed_at >= day_start:
                raise AlreadyCompleted("Daily sign-in already completed today.")

    elif rule == "once":
        period_key = LIFETIME_PERIOD

        def guard(latest):
            if latest is not None:
                raise AlreadyCompleted("Task already completed.")

    else:
        period_key = None
        guard = None

    return _record_and_credit(user_id, task, completed_at=now, period_key=period_key, guard=guard)


# -----------------------------
# Public API - Event-driven awards
# -----------------------------
def award_for_event(
    user_id,
    task_type: str,
    *,
    related_id=None,
    now: Optional[datetime] = None,
) -> AwardResult:
    """
    Award points for an event raised by another workflow (job application,
    referral signup). Never raises for missing task/profile: callers check
    `result.success`.

    No de-duplication unless EVENT_AWARD_DEDUP[task_type] is on and a
    related_id is given; then (user, task, related_id) is awarded once.
    """
    if task_type not in TASK_TYPES or _rule_for(task_type) != "event_only":
        current_app.logger.warning("award_for_event called with non-event task type: %s", task_type)
        return AwardResult(success=False, message=f"Task type {task_type} is not event-driven.")

    task = get_active_task_for_type(task_type)
    if task is None:
        current_app.logger.warning("No active task found for type: %s", task_type)
        return AwardResult(success=False, message="Task not found or inactive.")

    if get_profile(user_id) is None:
        current_app.logger.warning("User profile not found for user_id: %s", user_id)
        return AwardResult(success=False, message="User profile not found.")

    dedup = current_app.config.get("EVENT_AWARD_DEDUP", EVENT_AWARD_DEDUP)
    period_key = None
    if dedup.get(task_type) and related_id is not None:
        period_key = f"ref:{related_id}"

    try:
        return _record_and_credit(
            user_id,
            task,
            completed_at=now or _utcnow(),
            period_key=period_key,
            related_id=related_id,
        )
    except ProfileNotFound:
        current_app.logger.warning("User profile not found for user_id: %s", user_id)
        return AwardResult(success=False, message="User profile not found.")
    except AlreadyCompleted:
        return AwardResult(success=False, message="Already awarded for this event.")
