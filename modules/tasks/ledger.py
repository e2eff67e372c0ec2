# modules/tasks/ledger.py
"""
Completion ledger: append-only (user, task, completed_at) records.

The ledger is the source of truth for eligibility. Nothing here commits;
the task engine appends and credits inside one transaction and commits once.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from models import CompletionRecord, db


def latest_completion(user_id: int, task_id: int) -> Optional[CompletionRecord]:
    """Most recent record for (user, task), or None."""
    return (
        CompletionRecord.query.filter_by(user_id=user_id, task_id=task_id)
        .order_by(CompletionRecord.completed_at.desc(), CompletionRecord.id.desc())
        .first()
    )


def latest_completions_for_user(user_id: int, task_ids: List[int]) -> dict[int, CompletionRecord]:
    """Map task_id -> most recent record, for the listing query."""
    if not task_ids:
        return {}

    rows = (
        CompletionRecord.query.filter(
            CompletionRecord.user_id == user_id,
            CompletionRecord.task_id.in_(task_ids),
        )
        .order_by(CompletionRecord.completed_at.desc(), CompletionRecord.id.desc())
        .all()
    )

    latest: dict[int, CompletionRecord] = {}
    for row in rows:
        latest.setdefault(row.task_id, row)
    return latest


def append_completion(
    user_id: int,
    task_id: int,
    *,
    completed_at: datetime,
    period_key: Optional[str] = None,
    related_id: Optional[str] = None,
) -> CompletionRecord:
    """
    Stage a new record on the session and flush it.

    Flushing here makes a period_key collision raise IntegrityError before the
    caller touches the profile balance. Caller is responsible for committing.
    """
    record = CompletionRecord(
        user_id=user_id,
        task_id=task_id,
        completed_at=completed_at,
        period_key=period_key,
        related_id=str(related_id) if related_id is not None else None,
    )
    db.session.add(record)
    db.session.flush()
    return record


def get_completion_history(
    user_id: int,
    limit: int = 50,
    task_id: Optional[int] = None,
) -> List[CompletionRecord]:
    """Completion history for a user (newest first)."""
    query = CompletionRecord.query.filter_by(user_id=user_id)
    if task_id is not None:
        query = query.filter_by(task_id=task_id)
    return (
        query.order_by(CompletionRecord.completed_at.desc(), CompletionRecord.id.desc())
        .limit(int(limit))
        .all()
    )
