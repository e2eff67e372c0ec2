# modules/admin/audit.py
from __future__ import annotations

from typing import Any, Dict

from models import AdminActionLog, db


def log_admin_action(
    action_type: str,
    *,
    performed_by_user_id: int | None,
    target_user_id: int | None = None,
    meta: Dict[str, Any] | None = None,
) -> AdminActionLog:
    """
    Centralized helper to append an AdminActionLog row.
    Caller commits, so the log lands in the same transaction as the change.
    """
    log = AdminActionLog(
        performed_by_user_id=performed_by_user_id,
        target_user_id=target_user_id,
        action_type=action_type,
        meta_json=meta or {},
    )
    db.session.add(log)
    return log
