# modules/jobs/hooks.py
from __future__ import annotations

from typing import Any, Dict

from flask import current_app

from models import Application, Job, db
from modules.common.errors import JobNotFound
from modules.tasks.engine import award_for_event


def record_application(student_id: int, job_id: int) -> Dict[str, Any]:
    """
    Store an application and trigger the APPLY_JOB award.

    The application is committed on its own first; the award is best-effort
    and its outcome is returned alongside (a missing APPLY_JOB task must not
    undo the application).
    """
    job = db.session.get(Job, job_id)
    if job is None or job.status != "active":
        raise JobNotFound("Job not found.")

    application = Application(student_id=student_id, job_id=job.id, status="applied")
    db.session.add(application)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    award = award_for_event(student_id, "APPLY_JOB", related_id=job.id)
    if not award.success:
        current_app.logger.info("APPLY_JOB award skipped for user %s: %s", student_id, award.message)

    return {"application": application.as_dict(), "award": award.as_dict()}
