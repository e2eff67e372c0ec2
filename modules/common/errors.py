# modules/common/errors.py
"""
Named failures for the points & task engine.

Every error carries a stable `code` (what API clients switch on) and the HTTP
status the app-level error handler answers with. Routes never catch these;
`create_app` turns them into `{"ok": false, "error": code, "message": ...}`.
"""

from __future__ import annotations

from typing import Any, Dict


class TaskEngineError(Exception):
    code = "error"
    status_code = 400

    def __init__(self, message: str | None = None):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = str(self.args[0])

    def as_dict(self) -> Dict[str, Any]:
        return {"ok": False, "error": self.code, "message": self.message}


class Unauthenticated(TaskEngineError):
    """User not authenticated."""
    code = "unauthenticated"
    status_code = 401


class NotAuthorized(TaskEngineError):
    """Not authorized (requires admin privileges)."""
    code = "not_authorized"
    status_code = 403


class NotFound(TaskEngineError):
    """Not found."""
    code = "not_found"
    status_code = 404


class TaskNotFound(NotFound):
    """Task not found."""
    code = "task_not_found"


class ProfileNotFound(NotFound):
    """User profile not found."""
    code = "profile_not_found"


class TargetNotFound(NotFound):
    """Target user profile not found."""
    code = "target_not_found"


class JobNotFound(NotFound):
    """Job not found."""
    code = "job_not_found"


class AlreadyCompleted(TaskEngineError):
    """Task already completed."""
    code = "already_completed"
    status_code = 409


class UnsupportedCompletionPath(TaskEngineError):
    """Task type cannot be completed this way."""
    code = "unsupported_completion_path"
    status_code = 400


class InactiveTask(TaskEngineError):
    """Task is not active."""
    code = "inactive_task"
    status_code = 409


class InvalidTaskData(TaskEngineError):
    """Invalid task fields."""
    code = "invalid_task_data"
    status_code = 400


class InvalidRole(TaskEngineError):
    """Unknown role."""
    code = "invalid_role"
    status_code = 400
