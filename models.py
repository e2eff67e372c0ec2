from datetime import datetime

from flask_login import UserMixin
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import CheckConstraint, Index, UniqueConstraint
from werkzeug.security import check_password_hash, generate_password_hash

db = SQLAlchemy()


# ---------------------------------------------------------------------
# Users (identity only; role and points live on Profile)
# ---------------------------------------------------------------------
class User(UserMixin, db.Model):
    __tablename__ = "user"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)

    # Auth
    password_hash = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    profile = db.relationship("Profile", backref="user", uselist=False, lazy=True)

    # helpers
    def set_password(self, pw: str):
        self.password_hash = generate_password_hash(pw)

    def check_password(self, pw: str) -> bool:
        return check_password_hash(self.password_hash, pw)

    def as_identity(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<User {self.id} {self.email}>"


# ---------------------------------------------------------------------
# Profile (one per user)
# ---------------------------------------------------------------------
class Profile(db.Model):
    """
    Authoritative role + point balance for a user.

    - role: "student" | "recruiter" | "admin"
    - points only ever grow, and only through the task engine credit step
    - referral_code is generated once at creation
    """
    __tablename__ = "profile"
    __table_args__ = (CheckConstraint("points >= 0", name="ck_profile_points_nonneg"),)

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(
        db.Integer,
        db.ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    role = db.Column(db.String(32), default="student", nullable=False)
    points = db.Column(db.Integer, default=0, nullable=False)
    referral_code = db.Column(db.String(32), unique=True, nullable=True, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    @property
    def is_admin(self) -> bool:
        return (self.role or "student") == "admin"

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "role": self.role,
            "points": int(self.points or 0),
            "referral_code": self.referral_code,
        }

    def __repr__(self):
        return f"<Profile {self.id} user={self.user_id} role={self.role} points={self.points}>"


# ---------------------------------------------------------------------
# Task catalog
# ---------------------------------------------------------------------
class Task(db.Model):
    __tablename__ = "task"
    __table_args__ = (CheckConstraint("points > 0", name="ck_task_points_positive"),)

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    points = db.Column(db.Integer, nullable=False)

    # "DAILY_SIGN_IN" | "REFER_PEER" | "APPLY_JOB" | "UPLOAD_RESUME" | "COMPLETE_PROFILE"
    task_type = db.Column(db.String(32), nullable=False, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "points": int(self.points or 0),
            "task_type": self.task_type,
            "is_active": bool(self.is_active),
        }

    def __repr__(self):
        return f"<Task {self.id} {self.task_type} points={self.points} active={self.is_active}>"


# ---------------------------------------------------------------------
# Completion ledger (append-only)
# ---------------------------------------------------------------------
class CompletionRecord(db.Model):
    """
    Immutable fact: user U completed task T at completed_at (naive UTC).

    period_key is the slot a record occupies for tasks that are limited per
    period ("2025-01-31" for daily, "lifetime" for once, "ref:<id>" for
    de-duplicated event awards). It is NULL for repeatable completions, and
    NULLs never collide in the unique constraint below.
    """
    __tablename__ = "user_completed_task"
    __table_args__ = (
        UniqueConstraint("user_id", "task_id", "period_key", name="uq_completion_period"),
        Index("ix_completion_user_task_time", "user_id", "task_id", "completed_at"),
    )

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(
        db.Integer,
        db.ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
    )
    task_id = db.Column(
        db.Integer,
        db.ForeignKey("task.id", ondelete="CASCADE"),
        nullable=False,
    )

    completed_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    period_key = db.Column(db.String(64), nullable=True)

    # e.g. job id for APPLY_JOB, referred user id for REFER_PEER
    related_id = db.Column(db.String(64), nullable=True)

    task = db.relationship("Task")

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "task_id": self.task_id,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "related_id": self.related_id,
        }

    def __repr__(self):
        return f"<CompletionRecord {self.id} user={self.user_id} task={self.task_id} at={self.completed_at}>"


# ---------------------------------------------------------------------
# Jobs & applications (only what the APPLY_JOB hook needs)
# ---------------------------------------------------------------------
class Job(db.Model):
    __tablename__ = "job"

    id = db.Column(db.Integer, primary_key=True)
    recruiter_id = db.Column(
        db.Integer,
        db.ForeignKey("user.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    title = db.Column(db.String(200), nullable=False)
    company = db.Column(db.String(200), nullable=False)
    location = db.Column(db.String(200), nullable=True)
    description = db.Column(db.Text, nullable=True)
    requirements = db.Column(db.Text, nullable=True)

    # "active" | "inactive" | "pending_approval" | "rejected"
    status = db.Column(db.String(32), default="active", nullable=False, index=True)
    is_premium = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Job {self.id} {self.title} @ {self.company}>"


class Application(db.Model):
    __tablename__ = "application"
    __table_args__ = (
        Index("ix_application_student_job", "student_id", "job_id"),
    )

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(
        db.Integer,
        db.ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
    )
    job_id = db.Column(
        db.Integer,
        db.ForeignKey("job.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    applied_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # "applied" | "viewed" | "shortlisted" | "rejected" | "hired"
    status = db.Column(db.String(32), default="applied", nullable=False)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "student_id": self.student_id,
            "job_id": self.job_id,
            "applied_at": self.applied_at.isoformat() if self.applied_at else None,
            "status": self.status,
        }

    def __repr__(self):
        return f"<Application {self.id} student={self.student_id} job={self.job_id}>"


# ---------------------------------------------------------------------
# Referrals
# ---------------------------------------------------------------------
class Referral(db.Model):
    __tablename__ = "referral"

    id = db.Column(db.Integer, primary_key=True)
    referrer_id = db.Column(
        db.Integer,
        db.ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    referral_code_used = db.Column(db.String(32), nullable=False, index=True)
    referred_user_id = db.Column(
        db.Integer,
        db.ForeignKey("user.id", ondelete="SET NULL"),
        nullable=True,
    )

    # "pending_signup" | "completed_signup"
    status = db.Column(db.String(32), default="pending_signup", nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Referral {self.id} referrer={self.referrer_id} referred={self.referred_user_id} {self.status}>"


# ---------------------------------------------------------------------
# Admin Action Log (audit for catalog + role changes)
# ---------------------------------------------------------------------
class AdminActionLog(db.Model):
    """
    Records every privileged admin action:
    - task_create / task_update
    - role_change
    """

    __tablename__ = "admin_action_log"

    id = db.Column(db.Integer, primary_key=True)

    performed_by_user_id = db.Column(
        db.Integer,
        db.ForeignKey("user.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )

    target_user_id = db.Column(
        db.Integer,
        db.ForeignKey("user.id", ondelete="SET NULL"),
        index=True,
        nullable=True,
    )

    action_type = db.Column(db.String(64), nullable=False)

    # {"before": {...}, "after": {...}}
    meta_json = db.Column(db.JSON, nullable=True, default=dict)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return (
            f"<AdminActionLog {self.id} type={self.action_type} "
            f"by={self.performed_by_user_id} target={self.target_user_id}>"
        )
