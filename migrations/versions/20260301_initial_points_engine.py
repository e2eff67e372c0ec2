"""initial schema: users, profiles, tasks, completion ledger, jobs, referrals

Revision ID: 20260301_initial
Revises:
Create Date: 2026-03-01 00:00:00

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20260301_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "profile",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="student"),
        sa.Column("points", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("referral_code", sa.String(length=32), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("points >= 0", name="ck_profile_points_nonneg"),
    )
    op.create_index("ix_profile_user_id", "profile", ["user_id"], unique=True)
    op.create_index("ix_profile_referral_code", "profile", ["referral_code"], unique=True)

    op.create_table(
        "task",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("points", sa.Integer(), nullable=False),
        sa.Column("task_type", sa.String(length=32), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("points > 0", name="ck_task_points_positive"),
    )
    op.create_index("ix_task_task_type", "task", ["task_type"])
    op.create_index("ix_task_is_active", "task", ["is_active"])

    op.create_table(
        "user_completed_task",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "task_id",
            sa.Integer(),
            sa.ForeignKey("task.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("completed_at", sa.DateTime(), nullable=False),
        sa.Column(
            "period_key",
            sa.String(length=64),
            nullable=True,
            comment="Day key / 'lifetime' / 'ref:<id>' for period-limited completions",
        ),
        sa.Column("related_id", sa.String(length=64), nullable=True),
        sa.UniqueConstraint("user_id", "task_id", "period_key", name="uq_completion_period"),
    )
    op.create_index(
        "ix_completion_user_task_time",
        "user_completed_task",
        ["user_id", "task_id", "completed_at"],
    )

    op.create_table(
        "job",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "recruiter_id",
            sa.Integer(),
            sa.ForeignKey("user.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("company", sa.String(length=200), nullable=False),
        sa.Column("location", sa.String(length=200), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("requirements", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="active"),
        sa.Column("is_premium", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_job_recruiter_id", "job", ["recruiter_id"])
    op.create_index("ix_job_status", "job", ["status"])

    op.create_table(
        "application",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "student_id",
            sa.Integer(),
            sa.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "job_id",
            sa.Integer(),
            sa.ForeignKey("job.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("applied_at", sa.DateTime(), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="applied"),
    )
    op.create_index("ix_application_student_job", "application", ["student_id", "job_id"])
    op.create_index("ix_application_job_id", "application", ["job_id"])

    op.create_table(
        "referral",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "referrer_id",
            sa.Integer(),
            sa.ForeignKey("user.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("referral_code_used", sa.String(length=32), nullable=False),
        sa.Column(
            "referred_user_id",
            sa.Integer(),
            sa.ForeignKey("user.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("status", sa.String(length=32), nullable=False, server_default="pending_signup"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_referral_referrer_id", "referral", ["referrer_id"])
    op.create_index("ix_referral_referral_code_used", "referral", ["referral_code_used"])

    op.create_table(
        "admin_action_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "performed_by_user_id",
            sa.Integer(),
            sa.ForeignKey("user.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "target_user_id",
            sa.Integer(),
            sa.ForeignKey("user.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("action_type", sa.String(length=64), nullable=False),
        sa.Column("meta_json", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_admin_action_log_performed_by_user_id", "admin_action_log", ["performed_by_user_id"])
    op.create_index("ix_admin_action_log_target_user_id", "admin_action_log", ["target_user_id"])


def downgrade() -> None:
    op.drop_table("admin_action_log")
    op.drop_table("referral")
    op.drop_table("application")
    op.drop_table("job")
    op.drop_table("user_completed_task")
    op.drop_table("task")
    op.drop_table("profile")
    op.drop_table("user")
