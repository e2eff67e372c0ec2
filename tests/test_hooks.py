# tests/test_hooks.py

from __future__ import annotations

import pytest

from models import Application, Job, Referral, db
from modules.common.errors import JobNotFound
from modules.jobs.hooks import record_application
from modules.profiles.store import get_profile
from modules.referral.hooks import register_referral_signup


@pytest.fixture()
def job(app, make_user):
    recruiter_id = make_user("hr", role="recruiter")
    j = Job(recruiter_id=recruiter_id, title="Backend Intern", company="Acme", status="active")
    db.session.add(j)
    db.session.commit()
    return j


# ---------------------------------------------------------------------
# APPLY_JOB
# ---------------------------------------------------------------------
def test_application_awards_points(tasks, make_user, job):
    uid = make_user("kid")

    out = record_application(uid, job.id)

    assert out["application"]["job_id"] == job.id
    assert out["award"] == {"success": True, "points_awarded": 5, "task_name": "Apply for a Job"}
    assert get_profile(uid).points == 5
    assert Application.query.filter_by(student_id=uid).count() == 1


def test_application_kept_when_award_not_configured(tasks, make_user, job):
    uid = make_user("kid")
    tasks["APPLY_JOB"].is_active = False
    db.session.commit()

    out = record_application(uid, job.id)

    assert out["award"]["success"] is False
    assert Application.query.count() == 1
    assert get_profile(uid).points == 0


def test_application_to_missing_or_closed_job(tasks, make_user, job):
    uid = make_user("kid")
    job.status = "inactive"
    db.session.commit()

    with pytest.raises(JobNotFound):
        record_application(uid, job.id)
    with pytest.raises(JobNotFound):
        record_application(uid, 9999)
    assert Application.query.count() == 0


# ---------------------------------------------------------------------
# REFER_PEER
# ---------------------------------------------------------------------
def test_referral_signup_awards_referrer(tasks, make_user):
    referrer_id = make_user("alice")
    code = get_profile(referrer_id).referral_code
    new_id = make_user("bob")

    out = register_referral_signup(new_id, code)

    assert out["referrer_id"] == referrer_id
    assert out["award"]["points_awarded"] == 200
    assert get_profile(referrer_id).points == 200
    assert get_profile(new_id).points == 0

    referral = Referral.query.one()
    assert referral.status == "completed_signup"
    assert referral.referred_user_id == new_id


def test_unknown_code_and_self_referral_are_ignored(tasks, make_user):
    uid = make_user("alice")

    assert register_referral_signup(uid, "NOPE1234") is None
    assert register_referral_signup(uid, None) is None
    assert register_referral_signup(uid, get_profile(uid).referral_code) is None

    assert Referral.query.count() == 0
    assert get_profile(uid).points == 0
