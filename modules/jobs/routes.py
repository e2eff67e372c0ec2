# modules/jobs/routes.py
from __future__ import annotations

from flask import Blueprint, jsonify

from modules.auth.guards import current_user_id
from modules.common.errors import Unauthenticated
from modules.jobs.hooks import record_application

jobs_bp = Blueprint("jobs", __name__)


@jobs_bp.route("/<int:job_id>/apply", methods=["POST"], endpoint="apply")
def apply(job_id: int):
    user_id = current_user_id()
    if user_id is None:
        raise Unauthenticated("User not authenticated.")
    return jsonify(record_application(user_id, job_id)), 201
