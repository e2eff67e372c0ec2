# modules/profiles/routes.py
from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_login import current_user

from modules.auth.guards import current_user_id
from modules.auth.routes import check_self_service_role
from modules.common.errors import ProfileNotFound, Unauthenticated
from modules.profiles.store import dashboard_for, ensure_profile, get_profile

profiles_bp = Blueprint("profiles", __name__)


def _require_user_id() -> int:
    user_id = current_user_id()
    if user_id is None:
        raise Unauthenticated("User not authenticated.")
    return user_id


@profiles_bp.route("/ensure", methods=["POST"], endpoint="ensure")
def ensure():
    user_id = _require_user_id()
    data = request.get_json(silent=True) or {}
    profile = ensure_profile(user_id, check_self_service_role(data.get("role")))
    return jsonify(profile.as_dict())


@profiles_bp.route("/me", methods=["GET"], endpoint="me")
def me():
    """Identity fields + profile, or null for anonymous callers."""
    user_id = current_user_id()
    if user_id is None:
        return jsonify(None)

    profile = get_profile(user_id)
    out = current_user.as_identity()
    out["profile"] = profile.as_dict() if profile else None
    return jsonify(out)


@profiles_bp.route("/referral-code", methods=["GET"], endpoint="referral_code")
def referral_code():
    profile = get_profile(current_user_id())
    return jsonify(profile.referral_code if profile else None)


@profiles_bp.route("/dashboard", methods=["GET"], endpoint="dashboard")
def dashboard():
    profile = get_profile(_require_user_id())
    if profile is None:
        raise ProfileNotFound("User profile not found.")
    return jsonify(dashboard_for(profile))
