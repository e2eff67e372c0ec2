# modules/auth/guards.py

from functools import wraps

from flask_login import current_user

from models import Profile
from modules.common.errors import NotAuthorized, Unauthenticated


def current_user_id():
    """Resolved id of the logged-in user, or None for anonymous callers."""
    if not getattr(current_user, "is_authenticated", False):
        return None
    return current_user.id


def require_admin(user_id) -> Profile:
    """
    Role gate: return the caller's Profile if role == "admin".

    Single flat check. No delegation, no scoping.
    """
    if user_id is None:
        raise Unauthenticated("Not authenticated.")

    profile = Profile.query.filter_by(user_id=user_id).first()
    if profile is None or not profile.is_admin:
        raise NotAuthorized("Not authorized (requires admin privileges).")
    return profile


def admin_required(view_func):
    """
    Ensures the caller is logged in AND holds the admin role.

    Usage:
        @bp.route("/tasks", methods=["POST"])
        @admin_required
        def create():
            ...
    """
    @wraps(view_func)
    def wrapper(*args, **kwargs):
        require_admin(current_user_id())
        return view_func(*args, **kwargs)

    return wrapper
