from flask import Blueprint, current_app, jsonify, request
from flask_login import (
    LoginManager,
    login_required,
    login_user,
    logout_user,
    current_user,
)

from models import User, db
from modules.common.errors import InvalidRole, Unauthenticated
from modules.profiles.store import ensure_profile
from modules.referral.hooks import register_referral_signup

auth_bp = Blueprint("auth", __name__)
login_manager = LoginManager()

# Roles a user may pick for themselves at signup; "admin" is granted by admins only.
SELF_SERVICE_ROLES = ("student", "recruiter")


@login_manager.user_loader
def load_user(user_id):
    try:
        return db.session.get(User, int(user_id))
    except Exception:
        return None


@login_manager.unauthorized_handler
def unauthorized():
    raise Unauthenticated("Not authenticated.")


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _payload() -> dict:
    return request.get_json(silent=True) or {}


def check_self_service_role(role: str | None) -> str | None:
    if role is None:
        return None
    role = str(role).strip().lower()
    if role not in SELF_SERVICE_ROLES:
        raise InvalidRole(f"Role {role!r} cannot be chosen at signup.")
    return role


# ---------------------------
# Password-based Register/Login
# ---------------------------

@auth_bp.route("/register", methods=["POST"])
def register():
    data = _payload()
    name = (data.get("name") or "").strip()
    email = _normalize_email(data.get("email"))
    pw = data.get("password") or ""
    role = check_self_service_role(data.get("role"))

    if not (name and email and pw):
        return jsonify({"ok": False, "error": "invalid_request", "message": "All fields are required."}), 400

    if User.query.filter_by(email=email).first():
        return jsonify({"ok": False, "error": "email_taken", "message": "Email already registered."}), 409

    u = User(name=name, email=email)
    u.set_password(pw)
    db.session.add(u)

    # User and Profile land in one commit; a failed profile leaves no orphan user.
    try:
        db.session.flush()
        profile = ensure_profile(u.id, role, commit=False)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Registration failed for %s", email)
        raise

    referral = register_referral_signup(u.id, data.get("referral_code"))

    login_user(u)
    current_app.logger.info("User %s registered (role=%s)", u.id, profile.role)
    return jsonify({
        "ok": True,
        "user": u.as_identity(),
        "profile": profile.as_dict(),
        "referral": referral,
    }), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = _payload()
    email = _normalize_email(data.get("email"))
    pw = data.get("password") or ""

    u = User.query.filter_by(email=email).first()
    if not u or not u.check_password(pw):
        return jsonify({"ok": False, "error": "invalid_credentials", "message": "Invalid credentials."}), 401

    login_user(u)
    return jsonify({"ok": True, "user": u.as_identity()})


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"ok": True})


@auth_bp.route("/me", methods=["GET"])
def me():
    if not current_user.is_authenticated:
        return jsonify(None)
    return jsonify(current_user.as_identity())
