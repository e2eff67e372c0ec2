# seed.py
# Idempotent seed: default task catalog + optional first admin.
#
#   python seed.py
#   SEED_ADMIN_EMAIL=ops@example.com python seed.py

import os

from app import create_app
from models import User, db
from modules.profiles.store import ensure_profile
from modules.tasks.catalog import seed_initial_tasks


def promote_first_admin(email: str) -> str:
    """Give an existing user the admin role (operational bootstrap, not an API)."""
    user = User.query.filter_by(email=email.strip().lower()).first()
    if user is None:
        return f"No user found with email: {email}"

    profile = ensure_profile(user.id)
    if profile.role != "admin":
        profile.role = "admin"
        db.session.commit()
        return f"{email} is now an admin."
    return f"{email} is already an admin."


def main():
    app = create_app()
    with app.app_context():
        db.create_all()
        print(seed_initial_tasks())

        admin_email = os.getenv("SEED_ADMIN_EMAIL")
        if admin_email:
            print(promote_first_admin(admin_email))

    print("Seed complete.")


if __name__ == "__main__":
    main()
