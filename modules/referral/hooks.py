# modules/referral/hooks.py
from __future__ import annotations

from typing import Any, Dict, Optional

from flask import current_app

from models import Referral, db
from modules.profiles.store import get_profile_by_referral_code
from modules.tasks.engine import award_for_event


def register_referral_signup(new_user_id: int, code: str | None) -> Optional[Dict[str, Any]]:
    """
    Called once a new user has signed up with a referral code.

    Unknown codes and self-referrals are ignored (returns None). Otherwise a
    completed Referral row is stored and the referrer gets the REFER_PEER award.
    """
    referrer = get_profile_by_referral_code(code)
    if referrer is None:
        if code:
            current_app.logger.info("Referral code %r not found (new user %s)", code, new_user_id)
        return None

    if referrer.user_id == new_user_id:
        current_app.logger.warning("Self-referral ignored for user %s", new_user_id)
        return None

    referral = Referral(
        referrer_id=referrer.user_id,
        referral_code_used=referrer.referral_code,
        referred_user_id=new_user_id,
        status="completed_signup",
    )
    db.session.add(referral)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    award = award_for_event(referrer.user_id, "REFER_PEER", related_id=new_user_id)
    return {"referral_id": referral.id, "referrer_id": referrer.user_id, "award": award.as_dict()}
