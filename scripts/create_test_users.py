"""
Create test users for the eligibility gate and the ID verification reminder sweep.

- member@wingman.demo: fully consented, verified, complete profile (passes finalize)
- expiring@wingman.demo: same, but ID verification expires in REMINDER_DAYS whole days

Run from project root:
  python scripts/create_test_users.py [--reminder-days 30]

Credentials are printed at the end.
"""
import argparse
import os
import sys
from datetime import date, datetime, timedelta, timezone

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.database import SessionLocal, Base, engine
from app.models.user import User, SubscriptionTier, IdVerificationStatus
from app.services.auth import get_password_hash
from app.services.consents import sync_signup_consents
from app.services.identity import mark_id_verified

PASSWORD = "Password123!"
MEMBER_EMAIL = "member@wingman.demo"
EXPIRING_EMAIL = "expiring@wingman.demo"


def _get_or_create(db, email: str, first_name: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if user:
        print(f"User already exists: {email}")
        return user
    user = User(
        email=email,
        hashed_password=get_password_hash(PASSWORD),
        first_name=first_name,
        last_name="Demo",
        date_of_birth=date(1990, 1, 1),
        phone="5551234567",
        city="Austin",
        avatar_url="https://example.com/avatar.png",
        tier=SubscriptionTier.plus,
        email_verified=True,
        phone_verified=True,
    )
    db.add(user)
    db.flush()
    sync_signup_consents(db, user.id, terms_accepted=True, privacy_accepted=True, age_confirmed=True)
    print(f"Created user: {email}")
    return user


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--reminder-days", type=int, default=30)
    args = parser.parse_args()

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        member = _get_or_create(db, MEMBER_EMAIL, "Member")
        mark_id_verified(db, member)

        expiring = _get_or_create(db, EXPIRING_EMAIL, "Expiring")
        mark_id_verified(db, expiring)
        expiring.id_verification_expires_at = datetime.now(timezone.utc) + timedelta(days=args.reminder_days, hours=1)
        expiring.id_verification_status = IdVerificationStatus.verified
        db.commit()
    finally:
        db.close()

    print("\n--- Test credentials ---")
    print(f"  {MEMBER_EMAIL} / {PASSWORD}")
    print(f"  {EXPIRING_EMAIL} / {PASSWORD} (ID expires in ~{args.reminder_days} days)")


if __name__ == "__main__":
    main()
