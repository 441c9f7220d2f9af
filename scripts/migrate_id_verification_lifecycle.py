"""
Create the ID verification lifecycle tables (verification_events, id_verification_reminder_log)
if they do not exist, and normalize rows that are already past expiry.
For a NEW database: not needed; both models are in create_all (startup creates them).
Run once on an EXISTING DB: python scripts/migrate_id_verification_lifecycle.py (from project root)
"""
import os
import sys
from datetime import datetime, timezone

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from sqlalchemy import inspect
from app.database import engine, SessionLocal
from app.models.verification_event import VerificationEvent
from app.models.reminder_log import IdVerificationReminderLog
from app.models.user import User, IdVerificationStatus


def main():
    insp = inspect(engine)
    existing = set(insp.get_table_names())
    for model in (VerificationEvent, IdVerificationReminderLog):
        name = model.__tablename__
        if name in existing:
            print(f"  skip (exists): {name}")
        else:
            model.__table__.create(engine)
            print(f"  created: {name}")

    db = SessionLocal()
    try:
        now = datetime.now(timezone.utc)
        expired = (
            db.query(User)
            .filter(
                User.id_verified.is_(True),
                User.id_verification_expires_at.isnot(None),
                User.id_verification_expires_at <= now,
            )
            .update(
                {User.id_verified: False, User.id_verification_status: IdVerificationStatus.expired},
                synchronize_session=False,
            )
        )
        db.commit()
        print(f"  normalized already-expired verifications: {expired}")
    finally:
        db.close()
    print("Done.")


if __name__ == "__main__":
    main()
