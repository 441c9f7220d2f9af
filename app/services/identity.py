"""ID verification lifecycle on the user row: activation, validity window, invalidation."""
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.user import User, IdVerificationStatus
from app.services.verification_events import (
    record_event,
    EVENT_ID_VERIFIED,
    EVENT_ID_INVALIDATED_NAME_CHANGE,
)


def as_utc(dt: datetime | None) -> datetime | None:
    """Normalize DB datetimes to aware UTC (SQLite hands back naive values)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def add_years(dt: datetime, years: int) -> datetime:
    """Same month/day `years` later; Feb 29 falls back to Feb 28."""
    try:
        return dt.replace(year=dt.year + years)
    except ValueError:
        return dt.replace(year=dt.year + years, day=28)


def is_id_verification_active(user: User | None, now: datetime | None = None) -> bool:
    if user is None or not user.id_verified:
        return False
    if user.id_verification_status != IdVerificationStatus.verified:
        return False
    expires_at = as_utc(user.id_verification_expires_at)
    if expires_at is None:
        return False
    return expires_at > (now or datetime.now(timezone.utc))


def mark_id_verified(db: Session, user: User, now: datetime | None = None) -> User:
    """Record a successful ID verification and open a new validity (and reminder) cycle."""
    now = now or datetime.now(timezone.utc)
    years = get_settings().id_verification_validity_years
    user.id_verified = True
    user.id_verified_at = now
    user.id_verification_status = IdVerificationStatus.verified
    user.id_verification_expires_at = add_years(now, years)
    db.add(user)
    db.flush()
    record_event(
        db,
        user.id,
        EVENT_ID_VERIFIED,
        {"verified_at": now, "expires_at": user.id_verification_expires_at},
    )
    return user


def invalidate_on_name_change(
    db: Session,
    user: User,
    new_first_name: str | None,
    new_last_name: str | None,
) -> bool:
    """A legal name change voids a verified ID. Returns True if the verification was invalidated.

    Call before assigning the new names to the user.
    """
    old_first = user.first_name or ""
    old_last = user.last_name or ""
    if (new_first_name or "") == old_first and (new_last_name or "") == old_last:
        return False
    if not user.id_verified and user.id_verification_status != IdVerificationStatus.verified:
        return False
    user.id_verified = False
    user.id_verified_at = None
    user.id_verification_status = IdVerificationStatus.unverified
    user.id_verification_expires_at = None
    db.add(user)
    record_event(
        db,
        user.id,
        EVENT_ID_INVALIDATED_NAME_CHANGE,
        {
            "old_first_name": user.first_name,
            "old_last_name": user.last_name,
            "new_first_name": new_first_name,
            "new_last_name": new_last_name,
            "reason": "legal_name_changed_requires_reverification",
        },
    )
    return True
