"""Load an EligibilitySnapshot for a user: consents, verification flags, tier and monthly friends usage."""
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.consent import UserConsent
from app.models.friends import FriendMatch, GroupMembership
from app.models.user import User
from app.schemas.requirements import ConsentSnapshot, EligibilitySnapshot, FriendsUsage, ProfileSnapshot
from app.services.identity import is_id_verification_active


def month_start(now: datetime) -> datetime:
    """00:00 UTC on the first day of now's month."""
    now = now.astimezone(timezone.utc)
    return datetime(now.year, now.month, 1, tzinfo=timezone.utc)


def next_reset_date(now: datetime) -> datetime:
    """00:00 UTC on the first day of the following month."""
    now = now.astimezone(timezone.utc)
    if now.month == 12:
        return datetime(now.year + 1, 1, 1, tzinfo=timezone.utc)
    return datetime(now.year, now.month + 1, 1, tzinfo=timezone.utc)


def compute_friends_usage(db: Session, user_id: int, now: datetime | None = None) -> FriendsUsage:
    """Count this month's matches and group joins. Recomputed on every call, so no reset bookkeeping."""
    now = now or datetime.now(timezone.utc)
    since = month_start(now)
    until = next_reset_date(now)
    matches = (
        db.query(func.count(FriendMatch.id))
        .filter(FriendMatch.user_id == user_id, FriendMatch.created_at >= since, FriendMatch.created_at < until)
        .scalar()
    )
    groups = (
        db.query(func.count(GroupMembership.id))
        .filter(GroupMembership.user_id == user_id, GroupMembership.created_at >= since, GroupMembership.created_at < until)
        .scalar()
    )
    return FriendsUsage(matches_this_month=matches or 0, groups_joined=groups or 0, next_reset_date=until)


def build_snapshot(db: Session, user: User | None, now: datetime | None = None) -> EligibilitySnapshot:
    """Materialize everything the gate needs. user=None yields an unauthenticated snapshot."""
    settings = get_settings()
    versions = {
        "current_terms_version": settings.current_terms_version,
        "current_privacy_version": settings.current_privacy_version,
    }
    if user is None:
        return EligibilitySnapshot(is_authenticated=False, **versions)

    now = now or datetime.now(timezone.utc)
    consent = db.query(UserConsent).filter(UserConsent.user_id == user.id).first()
    return EligibilitySnapshot(
        is_authenticated=True,
        profile=ProfileSnapshot.model_validate(user),
        consents=ConsentSnapshot.model_validate(consent) if consent else ConsentSnapshot(),
        email_verified=bool(user.email_verified),
        phone_verified=bool(user.phone_verified),
        id_verified=is_id_verification_active(user, now),
        tier=user.tier,
        usage=compute_friends_usage(db, user.id, now),
        **versions,
    )
