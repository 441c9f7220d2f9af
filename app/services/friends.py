"""Friends usage recording, gated by the subscription tier limits."""
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.models.friends import FriendMatch, GroupMembership
from app.models.user import User
from app.schemas.requirements import FriendsFeature, RequirementCheck
from app.services.eligibility import build_snapshot
from app.services.requirements import can_use_friends_feature


class FriendsLimitError(Exception):
    """Raised when the user's tier does not allow the friends action."""

    def __init__(self, check: RequirementCheck):
        super().__init__(check.requirement)
        self.check = check


def _ensure_allowed(db: Session, user: User, feature: FriendsFeature, now: datetime) -> None:
    check = can_use_friends_feature(build_snapshot(db, user, now), feature)
    if not check.met:
        raise FriendsLimitError(check)


def record_friends_match(db: Session, user: User, matched_user_id: int, now: datetime | None = None) -> FriendMatch:
    now = now or datetime.now(timezone.utc)
    _ensure_allowed(db, user, FriendsFeature.match, now)
    match = FriendMatch(user_id=user.id, matched_user_id=matched_user_id, created_at=now)
    db.add(match)
    db.flush()
    return match


def record_group_join(db: Session, user: User, group_id: int, now: datetime | None = None) -> GroupMembership:
    now = now or datetime.now(timezone.utc)
    _ensure_allowed(db, user, FriendsFeature.join_group, now)
    membership = GroupMembership(user_id=user.id, group_id=group_id, created_at=now)
    db.add(membership)
    db.flush()
    return membership
