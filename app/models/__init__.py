"""
All SQLAlchemy models. Schema is the source of truth for new DBs.
Base.metadata.create_all() creates every table; no migration scripts needed for fresh installs.
"""
from app.models.user import User, SubscriptionTier, IdVerificationStatus
from app.models.consent import UserConsent
from app.models.friends import FriendMatch, GroupMembership
from app.models.verification_event import VerificationEvent
from app.models.reminder_log import IdVerificationReminderLog

__all__ = [
    "User",
    "SubscriptionTier",
    "IdVerificationStatus",
    "UserConsent",
    "FriendMatch",
    "GroupMembership",
    "VerificationEvent",
    "IdVerificationReminderLog",
]
