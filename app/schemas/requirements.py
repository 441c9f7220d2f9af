"""Eligibility gate schemas: input snapshot and requirement results."""
import enum
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from app.models.user import SubscriptionTier


class BookingRequirementMode(str, enum.Enum):
    entry = "entry"
    finalize = "finalize"


class AppFeature(str, enum.Enum):
    browse_companions = "browse_companions"
    view_companion_profile = "view_companion_profile"
    book_companion = "book_companion"
    send_message = "send_message"
    leave_review = "leave_review"
    become_companion = "become_companion"
    safety_features = "safety_features"
    subscription = "subscription"
    friends_matching = "friends_matching"
    friends_groups = "friends_groups"
    friends_post = "friends_post"
    friends_events = "friends_events"


class FriendsFeature(str, enum.Enum):
    match = "match"
    join_group = "join_group"
    post = "post"
    create_event = "create_event"


class RequirementCheck(BaseModel):
    model_config = ConfigDict(frozen=True)

    met: bool
    requirement: str
    action: str | None = None
    navigate_to: str | None = None


class BookingRequirements(BaseModel):
    is_authenticated: RequirementCheck
    age_confirmed: RequirementCheck
    terms_accepted: RequirementCheck
    privacy_accepted: RequirementCheck
    email_verified: RequirementCheck
    phone_verified: RequirementCheck
    id_verified: RequirementCheck
    photo_verified: RequirementCheck
    profile_complete: RequirementCheck
    all_met: bool
    unmet_requirements: list[RequirementCheck]


class CompanionRequirements(BookingRequirements):
    companion_agreement_accepted: RequirementCheck


class ProfileCompletion(BaseModel):
    is_complete: bool
    percentage: int
    missing: list[str]


class FriendsFeatureLimits(BaseModel):
    """Per-tier friends limits. A count of None means unbounded."""
    model_config = ConfigDict(frozen=True)

    matches_per_month: int | None
    groups_can_join: int | None
    can_post: bool
    can_create_events: bool
    priority_matching: bool


class FriendsUsage(BaseModel):
    model_config = ConfigDict(frozen=True)

    matches_this_month: int = 0
    groups_joined: int = 0
    next_reset_date: datetime | None = None


class FriendsStatus(BaseModel):
    tier: SubscriptionTier
    limits: FriendsFeatureLimits
    usage: FriendsUsage


class ProfileSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    date_of_birth: date | None = None
    phone: str | None = None
    city: str | None = None
    avatar_url: str | None = None


class ConsentSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    terms_accepted: bool = False
    terms_version: str | None = None
    privacy_accepted: bool = False
    privacy_version: str | None = None
    age_confirmed: bool = False
    electronic_signature_consent: bool = False
    marketing_opt_in: bool = False
    companion_agreement_accepted: bool = False


class EligibilitySnapshot(BaseModel):
    """Everything the gate reads, materialized up front. Evaluation never touches the database."""
    model_config = ConfigDict(frozen=True)

    is_authenticated: bool = False
    profile: ProfileSnapshot | None = None
    consents: ConsentSnapshot = ConsentSnapshot()
    email_verified: bool = False
    phone_verified: bool = False
    id_verified: bool = False
    tier: SubscriptionTier = SubscriptionTier.free
    usage: FriendsUsage = FriendsUsage()
    current_terms_version: str = "1.0"
    current_privacy_version: str = "1.0"
