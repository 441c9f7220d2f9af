"""Eligibility gate: booking, companion, feature and friends-tier requirement checks.

Every function here is a pure function of an EligibilitySnapshot. Unmet requirements
are returned as met=False checks with a reason and a remediation, never raised.
"""
from typing import Callable

from app.models.user import SubscriptionTier
from app.schemas.requirements import (
    AppFeature,
    BookingRequirementMode,
    BookingRequirements,
    CompanionRequirements,
    EligibilitySnapshot,
    FriendsFeature,
    FriendsFeatureLimits,
    ProfileCompletion,
    ProfileSnapshot,
    RequirementCheck,
)

# Declaration order is the priority order: the first unmet check is the one shown to the user
BOOKING_CHECK_KEYS = (
    "is_authenticated",
    "age_confirmed",
    "terms_accepted",
    "privacy_accepted",
    "email_verified",
    "phone_verified",
    "id_verified",
    "photo_verified",
    "profile_complete",
)

# Enforced only right before a booking is confirmed
FINALIZE_ONLY_KEYS = frozenset({"id_verified", "photo_verified"})

# key -> (requirement, action, navigate_to)
_BOOKING_CHECK_TEXT: dict[str, tuple[str, str | None, str | None]] = {
    "is_authenticated": ("You must be signed in", "Sign In", "SignIn"),
    "age_confirmed": ("You must confirm you are 18 or older", "Confirm Age", None),
    "terms_accepted": ("You must accept the Terms of Service", "View Terms", "LegalDocument"),
    "privacy_accepted": ("You must accept the Privacy Policy", "View Privacy Policy", "LegalDocument"),
    "email_verified": ("You must verify your email address", "Verify Email", "Verification"),
    "phone_verified": ("You must verify your phone number", "Verify Phone", "VerifyPhone"),
    "id_verified": ("You must verify your identity", "Verify ID", "Verification"),
    "photo_verified": ("You must upload a profile photo", "Add Photo", "EditProfile"),
    "profile_complete": ("You must complete your profile details", "Complete Profile", "EditProfile"),
}

COMPANION_AGREEMENT_TEXT = ("You must accept the Wingman Service Agreement", "View Agreement", "LegalDocument")

# (attribute, label) in display order
PROFILE_REQUIRED_FIELDS = (
    ("first_name", "First Name"),
    ("last_name", "Last Name"),
    ("email", "Email"),
    ("date_of_birth", "Date of Birth"),
    ("phone", "Phone Number"),
    ("city", "Location"),
    ("avatar_url", "Profile Photo"),
)

# None = unbounded
FRIENDS_FEATURE_LIMITS: dict[SubscriptionTier, FriendsFeatureLimits] = {
    SubscriptionTier.free: FriendsFeatureLimits(
        matches_per_month=0,
        groups_can_join=0,
        can_post=False,
        can_create_events=False,
        priority_matching=False,
    ),
    SubscriptionTier.plus: FriendsFeatureLimits(
        matches_per_month=5,
        groups_can_join=3,
        can_post=False,
        can_create_events=False,
        priority_matching=False,
    ),
    SubscriptionTier.premium: FriendsFeatureLimits(
        matches_per_month=None,
        groups_can_join=None,
        can_post=True,
        can_create_events=False,
        priority_matching=False,
    ),
    SubscriptionTier.elite: FriendsFeatureLimits(
        matches_per_month=None,
        groups_can_join=None,
        can_post=True,
        can_create_events=True,
        priority_matching=True,
    ),
}

MET = RequirementCheck(met=True, requirement="")
SIGN_IN_REQUIRED = RequirementCheck(met=False, requirement="Sign in required", action="Sign In", navigate_to="SignIn")


def _check(key: str, met: bool) -> RequirementCheck:
    requirement, action, navigate_to = _BOOKING_CHECK_TEXT[key]
    return RequirementCheck(met=met, requirement=requirement, action=action, navigate_to=navigate_to)


def _upgrade(requirement: str) -> RequirementCheck:
    return RequirementCheck(met=False, requirement=requirement, action="Upgrade", navigate_to="Subscription")


def _present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value)
    return True


def evaluate_profile_completion(profile: ProfileSnapshot | None) -> ProfileCompletion:
    """Presence count over the seven required profile fields."""
    if profile is None:
        return ProfileCompletion(is_complete=False, percentage=0, missing=["Account"])
    missing = [label for attr, label in PROFILE_REQUIRED_FIELDS if not _present(getattr(profile, attr))]
    completed = len(PROFILE_REQUIRED_FIELDS) - len(missing)
    percentage = round(completed / len(PROFILE_REQUIRED_FIELDS) * 100)
    return ProfileCompletion(is_complete=not missing, percentage=percentage, missing=missing)


def terms_current(snapshot: EligibilitySnapshot) -> bool:
    c = snapshot.consents
    return c.terms_accepted and c.terms_version == snapshot.current_terms_version


def privacy_current(snapshot: EligibilitySnapshot) -> bool:
    c = snapshot.consents
    return c.privacy_accepted and c.privacy_version == snapshot.current_privacy_version


def evaluate_booking_requirements(
    snapshot: EligibilitySnapshot,
    mode: BookingRequirementMode = BookingRequirementMode.entry,
) -> BookingRequirements:
    """All nine booking checks are computed in both modes; mode only selects which count as unmet."""
    profile = snapshot.profile
    has_photo = bool(profile and (profile.avatar_url or "").strip())
    completion = evaluate_profile_completion(profile)

    checks = {
        "is_authenticated": _check("is_authenticated", snapshot.is_authenticated),
        "age_confirmed": _check("age_confirmed", snapshot.consents.age_confirmed),
        "terms_accepted": _check("terms_accepted", terms_current(snapshot)),
        "privacy_accepted": _check("privacy_accepted", privacy_current(snapshot)),
        "email_verified": _check("email_verified", snapshot.email_verified),
        "phone_verified": _check("phone_verified", snapshot.phone_verified),
        "id_verified": _check("id_verified", snapshot.id_verified),
        "photo_verified": _check("photo_verified", has_photo),
        "profile_complete": _check("profile_complete", completion.is_complete),
    }

    if mode == BookingRequirementMode.finalize:
        required = BOOKING_CHECK_KEYS
    else:
        required = tuple(k for k in BOOKING_CHECK_KEYS if k not in FINALIZE_ONLY_KEYS)
    unmet = [checks[k] for k in required if not checks[k].met]

    return BookingRequirements(**checks, all_met=not unmet, unmet_requirements=unmet)


def evaluate_companion_requirements(snapshot: EligibilitySnapshot) -> CompanionRequirements:
    """Entry-mode booking requirements plus the companion service agreement."""
    booking = evaluate_booking_requirements(snapshot, BookingRequirementMode.entry)
    requirement, action, navigate_to = COMPANION_AGREEMENT_TEXT
    agreement = RequirementCheck(
        met=snapshot.consents.companion_agreement_accepted,
        requirement=requirement,
        action=action,
        navigate_to=navigate_to,
    )
    unmet = list(booking.unmet_requirements)
    if not agreement.met:
        unmet.append(agreement)
    fields = booking.model_dump(exclude={"all_met", "unmet_requirements"})
    return CompanionRequirements(
        **fields,
        companion_agreement_accepted=agreement,
        all_met=not unmet,
        unmet_requirements=unmet,
    )


def friends_limits_for(tier: SubscriptionTier) -> FriendsFeatureLimits:
    return FRIENDS_FEATURE_LIMITS[tier]


def _count_check(used: int, cap: int | None, unavailable: str, reached: str) -> RequirementCheck:
    if cap is None:
        return MET
    if cap == 0:
        return _upgrade(unavailable)
    if used >= cap:
        return _upgrade(reached.format(cap=cap))
    return MET


def can_use_friends_feature(snapshot: EligibilitySnapshot, feature: FriendsFeature) -> RequirementCheck:
    """Tier-limit check for the friends features against this month's usage."""
    if not snapshot.is_authenticated:
        return RequirementCheck(met=False, requirement="Sign in required", navigate_to="SignIn")

    limits = friends_limits_for(snapshot.tier)
    usage = snapshot.usage

    if feature == FriendsFeature.match:
        return _count_check(
            usage.matches_this_month,
            limits.matches_per_month,
            "Upgrade to Plus or higher to match with friends",
            "You've reached your monthly match limit ({cap})",
        )
    if feature == FriendsFeature.join_group:
        return _count_check(
            usage.groups_joined,
            limits.groups_can_join,
            "Upgrade to Plus or higher to join groups",
            "You've reached your group limit ({cap})",
        )
    if feature == FriendsFeature.post:
        return MET if limits.can_post else _upgrade("Upgrade to Premium or higher to post")
    if feature == FriendsFeature.create_event:
        return MET if limits.can_create_events else _upgrade("Upgrade to Elite to create events")
    raise ValueError(f"Unknown friends feature: {feature!r}")


def _browse(snapshot: EligibilitySnapshot) -> RequirementCheck:
    if not snapshot.is_authenticated:
        return SIGN_IN_REQUIRED
    if not snapshot.consents.age_confirmed:
        return RequirementCheck(met=False, requirement="Age confirmation required", action="Confirm Age")
    return MET


def _booking_entry(snapshot: EligibilitySnapshot) -> RequirementCheck:
    reqs = evaluate_booking_requirements(snapshot, BookingRequirementMode.entry)
    return MET if reqs.all_met else reqs.unmet_requirements[0]


def _become_companion(snapshot: EligibilitySnapshot) -> RequirementCheck:
    reqs = evaluate_companion_requirements(snapshot)
    return MET if reqs.all_met else reqs.unmet_requirements[0]


def _signed_in(snapshot: EligibilitySnapshot) -> RequirementCheck:
    if not snapshot.is_authenticated:
        return RequirementCheck(met=False, requirement="Sign in required", navigate_to="SignIn")
    return MET


def _friends(feature: FriendsFeature) -> Callable[[EligibilitySnapshot], RequirementCheck]:
    return lambda snapshot: can_use_friends_feature(snapshot, feature)


_FEATURE_HANDLERS: dict[AppFeature, Callable[[EligibilitySnapshot], RequirementCheck]] = {
    AppFeature.browse_companions: _browse,
    AppFeature.view_companion_profile: _browse,
    AppFeature.book_companion: _booking_entry,
    AppFeature.send_message: _booking_entry,
    AppFeature.leave_review: _booking_entry,
    AppFeature.become_companion: _become_companion,
    AppFeature.safety_features: _signed_in,
    AppFeature.subscription: _signed_in,
    AppFeature.friends_matching: _friends(FriendsFeature.match),
    AppFeature.friends_groups: _friends(FriendsFeature.join_group),
    AppFeature.friends_post: _friends(FriendsFeature.post),
    AppFeature.friends_events: _friends(FriendsFeature.create_event),
}

_unhandled = set(AppFeature) - set(_FEATURE_HANDLERS)
if _unhandled:
    raise RuntimeError(f"No access handler for features: {sorted(f.value for f in _unhandled)}")


def can_access_feature(snapshot: EligibilitySnapshot, feature: AppFeature) -> RequirementCheck:
    """Single-reason access check: returns the first blocking requirement, or a met check."""
    return _FEATURE_HANDLERS[AppFeature(feature)](snapshot)
