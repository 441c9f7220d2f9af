from datetime import date

import pytest

from app.models.user import SubscriptionTier
from app.schemas.requirements import (
    AppFeature,
    BookingRequirementMode,
    ConsentSnapshot,
    EligibilitySnapshot,
    ProfileSnapshot,
)
from app.services.requirements import (
    BOOKING_CHECK_KEYS,
    can_access_feature,
    evaluate_booking_requirements,
    evaluate_companion_requirements,
    evaluate_profile_completion,
)

FULL_PROFILE = ProfileSnapshot(
    first_name="Ada",
    last_name="Lovelace",
    email="ada@wingman.test",
    date_of_birth=date(1990, 5, 17),
    phone="5551234567",
    city="Austin",
    avatar_url="https://cdn.example.com/ada.png",
)

CURRENT_CONSENTS = ConsentSnapshot(
    terms_accepted=True,
    terms_version="1.0",
    privacy_accepted=True,
    privacy_version="1.0",
    age_confirmed=True,
)


def _snapshot(**overrides) -> EligibilitySnapshot:
    values = dict(
        is_authenticated=True,
        profile=FULL_PROFILE,
        consents=CURRENT_CONSENTS,
        email_verified=True,
        phone_verified=True,
        id_verified=True,
    )
    values.update(overrides)
    return EligibilitySnapshot(**values)


def test_fully_eligible_user_passes_finalize() -> None:
    reqs = evaluate_booking_requirements(_snapshot(), BookingRequirementMode.finalize)

    assert reqs.all_met is True
    assert reqs.unmet_requirements == []


def test_terms_accepted_for_an_older_version_counts_as_not_accepted() -> None:
    consents = CURRENT_CONSENTS.model_copy(update={"terms_version": "0.9"})

    reqs = evaluate_booking_requirements(_snapshot(consents=consents))

    assert reqs.terms_accepted.met is False
    assert reqs.all_met is False
    assert reqs.unmet_requirements[0].requirement == "You must accept the Terms of Service"
    assert reqs.unmet_requirements[0].navigate_to == "LegalDocument"


def test_entry_mode_does_not_require_id_or_photo() -> None:
    snapshot = _snapshot(id_verified=False, profile=FULL_PROFILE.model_copy(update={"avatar_url": None}))

    entry = evaluate_booking_requirements(snapshot, BookingRequirementMode.entry)
    finalize = evaluate_booking_requirements(snapshot, BookingRequirementMode.finalize)

    # Profile completion still needs the photo, so entry fails only on that
    assert [c.requirement for c in entry.unmet_requirements] == ["You must complete your profile details"]
    assert entry.id_verified.met is False
    assert entry.photo_verified.met is False
    assert [c.requirement for c in finalize.unmet_requirements] == [
        "You must verify your identity",
        "You must upload a profile photo",
        "You must complete your profile details",
    ]


def test_entry_unmet_is_a_subset_of_finalize_unmet() -> None:
    snapshots = [
        EligibilitySnapshot(),
        _snapshot(id_verified=False),
        _snapshot(email_verified=False, consents=ConsentSnapshot()),
        _snapshot(profile=ProfileSnapshot(email="x@wingman.test")),
    ]
    for snapshot in snapshots:
        entry = evaluate_booking_requirements(snapshot, BookingRequirementMode.entry)
        finalize = evaluate_booking_requirements(snapshot, BookingRequirementMode.finalize)
        assert set(c.requirement for c in entry.unmet_requirements) <= set(
            c.requirement for c in finalize.unmet_requirements
        )
        for reqs in (entry, finalize):
            assert reqs.all_met == (not reqs.unmet_requirements)


def test_unauthenticated_snapshot_lists_sign_in_first() -> None:
    reqs = evaluate_booking_requirements(EligibilitySnapshot())

    assert reqs.is_authenticated.met is False
    assert reqs.unmet_requirements[0].action == "Sign In"
    assert reqs.unmet_requirements[0].navigate_to == "SignIn"


def test_unmet_requirements_follow_check_order() -> None:
    reqs = evaluate_booking_requirements(EligibilitySnapshot(), BookingRequirementMode.finalize)

    expected = [getattr(reqs, key).requirement for key in BOOKING_CHECK_KEYS]
    assert [c.requirement for c in reqs.unmet_requirements] == expected


def test_companion_requirements_add_service_agreement() -> None:
    reqs = evaluate_companion_requirements(_snapshot())

    assert reqs.all_met is False
    assert reqs.companion_agreement_accepted.met is False
    assert [c.requirement for c in reqs.unmet_requirements] == ["You must accept the Wingman Service Agreement"]

    consents = CURRENT_CONSENTS.model_copy(update={"companion_agreement_accepted": True})
    assert evaluate_companion_requirements(_snapshot(consents=consents)).all_met is True


def test_profile_completion_percentage_and_missing_labels() -> None:
    profile = ProfileSnapshot(first_name="Ada", last_name="", email="ada@wingman.test", city="Austin")

    completion = evaluate_profile_completion(profile)

    assert completion.is_complete is False
    assert completion.percentage == 43
    assert completion.missing == ["Last Name", "Date of Birth", "Phone Number", "Profile Photo"]


def test_profile_completion_without_account() -> None:
    completion = evaluate_profile_completion(None)

    assert completion.percentage == 0
    assert completion.missing == ["Account"]


def test_complete_profile_is_100_percent() -> None:
    completion = evaluate_profile_completion(FULL_PROFILE)

    assert completion.is_complete is True
    assert completion.percentage == 100
    assert completion.missing == []


def test_browse_needs_age_confirmation_only() -> None:
    snapshot = _snapshot(consents=ConsentSnapshot(), email_verified=False, profile=None)

    check = can_access_feature(snapshot, AppFeature.browse_companions)

    assert check.met is False
    assert check.requirement == "Age confirmation required"

    ok = can_access_feature(_snapshot(consents=ConsentSnapshot(age_confirmed=True)), AppFeature.view_companion_profile)
    assert ok.met is True


def test_booking_features_return_first_unmet_requirement() -> None:
    snapshot = _snapshot(phone_verified=False, email_verified=False)

    for feature in (AppFeature.book_companion, AppFeature.send_message, AppFeature.leave_review):
        check = can_access_feature(snapshot, feature)
        assert check.met is False
        assert check.requirement == "You must verify your email address"


def test_become_companion_requires_agreement() -> None:
    check = can_access_feature(_snapshot(), AppFeature.become_companion)

    assert check.met is False
    assert check.action == "View Agreement"


@pytest.mark.parametrize("feature", [AppFeature.safety_features, AppFeature.subscription])
def test_signed_in_features(feature: AppFeature) -> None:
    assert can_access_feature(_snapshot(), feature).met is True
    denied = can_access_feature(EligibilitySnapshot(), feature)
    assert denied.met is False
    assert denied.navigate_to == "SignIn"


def test_every_feature_has_an_access_rule() -> None:
    for feature in AppFeature:
        check = can_access_feature(EligibilitySnapshot(), feature)
        assert check.met is False


def test_friends_features_route_through_tier_limits() -> None:
    snapshot = _snapshot(tier=SubscriptionTier.elite)

    assert can_access_feature(snapshot, AppFeature.friends_events).met is True
    assert can_access_feature(_snapshot(), AppFeature.friends_matching).action == "Upgrade"


def test_new_unverified_user_entry_requirements() -> None:
    snapshot = EligibilitySnapshot(
        is_authenticated=True,
        profile=ProfileSnapshot(email="new@wingman.test"),
        tier=SubscriptionTier.free,
    )

    reqs = evaluate_booking_requirements(snapshot, BookingRequirementMode.entry)

    unmet = {c.requirement for c in reqs.unmet_requirements}
    assert reqs.all_met is False
    for key in ("age_confirmed", "terms_accepted", "privacy_accepted", "email_verified", "phone_verified",
                "profile_complete"):
        assert getattr(reqs, key).requirement in unmet
    assert reqs.id_verified.requirement not in unmet
    assert reqs.photo_verified.requirement not in unmet
