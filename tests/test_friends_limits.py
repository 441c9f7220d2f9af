from datetime import datetime, timedelta, timezone

import pytest

from app.models.friends import FriendMatch, GroupMembership
from app.models.user import SubscriptionTier
from app.schemas.requirements import EligibilitySnapshot, FriendsFeature, FriendsUsage
from app.services.eligibility import build_snapshot, compute_friends_usage, next_reset_date
from app.services.friends import FriendsLimitError, record_friends_match, record_group_join
from app.services.requirements import can_use_friends_feature

from conftest import NOW, auth_headers


def _snapshot(tier: SubscriptionTier, matches: int = 0, groups: int = 0) -> EligibilitySnapshot:
    return EligibilitySnapshot(
        is_authenticated=True,
        tier=tier,
        usage=FriendsUsage(matches_this_month=matches, groups_joined=groups),
    )


def test_plus_tier_match_limit() -> None:
    assert can_use_friends_feature(_snapshot(SubscriptionTier.plus, matches=4), FriendsFeature.match).met is True

    check = can_use_friends_feature(_snapshot(SubscriptionTier.plus, matches=5), FriendsFeature.match)

    assert check.met is False
    assert check.requirement == "You've reached your monthly match limit (5)"
    assert check.action == "Upgrade"
    assert check.navigate_to == "Subscription"


def test_plus_tier_group_limit() -> None:
    check = can_use_friends_feature(_snapshot(SubscriptionTier.plus, groups=3), FriendsFeature.join_group)

    assert check.met is False
    assert check.requirement == "You've reached your group limit (3)"


def test_free_tier_gets_upgrade_prompts() -> None:
    snapshot = _snapshot(SubscriptionTier.free)

    assert can_use_friends_feature(snapshot, FriendsFeature.match).requirement == (
        "Upgrade to Plus or higher to match with friends"
    )
    assert can_use_friends_feature(snapshot, FriendsFeature.join_group).requirement == (
        "Upgrade to Plus or higher to join groups"
    )


@pytest.mark.parametrize("tier", [SubscriptionTier.premium, SubscriptionTier.elite])
def test_unbounded_tiers_never_hit_count_limits(tier: SubscriptionTier) -> None:
    snapshot = _snapshot(tier, matches=10_000, groups=10_000)

    assert can_use_friends_feature(snapshot, FriendsFeature.match).met is True
    assert can_use_friends_feature(snapshot, FriendsFeature.join_group).met is True


def test_post_and_event_capabilities() -> None:
    assert can_use_friends_feature(_snapshot(SubscriptionTier.plus), FriendsFeature.post).met is False
    assert can_use_friends_feature(_snapshot(SubscriptionTier.premium), FriendsFeature.post).met is True
    assert can_use_friends_feature(_snapshot(SubscriptionTier.premium), FriendsFeature.create_event).requirement == (
        "Upgrade to Elite to create events"
    )
    assert can_use_friends_feature(_snapshot(SubscriptionTier.elite), FriendsFeature.create_event).met is True


def test_unauthenticated_friends_check() -> None:
    check = can_use_friends_feature(EligibilitySnapshot(tier=SubscriptionTier.elite), FriendsFeature.post)

    assert check.met is False
    assert check.requirement == "Sign in required"
    assert check.navigate_to == "SignIn"


def test_next_reset_date_rolls_over_year() -> None:
    assert next_reset_date(datetime(2026, 12, 31, 23, 0, tzinfo=timezone.utc)) == datetime(
        2027, 1, 1, tzinfo=timezone.utc
    )
    assert next_reset_date(NOW) == datetime(2026, 4, 1, tzinfo=timezone.utc)


def test_usage_counts_only_the_current_month(db, make_user) -> None:
    user = make_user()
    other = make_user()
    last_month = NOW - timedelta(days=5)
    db.add_all([
        FriendMatch(user_id=user.id, matched_user_id=other.id, created_at=last_month),
        FriendMatch(user_id=user.id, matched_user_id=other.id, created_at=NOW),
        GroupMembership(user_id=user.id, group_id=7, created_at=last_month),
        GroupMembership(user_id=user.id, group_id=8, created_at=NOW),
        GroupMembership(user_id=other.id, group_id=8, created_at=NOW),
    ])
    db.commit()

    usage = compute_friends_usage(db, user.id, NOW)

    assert usage.matches_this_month == 1
    assert usage.groups_joined == 1
    assert usage.next_reset_date == datetime(2026, 4, 1, tzinfo=timezone.utc)


def test_record_match_enforces_plus_limit(db, make_user) -> None:
    user = make_user(tier=SubscriptionTier.plus)
    other = make_user()
    for _ in range(5):
        record_friends_match(db, user, other.id, NOW)
    db.commit()

    with pytest.raises(FriendsLimitError) as exc:
        record_friends_match(db, user, other.id, NOW)

    assert exc.value.check.requirement == "You've reached your monthly match limit (5)"
    assert build_snapshot(db, user, NOW).usage.matches_this_month == 5


def test_limits_reset_next_month(db, make_user) -> None:
    user = make_user(tier=SubscriptionTier.plus)
    for group_id in range(3):
        record_group_join(db, user, group_id, NOW)
    db.commit()

    with pytest.raises(FriendsLimitError):
        record_group_join(db, user, 99, NOW)
    record_group_join(db, user, 99, datetime(2026, 4, 2, tzinfo=timezone.utc))


def test_match_endpoint_returns_403_with_upgrade_check(client, make_user) -> None:
    user = make_user(tier=SubscriptionTier.free)
    other = make_user()

    r = client.post("/friends/matches", json={"matched_user_id": other.id}, headers=auth_headers(user))

    assert r.status_code == 403
    assert r.json()["detail"]["action"] == "Upgrade"


def test_match_endpoint_records_match(client, make_user) -> None:
    user = make_user(tier=SubscriptionTier.plus)
    other = make_user()

    r = client.post("/friends/matches", json={"matched_user_id": other.id}, headers=auth_headers(user))
    assert r.status_code == 200
    assert r.json()["matched_user_id"] == other.id

    status = client.get("/requirements/friends", headers=auth_headers(user)).json()
    assert status["tier"] == "plus"
    assert status["limits"]["matches_per_month"] == 5
    assert status["usage"]["matches_this_month"] == 1


def test_match_endpoint_rejects_self_and_unknown_user(client, make_user) -> None:
    user = make_user(tier=SubscriptionTier.elite)

    assert client.post("/friends/matches", json={"matched_user_id": user.id}, headers=auth_headers(user)).status_code == 400
    assert client.post("/friends/matches", json={"matched_user_id": 9999}, headers=auth_headers(user)).status_code == 404


def test_premium_limits_serialize_as_unbounded(client, make_user) -> None:
    user = make_user(tier=SubscriptionTier.premium)

    limits = client.get("/requirements/friends", headers=auth_headers(user)).json()["limits"]

    assert limits["matches_per_month"] is None
    assert limits["groups_can_join"] is None
