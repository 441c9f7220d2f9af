"""Eligibility gate endpoints. All of them answer for anonymous callers too (as not signed in)."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.requirements import (
    AppFeature,
    BookingRequirementMode,
    BookingRequirements,
    CompanionRequirements,
    FriendsFeature,
    FriendsStatus,
    ProfileCompletion,
    RequirementCheck,
)
from app.services.eligibility import build_snapshot
from app.services.requirements import (
    can_access_feature,
    can_use_friends_feature,
    evaluate_booking_requirements,
    evaluate_companion_requirements,
    evaluate_profile_completion,
    friends_limits_for,
)
from app.dependencies import get_optional_user

router = APIRouter(prefix="/requirements", tags=["requirements"])


@router.get("/booking", response_model=BookingRequirements)
def booking_requirements(
    mode: BookingRequirementMode = Query(BookingRequirementMode.entry),
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    return evaluate_booking_requirements(build_snapshot(db, current_user), mode)


@router.get("/companion", response_model=CompanionRequirements)
def companion_requirements(
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    return evaluate_companion_requirements(build_snapshot(db, current_user))


@router.get("/features/{feature}", response_model=RequirementCheck)
def feature_access(
    feature: AppFeature,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    return can_access_feature(build_snapshot(db, current_user), feature)


@router.get("/profile-completion", response_model=ProfileCompletion)
def profile_completion(
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    return evaluate_profile_completion(build_snapshot(db, current_user).profile)


@router.get("/friends", response_model=FriendsStatus)
def friends_status(
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    snapshot = build_snapshot(db, current_user)
    return FriendsStatus(tier=snapshot.tier, limits=friends_limits_for(snapshot.tier), usage=snapshot.usage)


@router.get("/friends/{feature}", response_model=RequirementCheck)
def friends_feature(
    feature: FriendsFeature,
    db: Session = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
):
    return can_use_friends_feature(build_snapshot(db, current_user), feature)
