"""Friends actions that count against the subscription tier limits."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.friends import MatchCreate, FriendMatchResponse, GroupMembershipResponse
from app.services.friends import FriendsLimitError, record_friends_match, record_group_join
from app.dependencies import get_current_user

router = APIRouter(prefix="/friends", tags=["friends"])


@router.post("/matches", response_model=FriendMatchResponse)
def create_match(
    data: MatchCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if data.matched_user_id == current_user.id:
        raise HTTPException(status_code=400, detail="Cannot match with yourself")
    if not db.query(User).filter(User.id == data.matched_user_id).first():
        raise HTTPException(status_code=404, detail="User not found")
    try:
        match = record_friends_match(db, current_user, data.matched_user_id)
    except FriendsLimitError as e:
        raise HTTPException(status_code=403, detail=e.check.model_dump())
    db.commit()
    db.refresh(match)
    return FriendMatchResponse.model_validate(match)


@router.post("/groups/{group_id}/join", response_model=GroupMembershipResponse)
def join_group(
    group_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        membership = record_group_join(db, current_user, group_id)
    except FriendsLimitError as e:
        raise HTTPException(status_code=403, detail=e.check.model_dump())
    db.commit()
    db.refresh(membership)
    return GroupMembershipResponse.model_validate(membership)
