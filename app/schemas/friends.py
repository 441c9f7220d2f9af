"""Friends action schemas."""
from datetime import datetime
from pydantic import BaseModel


class MatchCreate(BaseModel):
    matched_user_id: int


class FriendMatchResponse(BaseModel):
    id: int
    matched_user_id: int
    created_at: datetime

    class Config:
        from_attributes = True


class GroupMembershipResponse(BaseModel):
    id: int
    group_id: int
    created_at: datetime

    class Config:
        from_attributes = True
