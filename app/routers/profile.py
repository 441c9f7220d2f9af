"""Profile updates. A legal name change voids an existing ID verification."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.auth import ProfileUpdate, UserResponse
from app.services.identity import invalidate_on_name_change
from app.dependencies import get_current_user

router = APIRouter(prefix="/profile", tags=["profile"])


@router.patch("", response_model=UserResponse)
def update_profile(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    changes = data.model_dump(exclude_unset=True)
    if "first_name" in changes or "last_name" in changes:
        invalidate_on_name_change(
            db,
            current_user,
            changes.get("first_name", current_user.first_name),
            changes.get("last_name", current_user.last_name),
        )
    for field, value in changes.items():
        setattr(current_user, field, value)
    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    return UserResponse.model_validate(current_user)
