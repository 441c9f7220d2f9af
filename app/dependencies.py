"""Shared dependencies: DB session, current user."""
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User
from app.services.auth import decode_token_with_error

security = HTTPBearer(auto_error=False)


def _user_from_credentials(db: Session, credentials: HTTPAuthorizationCredentials | None) -> tuple[User | None, str | None]:
    """Returns (user, error_detail)."""
    if not credentials:
        return None, "Not authenticated"
    token_str = (credentials.credentials or "").strip()
    payload, _ = decode_token_with_error(token_str)
    if not payload:
        return None, "Invalid or expired token"
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None, "Invalid token"
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        return None, "User not found"
    return user, None


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    user, error = _user_from_credentials(db, credentials)
    if not user:
        raise HTTPException(status_code=401, detail=error)
    return user


def get_optional_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User | None:
    """Like get_current_user, but an absent or invalid session is reported as None (unauthenticated)."""
    user, _ = _user_from_credentials(db, credentials)
    return user
