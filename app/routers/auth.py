"""Authentication: register (with signup consents), login, current user."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from app.database import get_db
from app.models.user import User
from app.schemas.auth import UserCreate, UserLogin, Token, UserResponse
from app.services.auth import get_password_hash, verify_password, create_access_token
from app.services.consents import sync_signup_consents
from app.dependencies import get_current_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=Token)
def register(data: UserCreate, db: Session = Depends(get_db)):
    email = data.email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="An account with this email already exists")
    user = User(
        email=email,
        hashed_password=get_password_hash(data.password),
        first_name=(data.first_name or "").strip() or None,
        last_name=(data.last_name or "").strip() or None,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="An account with this email already exists")
    sync_signup_consents(
        db,
        user.id,
        terms_accepted=data.terms_accepted,
        privacy_accepted=data.privacy_accepted,
        age_confirmed=data.age_confirmed,
        marketing_opt_in=data.marketing_opt_in,
    )
    db.commit()
    db.refresh(user)
    return Token(access_token=create_access_token(user.id, user.email), user=UserResponse.model_validate(user))


@router.post("/login", response_model=Token)
def login(data: UserLogin, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == data.email.strip().lower()).first()
    if not user or not verify_password(data.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return Token(access_token=create_access_token(user.id, user.email), user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return UserResponse.model_validate(current_user)
