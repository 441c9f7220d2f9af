"""Auth and profile schemas."""
import re
from datetime import date, datetime
from pydantic import BaseModel, EmailStr, field_validator, model_validator
from app.models.user import SubscriptionTier, IdVerificationStatus

PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15
PASSWORD_MIN_LENGTH = 8


def _normalize_phone(value: str | None) -> str:
    if value is None:
        return ""
    return re.sub(r"\D", "", value.strip())


def _validate_phone_digits(phone: str) -> None:
    digits = _normalize_phone(phone)
    if len(digits) < PHONE_MIN_DIGITS:
        raise ValueError(f"Phone number must have at least {PHONE_MIN_DIGITS} digits (e.g. 5551234567 or +1 555 123 4567).")
    if len(digits) > PHONE_MAX_DIGITS:
        raise ValueError(f"Phone number cannot exceed {PHONE_MAX_DIGITS} digits.")


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    confirm_password: str = ""
    first_name: str | None = None
    last_name: str | None = None
    # Signup consents; stored only when terms, privacy and age are all given
    terms_accepted: bool = False
    privacy_accepted: bool = False
    age_confirmed: bool = False
    marketing_opt_in: bool = False

    @model_validator(mode="after")
    def passwords_match(self):
        if len(self.password) < PASSWORD_MIN_LENGTH:
            raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
        if self.confirm_password and self.confirm_password != self.password:
            raise ValueError("Passwords do not match")
        return self


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: int
    email: str
    first_name: str | None = None
    last_name: str | None = None
    date_of_birth: date | None = None
    phone: str | None = None
    city: str | None = None
    avatar_url: str | None = None
    tier: SubscriptionTier
    email_verified: bool
    phone_verified: bool
    id_verified: bool
    id_verification_status: IdVerificationStatus
    id_verified_at: datetime | None = None
    id_verification_expires_at: datetime | None = None

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class ProfileUpdate(BaseModel):
    """Only fields present in the request body are changed."""
    first_name: str | None = None
    last_name: str | None = None
    date_of_birth: date | None = None
    phone: str | None = None
    city: str | None = None
    avatar_url: str | None = None

    @field_validator("phone")
    @classmethod
    def phone_valid(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return v
        _validate_phone_digits(v)
        return v.strip()
