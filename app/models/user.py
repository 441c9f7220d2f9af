"""User account, profile snapshot and verification flags."""
from sqlalchemy import Column, Integer, String, Enum as SQLEnum, Date, DateTime, Boolean
from sqlalchemy.sql import func
from app.database import Base
import enum


class SubscriptionTier(str, enum.Enum):
    free = "free"
    plus = "plus"
    premium = "premium"
    elite = "elite"


class IdVerificationStatus(str, enum.Enum):
    unverified = "unverified"
    pending = "pending"
    verified = "verified"
    expired = "expired"
    failed_name_mismatch = "failed_name_mismatch"
    failed = "failed"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    phone = Column(String(50), nullable=True)
    city = Column(String(100), nullable=True)
    avatar_url = Column(String(1000), nullable=True)

    tier = Column(SQLEnum(SubscriptionTier), nullable=False, default=SubscriptionTier.free)

    # Set by the email / phone verification flows
    email_verified = Column(Boolean, default=False, nullable=False)
    phone_verified = Column(Boolean, default=False, nullable=False)

    # ID verification lifecycle: verified_at pins the reminder cycle, expires_at is verified_at + validity window
    id_verified = Column(Boolean, default=False, nullable=False)
    id_verified_at = Column(DateTime(timezone=True), nullable=True)
    id_verification_status = Column(
        SQLEnum(IdVerificationStatus),
        nullable=False,
        default=IdVerificationStatus.unverified,
        index=True,
    )
    id_verification_expires_at = Column(DateTime(timezone=True), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
