"""Per-user legal consents. Never deleted; revocation resets fields to defaults."""
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey
from sqlalchemy.sql import func
from app.database import Base


class UserConsent(Base):
    __tablename__ = "user_consents"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    terms_accepted = Column(Boolean, default=False, nullable=False)
    terms_accepted_at = Column(DateTime(timezone=True), nullable=True)
    terms_version = Column(String(20), nullable=True)

    privacy_accepted = Column(Boolean, default=False, nullable=False)
    privacy_accepted_at = Column(DateTime(timezone=True), nullable=True)
    privacy_version = Column(String(20), nullable=True)

    age_confirmed = Column(Boolean, default=False, nullable=False)
    age_confirmed_at = Column(DateTime(timezone=True), nullable=True)

    electronic_signature_consent = Column(Boolean, default=False, nullable=False)
    electronic_signature_consent_at = Column(DateTime(timezone=True), nullable=True)

    marketing_opt_in = Column(Boolean, default=False, nullable=False)

    # Wingman service agreement (required to become a companion)
    companion_agreement_accepted = Column(Boolean, default=False, nullable=False)
    companion_agreement_accepted_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
