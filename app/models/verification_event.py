"""Append-only verification audit trail. No updates or deletes."""
from sqlalchemy import JSON, Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from app.database import Base


class VerificationEvent(Base):
    __tablename__ = "verification_events"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # e.g. id_verification_expired | id_verification_reminder_sent | id_verification_verified
    event_type = Column(String(64), nullable=False, index=True)
    # success | failed | pending
    event_status = Column(String(16), nullable=False, default="success")

    event_data = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)

    # UTC only - server_default
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
