"""ID verification reminder dedupe log. A row means that reminder was already sent for that cycle."""
from sqlalchemy import CheckConstraint, Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.sql import func
from app.database import Base

REMINDER_THRESHOLDS = (90, 30, 7, 1)
CHANNEL_EMAIL = "email"
CHANNEL_IN_APP = "in_app"


class IdVerificationReminderLog(Base):
    __tablename__ = "id_verification_reminder_log"
    __table_args__ = (
        CheckConstraint("threshold_days IN (90, 30, 7, 1)", name="id_verification_reminder_threshold_days_check"),
        CheckConstraint("channel IN ('email', 'in_app')", name="id_verification_reminder_channel_check"),
    )

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    # id_verified_at of the verification this reminder belongs to; re-verification opens a new cycle
    cycle_verified_at = Column(DateTime(timezone=True), primary_key=True)
    threshold_days = Column(Integer, primary_key=True)
    channel = Column(String(16), primary_key=True)

    sent_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
