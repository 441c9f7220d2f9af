"""ID verification lifecycle sweep: expire stale verifications, then send expiry reminders.

Runs once per trigger (HTTP or cron). Rows are processed sequentially. Reminders are
deduplicated per (user, verification cycle, threshold, channel) through the
id_verification_reminder_log table, so reruns on the same day send nothing new.
Email keeps send-then-claim order: a failed send leaves no log row and is retried
next run; two overlapping runs can still both send before either claims.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import partial
from typing import Callable

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.database import SessionLocal
from app.models.reminder_log import (
    IdVerificationReminderLog,
    REMINDER_THRESHOLDS,
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
)
from app.models.user import User, IdVerificationStatus
from app.services.identity import as_utc
from app.services.notifications import send_id_verification_reminder
from app.services.verification_events import (
    record_event,
    record_events,
    is_missing_relation_error,
    EVENT_ID_EXPIRED,
    EVENT_ID_REMINDER_SENT,
)

log = logging.getLogger("uvicorn.error")

REMINDER_WINDOW_DAYS = 90

# (to_email, first_name, threshold_days, expires_at) -> sent
ReminderSender = Callable[[str, str | None, int, datetime | None], bool]


class MaintenanceQueryError(Exception):
    """A bulk query of the sweep failed; nothing further was processed."""

    def __init__(self, phase: str, cause: Exception):
        super().__init__(f"{phase}: {cause}")
        self.phase = phase
        self.cause = cause


@dataclass(frozen=True)
class ReminderKey:
    """Idempotency key for one reminder: at most one log row may exist per key."""
    user_id: int
    cycle_verified_at: datetime
    threshold_days: int
    channel: str


@dataclass
class MaintenanceResult:
    expired_count: int = 0
    in_app_reminder_count: int = 0
    email_sent_count: int = 0
    email_failed_count: int = 0
    resend_configured: bool = False


def days_until_expiry(expires_at: datetime, now: datetime) -> int:
    """Whole UTC calendar days between now and expiry (midnight to midnight, not elapsed hours)."""
    return (as_utc(expires_at).date() - as_utc(now).date()).days


def is_claimed(db: Session, key: ReminderKey) -> bool:
    """Dedupe check. On a query error the reminder is treated as not yet sent."""
    try:
        with db.begin_nested():
            row = (
                db.query(IdVerificationReminderLog.user_id)
                .filter(
                    IdVerificationReminderLog.user_id == key.user_id,
                    IdVerificationReminderLog.cycle_verified_at == key.cycle_verified_at,
                    IdVerificationReminderLog.threshold_days == key.threshold_days,
                    IdVerificationReminderLog.channel == key.channel,
                )
                .first()
            )
    except SQLAlchemyError as e:
        if not is_missing_relation_error(e):
            log.error("Failed to check reminder dedupe state for user %s: %s", key.user_id, e)
        return False
    return row is not None


def try_claim(db: Session, key: ReminderKey, now: datetime) -> bool:
    """Atomically insert the log row if absent. True only if this call created it."""
    values = {
        "user_id": key.user_id,
        "cycle_verified_at": key.cycle_verified_at,
        "threshold_days": key.threshold_days,
        "channel": key.channel,
        "sent_at": now,
        "created_at": now,
    }
    dialect = db.get_bind().dialect.name
    try:
        with db.begin_nested():
            if dialect in ("postgresql", "sqlite"):
                insert = pg_insert if dialect == "postgresql" else sqlite_insert
                stmt = insert(IdVerificationReminderLog).values(**values).on_conflict_do_nothing()
                return db.execute(stmt).rowcount == 1
            db.add(IdVerificationReminderLog(**values))
            db.flush()
            return True
    except IntegrityError:
        return False
    except SQLAlchemyError as e:
        if not is_missing_relation_error(e):
            log.error("Failed to persist reminder log for user %s: %s", key.user_id, e)
        return False


def expire_stale_verifications(db: Session, now: datetime) -> int:
    """Phase A: verified rows whose expiry has passed become expired. Rerunning is a no-op."""
    try:
        stale = (
            db.query(User.id, User.id_verification_expires_at)
            .filter(
                User.id_verified.is_(True),
                User.id_verification_status == IdVerificationStatus.verified,
                User.id_verification_expires_at.isnot(None),
                User.id_verification_expires_at <= now,
            )
            .all()
        )
        if not stale:
            return 0
        ids = [row.id for row in stale]
        db.query(User).filter(
            User.id.in_(ids),
            User.id_verification_status == IdVerificationStatus.verified,
        ).update(
            {
                User.id_verified: False,
                User.id_verification_status: IdVerificationStatus.expired,
                User.updated_at: now,
            },
            synchronize_session=False,
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise MaintenanceQueryError("expire", e)

    record_events(
        db,
        [
            (
                row.id,
                EVENT_ID_EXPIRED,
                {"expired_at": now, "previous_expiration_timestamp": as_utc(row.id_verification_expires_at)},
            )
            for row in stale
        ],
    )
    db.commit()
    return len(stale)


def get_reminder_candidates(db: Session, now: datetime) -> list[User]:
    window_end = now + timedelta(days=REMINDER_WINDOW_DAYS)
    try:
        return (
            db.query(User)
            .filter(
                User.id_verified.is_(True),
                User.id_verification_status == IdVerificationStatus.verified,
                User.id_verification_expires_at.isnot(None),
                User.id_verification_expires_at > now,
                User.id_verification_expires_at <= window_end,
            )
            .all()
        )
    except SQLAlchemyError as e:
        db.rollback()
        raise MaintenanceQueryError("reminders", e)


def send_expiry_reminders(
    db: Session,
    now: datetime,
    settings: Settings,
    send_reminder: ReminderSender,
    result: MaintenanceResult,
) -> None:
    """Phase B: reminders at exactly 90/30/7/1 whole days before expiry, in-app always, email when configured."""
    for user in get_reminder_candidates(db, now):
        expires_at = as_utc(user.id_verification_expires_at)
        if expires_at is None:
            continue
        threshold = days_until_expiry(expires_at, now)
        if threshold not in REMINDER_THRESHOLDS:
            continue
        cycle = as_utc(user.id_verified_at) or now

        # The log row itself is the in-app reminder
        if try_claim(db, ReminderKey(user.id, cycle, threshold, CHANNEL_IN_APP), now):
            result.in_app_reminder_count += 1
        db.commit()

        if not settings.resend_configured:
            continue
        recipient = (user.email or "").strip()
        if not recipient:
            continue
        email_key = ReminderKey(user.id, cycle, threshold, CHANNEL_EMAIL)
        if is_claimed(db, email_key):
            continue

        if send_reminder(recipient, user.first_name, threshold, expires_at):
            # A concurrent run may have claimed it meanwhile; the email is sent either way
            try_claim(db, email_key, now)
            result.email_sent_count += 1
            record_event(
                db,
                user.id,
                EVENT_ID_REMINDER_SENT,
                {"channel": CHANNEL_EMAIL, "threshold_days": threshold, "expires_at": expires_at},
            )
            db.commit()
        else:
            result.email_failed_count += 1


def run_id_verification_maintenance(
    db: Session,
    *,
    now: datetime | None = None,
    settings: Settings | None = None,
    send_reminder: ReminderSender | None = None,
) -> MaintenanceResult:
    """Expiry sweep then reminder sweep. Raises MaintenanceQueryError only if a bulk query fails."""
    now = as_utc(now) if now else datetime.now(timezone.utc)
    settings = settings or get_settings()
    if send_reminder is None:
        send_reminder = partial(send_id_verification_reminder, settings=settings)

    result = MaintenanceResult(resend_configured=settings.resend_configured)
    result.expired_count = expire_stale_verifications(db, now)
    send_expiry_reminders(db, now, settings, send_reminder, result)
    log.info(
        "ID verification maintenance: expired=%d in_app=%d email_sent=%d email_failed=%d",
        result.expired_count,
        result.in_app_reminder_count,
        result.email_sent_count,
        result.email_failed_count,
    )
    return result


def run_id_verification_maintenance_job() -> None:
    """Scheduler entry point: one sweep in its own session."""
    db = SessionLocal()
    try:
        run_id_verification_maintenance(db)
    except MaintenanceQueryError:
        log.exception("ID verification maintenance failed")
    finally:
        db.close()
