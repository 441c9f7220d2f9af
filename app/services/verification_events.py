"""Append-only verification event log. Never update or delete - immutable audit trail.

The verification_events table may be absent on databases that predate it; writes
then become no-ops instead of failing the caller.
"""
from __future__ import annotations

import enum
import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.verification_event import VerificationEvent

log = logging.getLogger("uvicorn.error")

EVENT_ID_VERIFIED = "id_verification_verified"
EVENT_ID_EXPIRED = "id_verification_expired"
EVENT_ID_REMINDER_SENT = "id_verification_reminder_sent"
EVENT_ID_INVALIDATED_NAME_CHANGE = "id_verification_invalidated_name_change"

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"

# Column limits (match model)
_EVENT_TYPE_LEN = 64
_EVENT_STATUS_LEN = 16

# Postgres undefined_table, PostgREST schema-cache miss
_MISSING_RELATION_CODES = {"42P01", "PGRST205"}


def is_missing_relation_error(exc: BaseException) -> bool:
    """True if the DB error says the table does not exist (schema not migrated yet)."""
    orig = getattr(exc, "orig", exc)
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code and str(code) in _MISSING_RELATION_CODES:
        return True
    text = str(orig).lower()
    return "no such table" in text or ("relation" in text and "does not exist" in text)


def _sanitize_value(v: Any) -> Any:
    """Convert to JSON-serializable value so event_data never raises on INSERT."""
    if v is None:
        return None
    if isinstance(v, (str, int, float, bool)):
        return v
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    if isinstance(v, enum.Enum):
        return getattr(v, "value", str(v))
    if isinstance(v, dict):
        return {str(k): _sanitize_value(x) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [_sanitize_value(x) for x in v]
    return str(v)


def _sanitize_data(data: dict[str, Any] | None) -> dict[str, Any] | None:
    if data is None:
        return None
    return {str(k): _sanitize_value(v) for k, v in data.items()}


def record_events(
    db: Session,
    events: list[tuple[int, str, dict[str, Any] | None]],
    *,
    event_status: str = STATUS_SUCCESS,
) -> int:
    """Append (user_id, event_type, event_data) rows inside a savepoint.

    Returns the number written. A missing table is skipped silently; any other
    database error is logged and swallowed so auditing never aborts the caller.
    Commit remains with the caller.
    """
    if not events:
        return 0
    status = (event_status or STATUS_SUCCESS)[:_EVENT_STATUS_LEN]
    try:
        with db.begin_nested():
            for user_id, event_type, data in events:
                db.add(
                    VerificationEvent(
                        user_id=user_id,
                        event_type=(event_type or "")[:_EVENT_TYPE_LEN],
                        event_status=status,
                        event_data=_sanitize_data(data),
                    )
                )
    except SQLAlchemyError as e:
        if not is_missing_relation_error(e):
            log.error("Failed to write verification events: %s", e)
        return 0
    return len(events)


def record_event(
    db: Session,
    user_id: int,
    event_type: str,
    data: dict[str, Any] | None = None,
    *,
    event_status: str = STATUS_SUCCESS,
) -> bool:
    return record_events(db, [(user_id, event_type, data)], event_status=event_status) == 1
