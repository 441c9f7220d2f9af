"""Maintenance functions triggered by an external scheduler (cron) over HTTP."""
import logging
import secrets

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.schemas.maintenance import MaintenanceResponse
from app.services.id_verification_maintenance import MaintenanceQueryError, run_id_verification_maintenance

router = APIRouter(prefix="/functions", tags=["maintenance"])
log = logging.getLogger("uvicorn.error")

_PHASE_ERRORS = {
    "expire": "Failed to process expirations",
    "reminders": "Failed to process reminders",
}


@router.post("/id-verification-maintenance", response_model=MaintenanceResponse)
def id_verification_maintenance(
    x_maintenance_secret: str | None = Header(None),
    db: Session = Depends(get_db),
):
    """Expire stale ID verifications and send 90/30/7/1-day expiry reminders.

    When ID_VERIFICATION_MAINTENANCE_SECRET is set, the x-maintenance-secret header must match it.
    """
    settings = get_settings()
    # Settings are re-read per request; the engine itself refuses an empty URL at import
    if not (settings.database_url or "").strip():
        raise HTTPException(status_code=500, detail="Server configuration error: missing database settings")

    expected = settings.id_verification_maintenance_secret
    if expected:
        provided = (x_maintenance_secret or "").strip()
        if not provided or not secrets.compare_digest(provided, expected):
            raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        result = run_id_verification_maintenance(db, settings=settings)
    except MaintenanceQueryError as e:
        log.error("id-verification-maintenance %s query failed: %s", e.phase, e.cause)
        raise HTTPException(status_code=500, detail=_PHASE_ERRORS.get(e.phase, "Internal server error"))

    return MaintenanceResponse(
        success=True,
        expired_count=result.expired_count,
        in_app_reminder_count=result.in_app_reminder_count,
        email_sent_count=result.email_sent_count,
        email_failed_count=result.email_failed_count,
        resend_configured=result.resend_configured,
    )
