"""Transactional email via Resend, and the ID verification reminder template."""
import logging
from datetime import datetime

import httpx

from app.config import Settings, get_settings

log = logging.getLogger("uvicorn.error")

RESEND_DEFAULT_BASE = "https://api.resend.com"


def send_email(
    to_email: str,
    subject: str,
    html_content: str,
    text_content: str | None = None,
    settings: Settings | None = None,
) -> bool:
    """Send email via Resend. Returns True only on a 2xx response; False when unconfigured or on any failure."""
    if settings is None:
        settings = get_settings()
    if not settings.resend_configured:
        log.warning(
            "[Email] NOT SENT: to=%s subject=%s. RESEND_API_KEY=%s RESEND_FROM_EMAIL=%s",
            to_email,
            subject,
            "set" if settings.resend_api_key else "MISSING",
            "set" if settings.resend_from_email else "MISSING",
        )
        return False
    base = (settings.resend_base_url or RESEND_DEFAULT_BASE).rstrip("/")
    payload = {
        "from": settings.resend_from_email,
        "to": [to_email],
        "subject": subject,
        "text": text_content or "",
        "html": html_content or "",
    }
    try:
        with httpx.Client(timeout=10.0) as client:
            r = client.post(
                f"{base}/emails",
                headers={"Authorization": f"Bearer {settings.resend_api_key}"},
                json=payload,
            )
    except httpx.HTTPError as e:
        log.error("[Resend] Exception: to=%s error=%s: %s", to_email, type(e).__name__, e)
        return False
    if 200 <= r.status_code < 300:
        log.info("[Resend] API success: to=%s status=%s", to_email, r.status_code)
        return True
    log.error("[Resend] API failed: status=%s to=%s body=%s", r.status_code, to_email, r.text[:500])
    return False


def format_expiry_date(expires_at: datetime | None) -> str:
    """'March 4, 2029' style; 'soon' when unknown."""
    if expires_at is None:
        return "soon"
    return f"{expires_at:%B} {expires_at.day}, {expires_at.year}"


def day_label(days: int) -> str:
    return "1 day" if days == 1 else f"{days} days"


def build_id_verification_reminder(
    first_name: str | None,
    threshold_days: int,
    expires_at: datetime | None,
) -> tuple[str, str, str]:
    """Returns (subject, text, html) for an expiry reminder."""
    days = day_label(threshold_days)
    expiry = format_expiry_date(expires_at)
    name = (first_name or "").strip() or "there"

    subject = f"Wingman ID verification expires in {days}"
    text = "\n".join([
        f"Hi {name},",
        "",
        f"Your Wingman ID verification will expire in {days} on {expiry}.",
        "",
        "To keep booking access active, complete your re-verification now in the app:",
        "Profile > Verification > Start ID Verification",
        "",
        "This 3-year reverification policy helps keep the Wingman community safe.",
        "",
        "- Wingman Safety Team",
    ])
    html = f"""
    <p>Hi {name},</p>
    <p>Your Wingman ID verification will expire in <strong>{days}</strong> on <strong>{expiry}</strong>.</p>
    <p>To keep booking access active, complete your re-verification now in the app:</p>
    <p><strong>Profile &gt; Verification &gt; Start ID Verification</strong></p>
    <p>This 3-year reverification policy helps keep the Wingman community safe.</p>
    <p>- Wingman Safety Team</p>
    """
    return subject, text, html


def send_id_verification_reminder(
    to_email: str,
    first_name: str | None,
    threshold_days: int,
    expires_at: datetime | None,
    settings: Settings | None = None,
) -> bool:
    subject, text, html = build_id_verification_reminder(first_name, threshold_days, expires_at)
    return send_email(to_email, subject, html, text_content=text, settings=settings)
