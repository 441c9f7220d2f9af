"""
Send one ID verification reminder email via Resend to check the email setup.
Usage: python scripts/send_test_reminder_email.py <to_email> [threshold_days]
Example: python scripts/send_test_reminder_email.py you@example.com 30
"""
import os
import sys
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.config import get_settings
from app.models.reminder_log import REMINDER_THRESHOLDS
from app.services.notifications import send_id_verification_reminder


def main():
    to_email = (sys.argv[1] if len(sys.argv) > 1 else "").strip()
    if not to_email:
        print("Usage: python scripts/send_test_reminder_email.py <to_email> [threshold_days]")
        sys.exit(1)
    days = int(sys.argv[2]) if len(sys.argv) > 2 else 30
    if days not in REMINDER_THRESHOLDS:
        print(f"threshold_days must be one of {REMINDER_THRESHOLDS}")
        sys.exit(1)

    settings = get_settings()
    if not settings.resend_configured:
        print("Resend is not configured. Set RESEND_API_KEY and RESEND_FROM_EMAIL in .env")
        print(f"  RESEND_API_KEY: {'(set)' if settings.resend_api_key else '(missing)'}")
        print(f"  RESEND_FROM_EMAIL: {settings.resend_from_email or '(missing)'}")
        sys.exit(1)

    print(f"Sending {days}-day reminder to: {to_email}")
    print(f"From: {settings.resend_from_email}")
    expires_at = datetime.now(timezone.utc) + timedelta(days=days)
    if send_id_verification_reminder(to_email, "Test", days, expires_at, settings=settings):
        print("Success: reminder sent. Check the inbox (and spam) for", to_email)
    else:
        print("Failed: Resend returned an error (see log above).")
        print("  - RESEND_FROM_EMAIL must be on a domain verified in Resend.")
        sys.exit(1)


if __name__ == "__main__":
    main()
