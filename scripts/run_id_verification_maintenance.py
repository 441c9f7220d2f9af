"""
Run the ID verification maintenance sweep once, in-process (no HTTP server).
Run: python scripts/run_id_verification_maintenance.py [--dry-run-email]
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.database import SessionLocal
from app.services.id_verification_maintenance import MaintenanceQueryError, run_id_verification_maintenance


def _print_only(to_email, first_name, threshold_days, expires_at):
    print(f"  [dry-run] would email {to_email}: {threshold_days} day(s) before {expires_at}")
    return False


def main():
    parser = argparse.ArgumentParser(description="Expire stale ID verifications and send expiry reminders.")
    parser.add_argument("--dry-run-email", action="store_true", help="Print reminder emails instead of sending them")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        result = run_id_verification_maintenance(
            db,
            send_reminder=_print_only if args.dry_run_email else None,
        )
    except MaintenanceQueryError as e:
        print(f"FAILED ({e.phase}): {e.cause}")
        sys.exit(1)
    finally:
        db.close()
    print(
        f"expired={result.expired_count} in_app={result.in_app_reminder_count} "
        f"email_sent={result.email_sent_count} email_failed={result.email_failed_count} "
        f"resend_configured={result.resend_configured}"
    )


if __name__ == "__main__":
    main()
