"""Consent actions. Each accept stamps a UTC time; revocation resets to defaults, the row stays."""
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.consent import UserConsent


def _now() -> datetime:
    return datetime.now(timezone.utc)


def get_or_create_consents(db: Session, user_id: int) -> UserConsent:
    consent = db.query(UserConsent).filter(UserConsent.user_id == user_id).first()
    if consent:
        return consent
    consent = UserConsent(user_id=user_id)
    db.add(consent)
    db.flush()
    return consent


def sync_signup_consents(
    db: Session,
    user_id: int,
    *,
    terms_accepted: bool,
    privacy_accepted: bool,
    age_confirmed: bool,
    marketing_opt_in: bool = False,
) -> UserConsent:
    """Store signup consents. Terms, privacy and age are recorded only when all three were given."""
    consent = get_or_create_consents(db, user_id)
    if terms_accepted and privacy_accepted and age_confirmed:
        settings = get_settings()
        now = _now()
        consent.terms_accepted = True
        consent.terms_accepted_at = now
        consent.terms_version = settings.current_terms_version
        consent.privacy_accepted = True
        consent.privacy_accepted_at = now
        consent.privacy_version = settings.current_privacy_version
        consent.age_confirmed = True
        consent.age_confirmed_at = now
        consent.marketing_opt_in = bool(marketing_opt_in)
    return consent


def accept_terms(db: Session, user_id: int, version: str | None = None) -> UserConsent:
    consent = get_or_create_consents(db, user_id)
    consent.terms_accepted = True
    consent.terms_accepted_at = _now()
    consent.terms_version = version or get_settings().current_terms_version
    return consent


def accept_privacy(db: Session, user_id: int, version: str | None = None) -> UserConsent:
    consent = get_or_create_consents(db, user_id)
    consent.privacy_accepted = True
    consent.privacy_accepted_at = _now()
    consent.privacy_version = version or get_settings().current_privacy_version
    return consent


def confirm_age(db: Session, user_id: int) -> UserConsent:
    consent = get_or_create_consents(db, user_id)
    consent.age_confirmed = True
    consent.age_confirmed_at = _now()
    return consent


def accept_electronic_signature(db: Session, user_id: int) -> UserConsent:
    consent = get_or_create_consents(db, user_id)
    consent.electronic_signature_consent = True
    consent.electronic_signature_consent_at = _now()
    return consent


def set_marketing_opt_in(db: Session, user_id: int, opt_in: bool) -> UserConsent:
    consent = get_or_create_consents(db, user_id)
    consent.marketing_opt_in = bool(opt_in)
    return consent


def accept_companion_agreement(db: Session, user_id: int) -> UserConsent:
    consent = get_or_create_consents(db, user_id)
    consent.companion_agreement_accepted = True
    consent.companion_agreement_accepted_at = _now()
    return consent


def revoke_all_consents(db: Session, user_id: int) -> UserConsent:
    consent = get_or_create_consents(db, user_id)
    consent.terms_accepted = False
    consent.terms_accepted_at = None
    consent.terms_version = None
    consent.privacy_accepted = False
    consent.privacy_accepted_at = None
    consent.privacy_version = None
    consent.age_confirmed = False
    consent.age_confirmed_at = None
    consent.electronic_signature_consent = False
    consent.electronic_signature_consent_at = None
    consent.marketing_opt_in = False
    return consent
