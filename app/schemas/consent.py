"""Consent schemas."""
from datetime import datetime
from pydantic import BaseModel


class ConsentResponse(BaseModel):
    terms_accepted: bool
    terms_accepted_at: datetime | None = None
    terms_version: str | None = None
    privacy_accepted: bool
    privacy_accepted_at: datetime | None = None
    privacy_version: str | None = None
    age_confirmed: bool
    age_confirmed_at: datetime | None = None
    electronic_signature_consent: bool
    electronic_signature_consent_at: datetime | None = None
    marketing_opt_in: bool
    companion_agreement_accepted: bool
    companion_agreement_accepted_at: datetime | None = None

    class Config:
        from_attributes = True


class AcceptDocumentRequest(BaseModel):
    version: str | None = None  # defaults to the currently deployed version


class MarketingOptInRequest(BaseModel):
    opt_in: bool
