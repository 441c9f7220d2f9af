"""Consent record and accept / revoke actions for the current user."""
from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.consent import ConsentResponse, AcceptDocumentRequest, MarketingOptInRequest
from app.services import consents as consent_service
from app.dependencies import get_current_user

router = APIRouter(prefix="/consents", tags=["consents"])


def _respond(db: Session, consent) -> ConsentResponse:
    db.commit()
    db.refresh(consent)
    return ConsentResponse.model_validate(consent)


@router.get("", response_model=ConsentResponse)
def get_consents(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _respond(db, consent_service.get_or_create_consents(db, current_user.id))


@router.post("/terms", response_model=ConsentResponse)
def accept_terms(
    data: AcceptDocumentRequest | None = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    version = data.version if data else None
    return _respond(db, consent_service.accept_terms(db, current_user.id, version))


@router.post("/privacy", response_model=ConsentResponse)
def accept_privacy(
    data: AcceptDocumentRequest | None = Body(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    version = data.version if data else None
    return _respond(db, consent_service.accept_privacy(db, current_user.id, version))


@router.post("/age", response_model=ConsentResponse)
def confirm_age(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _respond(db, consent_service.confirm_age(db, current_user.id))


@router.post("/electronic-signature", response_model=ConsentResponse)
def accept_electronic_signature(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _respond(db, consent_service.accept_electronic_signature(db, current_user.id))


@router.put("/marketing", response_model=ConsentResponse)
def set_marketing_opt_in(
    data: MarketingOptInRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _respond(db, consent_service.set_marketing_opt_in(db, current_user.id, data.opt_in))


@router.post("/companion-agreement", response_model=ConsentResponse)
def accept_companion_agreement(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _respond(db, consent_service.accept_companion_agreement(db, current_user.id))


@router.delete("", response_model=ConsentResponse)
def revoke_all_consents(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return _respond(db, consent_service.revoke_all_consents(db, current_user.id))
