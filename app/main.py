"""Wingman API – FastAPI application."""
# Load .env before any app code that might read config
from dotenv import load_dotenv
from pathlib import Path
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from app.config import get_settings
from app.database import Base, engine
# Import models so Base.metadata has all tables before create_all (schema source of truth)
from app.models import (  # noqa: F401
    User, UserConsent, FriendMatch, GroupMembership, VerificationEvent, IdVerificationReminderLog,
)
from app.routers import auth, consents, requirements, friends, profile, maintenance

settings = get_settings()
log = logging.getLogger("uvicorn.error")
app = FastAPI(title=settings.app_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(consents.router)
app.include_router(requirements.router)
app.include_router(friends.router)
app.include_router(profile.router)
app.include_router(maintenance.router)

_scheduler = None


@app.on_event("startup")
def startup():
    global _scheduler
    if settings.resend_configured:
        log.info("[Resend] Configured from=%s (ID verification reminder emails enabled)", settings.resend_from_email)
    else:
        log.warning("[Resend] Not configured - reminder emails will be skipped; set RESEND_API_KEY and RESEND_FROM_EMAIL")
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        log.warning("Database startup failed (tables skipped). Check DATABASE_URL and network. Error: %s", e)

    # In-process cron, in addition to the HTTP trigger
    if settings.id_verification_cron_enabled:
        from apscheduler.schedulers.background import BackgroundScheduler
        from app.services.id_verification_maintenance import run_id_verification_maintenance_job
        _scheduler = BackgroundScheduler(timezone="UTC")
        _scheduler.add_job(
            run_id_verification_maintenance_job,
            "cron",
            hour=settings.id_verification_cron_hour,
            minute=0,
        )
        _scheduler.start()


@app.on_event("shutdown")
def shutdown():
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)


@app.get("/")
def root():
    return {"app": settings.app_name, "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}
