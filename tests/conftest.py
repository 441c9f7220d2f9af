import os
from datetime import date, datetime, timezone
from typing import Callable, Iterator

# Must be set before app.config / app.database are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RESEND_API_KEY"] = ""
os.environ["RESEND_FROM_EMAIL"] = ""
os.environ["ID_VERIFICATION_MAINTENANCE_SECRET"] = ""
os.environ["ID_VERIFICATION_CRON_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import Base, SessionLocal, engine
from app import models  # noqa: F401
from app.models.user import User, SubscriptionTier
from app.services.auth import create_access_token, get_password_hash
from app.services.consents import sync_signup_consents

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_db() -> Iterator[None]:
    get_settings.cache_clear()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    get_settings.cache_clear()


@pytest.fixture()
def db() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client() -> TestClient:
    from app.main import app

    return TestClient(app)


@pytest.fixture()
def make_user(db: Session) -> Callable[..., User]:
    counter = {"n": 0}

    def _make(
        *,
        complete: bool = True,
        consented: bool = True,
        verified: bool = True,
        tier: SubscriptionTier = SubscriptionTier.free,
        **fields,
    ) -> User:
        counter["n"] += 1
        values = {
            "email": f"user{counter['n']}@example.com",
            "hashed_password": get_password_hash("password123"),
        }
        if complete:
            values.update(
                first_name="Ada",
                last_name="Lovelace",
                date_of_birth=date(1990, 5, 17),
                phone="5551234567",
                city="Austin",
                avatar_url="https://cdn.example.com/ada.png",
            )
        if verified:
            values.update(email_verified=True, phone_verified=True)
        values["tier"] = tier
        values.update(fields)
        user = User(**values)
        db.add(user)
        db.flush()
        if consented:
            sync_signup_consents(db, user.id, terms_accepted=True, privacy_accepted=True, age_confirmed=True)
        db.commit()
        db.refresh(user)
        return user

    return _make


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}
