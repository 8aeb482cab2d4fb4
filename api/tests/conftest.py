import os
import uuid
from datetime import date, datetime, timedelta, timezone

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-prod")

import jwt
import pytest
from sqlalchemy import insert

from matchline import models
from matchline.auth.security import ALGORITHM
from matchline.config import JWT_SECRET
from matchline.database import Base, SessionLocal, engine
from matchline.services.rate_limit import limiter

TODAY = date(2026, 3, 2)


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    limiter.reset()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    with SessionLocal() as session:
        yield session


def make_profile(db, *, status: str = "approved", tier: str = "free", user_id: str | None = None, **extra) -> str:
    uid = user_id or str(uuid.uuid4())
    db.execute(
        insert(models.UserProfile.__table__).values(
            id=uid,
            verification_status=status,
            subscription_tier=tier,
            badges=[],
            is_accepting_chats=True,
            **extra,
        )
    )
    db.commit()
    return uid


def make_match(db, user_id: str, matched_user_id: str, batch_date: date = TODAY) -> str:
    match_id = str(uuid.uuid4())
    db.execute(
        insert(models.UserMatch.__table__).values(
            id=match_id,
            user_id=user_id,
            matched_user_id=matched_user_id,
            batch_date=batch_date,
            match_score=50,
        )
    )
    db.commit()
    return match_id


def create_access_token(user_id: str, ttl_minutes: int = 15) -> str:
    """Mint a token the way the identity provider signs them."""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl_minutes)).timestamp()),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=ALGORITHM)


def auth_headers(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def client(monkeypatch):
    pytest.importorskip("httpx")
    from fastapi.testclient import TestClient

    import matchline.main as m
    from matchline.routes import match as match_routes

    monkeypatch.setattr(match_routes, "today_for_matching", lambda: TODAY)
    with TestClient(m.app) as c:
        yield c
    m.app.dependency_overrides = {}
