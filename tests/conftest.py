"""
Shared fixtures.

Settings are read at import time, so the required environment variables are
set before any application module is imported.
"""

import base64
import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("MASTER_ENCRYPTION_KEY", base64.b64encode(b"k" * 32).decode())
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import schema_registry  # noqa: E402,F401  (registers every model on Base.metadata)
from core.security import create_access_token, hash_password  # noqa: E402
from database import Base, build_engine, get_db  # noqa: E402
from models.user import User  # noqa: E402


@pytest.fixture
def engine():
    eng = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    from main import app

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user(db):
    account = User(username="alice", password_hash=hash_password("Secret123"))
    db.add(account)
    db.commit()
    return account


@pytest.fixture
def auth_headers(user):
    token = create_access_token({"sub": user.username, "user_id": user.id})
    return {"Authorization": f"Bearer {token}"}
