"""Pytest fixtures shared across the test suite."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gamehub.auth.token import CredentialIssuer, get_credential_issuer
from gamehub.database import Base, build_engine, get_db
from gamehub.main import app
from gamehub.models.user import User
from gamehub.services.account_store import AccountStore
from gamehub.services.identity import IdentityResolver
from gamehub.services.wallets import WalletService


class FakeClock:
    """Settable clock so token expiry can be tested without sleeping."""

    def __init__(self):
        self.now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def issuer():
    return CredentialIssuer(secret="test-secret")


@pytest.fixture
def store(db):
    return AccountStore(db)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def resolver(store, issuer, clock):
    return IdentityResolver(store, issuer, verification_ttl=timedelta(minutes=15), clock=clock)


@pytest.fixture
def wallets(store, clock):
    return WalletService(store, clock=clock)


@pytest.fixture
def make_user(db):
    """Insert a user row directly, bypassing the resolver."""

    def _make_user(**fields):
        now = datetime(2025, 6, 1, tzinfo=timezone.utc)
        user = User(coins=0, created_at=now, updated_at=now, **fields)
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def client(session_factory, issuer):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_credential_issuer] = lambda: issuer
    yield TestClient(app)
    app.dependency_overrides.clear()
