"""Shared fixtures: an in-memory profile store and a fake identity provider."""

import os

os.environ.setdefault("SUPABASE_URL", "https://crm.example.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from account_admin.api.dependencies import get_identity_provider
from account_admin.app import create_app
from account_admin.core import Settings, get_session, get_settings
from account_admin.models import Location, UserProfile
from account_admin.services.identity import Account, IdentityProviderError

SEEDED_AT = datetime(2024, 1, 1, 9, 30, tzinfo=timezone.utc)

TOKENS = {
    "admin-token": "admin-1",
    "second-admin-token": "admin-2",
    "manager-token": "manager-1",
    "stranger-token": "stranger-1",
}


class FakeIdentityProvider:
    """In-memory stand-in for the auth server that records every call."""

    def __init__(self):
        self.calls = []
        self.accounts = {}
        self.tokens = dict(TOKENS)
        self.fail = {}
        self._next_id = 0

    @property
    def mutations(self):
        return [call for call in self.calls if call[0] != "get_user"]

    def _maybe_fail(self, name):
        message = self.fail.get(name)
        if message:
            raise IdentityProviderError(message, 400)

    async def get_user(self, access_token):
        self.calls.append(("get_user", access_token))
        user_id = self.tokens.get(access_token)
        if user_id is None:
            raise IdentityProviderError("invalid JWT", 401)
        return Account(id=user_id, email=f"{user_id}@example.com", email_confirmed=True)

    async def create_user(self, email, password, *, email_confirm, user_metadata):
        self.calls.append(
            (
                "create_user",
                {
                    "email": email,
                    "password": password,
                    "email_confirm": email_confirm,
                    "user_metadata": dict(user_metadata),
                },
            )
        )
        self._maybe_fail("create_user")
        self._next_id += 1
        account = Account(
            id=f"new-{self._next_id}",
            email=email,
            email_confirmed=email_confirm,
            user_metadata=dict(user_metadata),
        )
        self.accounts[account.id] = account
        return account

    async def update_user_metadata(self, user_id, user_metadata):
        self.calls.append(("update_user_metadata", user_id, dict(user_metadata)))
        self._maybe_fail("update_user_metadata")
        account = self.accounts.setdefault(user_id, Account(id=user_id))
        account.user_metadata.update(user_metadata)
        return account

    async def delete_user(self, user_id):
        self.calls.append(("delete_user", user_id))
        self._maybe_fail("delete_user")
        self.accounts.pop(user_id, None)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


def _profile(user_id, role, **extra):
    values = {
        "id": user_id,
        "email": f"{user_id}@example.com",
        "full_name": user_id.replace("-", " ").title(),
        "role": role,
        "is_active": True,
        "created_at": SEEDED_AT,
        "updated_at": SEEDED_AT,
    }
    values.update(extra)
    return UserProfile(**values)


@pytest.fixture
def seed(engine):
    with Session(engine) as session:
        session.add(Location(id="loc-1", name="Downtown"))
        session.add(Location(id="loc-2", name="Uptown"))
        session.add(_profile("admin-1", "admin"))
        session.add(_profile("admin-2", "admin"))
        session.add(_profile("manager-1", "manager", outlet_id="loc-1", outlet_name="Downtown"))
        session.add(
            _profile(
                "u1",
                "manager",
                full_name="Usha Iyer",
                phone="+91 98450 11111",
                outlet_id="loc-2",
                outlet_name="Uptown",
            )
        )
        session.add(_profile("retired-1", "accountant", is_active=False))
        session.commit()


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def settings():
    return Settings(
        supabase_url="https://crm.example.supabase.co",
        service_role_key="service-role-key",
        anon_key="anon-key",
    )


@pytest.fixture
def app(engine, identity, settings):
    app = create_app()

    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_identity_provider] = lambda: identity
    return app


@pytest.fixture
def client(app, seed):
    return TestClient(app)


def auth_headers(token="admin-token"):
    return {"Authorization": f"Bearer {token}"}


def load_profile(engine, user_id):
    with Session(engine) as session:
        return session.get(UserProfile, user_id)


def count_profiles(engine):
    with Session(engine) as session:
        return len(session.exec(select(UserProfile)).all())


def as_utc(value):
    """Attach UTC to timestamps the store hands back without an offset."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
