"""Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database, an in-memory session
slot and a fake identity provider that records the calls it receives.
"""
from typing import Dict, List
from uuid import uuid4

import pytest

from talent_console.core.config import Settings
from talent_console.core.security.auth import PasswordVerificationPolicy
from talent_console.core.services.account_service import AccountLifecycleManager
from talent_console.core.services.auth_service import AuthenticationService
from talent_console.core.session import InMemorySessionStore
from talent_console.database.credential_store import SQLAlchemyCredentialStore
from talent_console.database.journal import ProvisioningJournal
from talent_console.database.session import create_db_engine, create_session_factory, init_db
from talent_console.identity.base import IdentityProviderError


class FakeIdentityProvider:
    """In-memory identity provider with switchable failures."""

    def __init__(self):
        self.identities: Dict[str, str] = {}
        self.create_calls: List[str] = []
        self.delete_calls: List[str] = []
        self.recovery_calls: List[str] = []
        self.fail_create = False
        self.fail_delete = False
        self.fail_recovery = False

    def create_identity(self, email: str, password: str) -> str:
        self.create_calls.append(email)
        if self.fail_create:
            raise IdentityProviderError("provider unavailable")
        if email in self.identities.values():
            raise IdentityProviderError("A user with this email address has already been registered")
        identity_id = str(uuid4())
        self.identities[identity_id] = email
        return identity_id

    def delete_identity(self, identity_id: str) -> None:
        self.delete_calls.append(identity_id)
        if self.fail_delete:
            raise IdentityProviderError("provider unavailable")
        self.identities.pop(identity_id, None)

    def generate_recovery_link(self, email: str) -> None:
        self.recovery_calls.append(email)
        if self.fail_recovery:
            raise IdentityProviderError("provider unavailable")


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        DATABASE_URL="sqlite:///:memory:",
        BCRYPT_ROUNDS=4,
        BOOTSTRAP_ADMIN_EMAIL="admin@example.com",
        BOOTSTRAP_ADMIN_PASSWORD="admin123",
        SESSION_FILE_PATH=None,
        SESSION_SIGNING_KEY=None,
    )


@pytest.fixture
def engine(settings):
    engine = create_db_engine(settings)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def store(session_factory):
    return SQLAlchemyCredentialStore(session_factory)


@pytest.fixture
def policy(settings):
    return PasswordVerificationPolicy(settings)


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def journal(session_factory):
    return ProvisioningJournal(session_factory)


@pytest.fixture
def auth_service(store, session_store, policy, settings):
    return AuthenticationService(store, session_store=session_store, policy=policy, settings=settings)


@pytest.fixture
def account_manager(store, identity_provider, session_store, policy, journal, settings):
    return AccountLifecycleManager(
        store,
        identity_provider,
        session_store=session_store,
        policy=policy,
        journal=journal,
        settings=settings,
    )
