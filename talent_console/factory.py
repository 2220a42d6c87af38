"""
Talent Console - Factory
Wires the credential store, identity provider, session store and services.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from talent_console.core.config import Settings, get_settings
from talent_console.core.security.auth import PasswordVerificationPolicy
from talent_console.core.security.guards import RouteGuard
from talent_console.core.services.account_service import AccountLifecycleManager
from talent_console.core.services.auth_service import AuthenticationService
from talent_console.core.session import SessionStore, build_session_store
from talent_console.database.credential_store import SQLAlchemyCredentialStore
from talent_console.database.journal import ProvisioningJournal
from talent_console.database.seeds import seed_bootstrap_admin
from talent_console.database.session import create_db_engine, create_session_factory, init_db
from talent_console.identity.base import IdentityProvider
from talent_console.identity.supabase_provider import SupabaseIdentityProvider

logger = logging.getLogger(__name__)


@dataclass
class TalentConsole:
    """The wired core handed to the presentation layer."""

    auth: AuthenticationService
    accounts: AccountLifecycleManager
    guard: RouteGuard
    store: SQLAlchemyCredentialStore
    session_store: SessionStore


def create_console(
    settings: Optional[Settings] = None,
    identity_provider: Optional[IdentityProvider] = None,
    session_store: Optional[SessionStore] = None,
    create_db: bool = False,
    seed: bool = False,
) -> TalentConsole:
    """
    Build the authentication and account-lifecycle core.

    Args:
        settings: Settings to use (defaults to cached settings)
        identity_provider: Identity provider (defaults to Supabase from settings)
        session_store: Session store (defaults to one built from settings)
        create_db: Create missing tables
        seed: Insert the bootstrap admin if missing

    Returns:
        TalentConsole with both services and the route guard
    """
    settings = settings or get_settings()

    engine = create_db_engine(settings)
    if create_db:
        init_db(engine)
    session_factory = create_session_factory(engine)

    store = SQLAlchemyCredentialStore(session_factory)
    if seed:
        seed_bootstrap_admin(store, settings)

    session_store = session_store if session_store is not None else build_session_store(settings)
    identity_provider = identity_provider or SupabaseIdentityProvider.from_settings(settings)
    policy = PasswordVerificationPolicy(settings)

    auth = AuthenticationService(store, session_store=session_store, policy=policy, settings=settings)
    accounts = AccountLifecycleManager(
        store,
        identity_provider,
        session_store=session_store,
        policy=policy,
        journal=ProvisioningJournal(session_factory),
        settings=settings,
    )

    logger.info(f"{settings.APP_NAME} core initialized ({settings.ENVIRONMENT})")
    return TalentConsole(
        auth=auth,
        accounts=accounts,
        guard=RouteGuard(auth),
        store=store,
        session_store=session_store,
    )
