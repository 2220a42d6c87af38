"""
Talent Console - Database Module
Account persistence, provisioning journal and seeding.
"""

from .models import Base, AdminUser, RecruiterProvisioning
from .session import create_db_engine, create_session_factory, init_db, transaction
from .credential_store import (
    CredentialStore,
    SQLAlchemyCredentialStore,
    CredentialStoreError,
    DuplicateAccountError,
)
from .journal import ProvisioningJournal, JournalEntry, JournalError
from .seeds import seed_bootstrap_admin

__all__ = [
    "Base",
    "AdminUser",
    "RecruiterProvisioning",
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "transaction",
    "CredentialStore",
    "SQLAlchemyCredentialStore",
    "CredentialStoreError",
    "DuplicateAccountError",
    "ProvisioningJournal",
    "JournalEntry",
    "JournalError",
    "seed_bootstrap_admin",
]
