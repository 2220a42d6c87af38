"""
Talent Console - Default Data Seeding
Creates the bootstrap admin account for first-run access.
"""

import logging
from typing import Optional

from talent_console.core.config import Settings, get_settings
from talent_console.core.schemas.auth import AccountDraft, AccountRecord, CredentialScheme, Role
from .credential_store import CredentialStore, DuplicateAccountError

logger = logging.getLogger(__name__)


def seed_bootstrap_admin(store: CredentialStore, settings: Optional[Settings] = None) -> Optional[AccountRecord]:
    """
    Insert the bootstrap admin row if it does not exist yet.

    The row carries the bootstrap password as legacy plaintext material;
    sign-in for it is accepted by the bootstrap tier of the password policy.

    Args:
        store: Credential store to seed
        settings: Settings providing the BOOTSTRAP_ADMIN_* keys

    Returns:
        The created record, or None if it already existed
    """
    settings = settings or get_settings()
    if store.find_one(email=settings.BOOTSTRAP_ADMIN_EMAIL) is not None:
        logger.info(f"Bootstrap admin {settings.BOOTSTRAP_ADMIN_EMAIL} already present")
        return None

    draft = AccountDraft(
        email=settings.BOOTSTRAP_ADMIN_EMAIL,
        password_material=settings.BOOTSTRAP_ADMIN_PASSWORD,
        password_scheme=CredentialScheme.LEGACY_PLAINTEXT,
        role=Role.ADMIN,
        name=settings.BOOTSTRAP_ADMIN_NAME,
    )
    try:
        record = store.insert(draft)
    except DuplicateAccountError:
        # Seeded concurrently by another process
        return None

    logger.info(f"Bootstrap admin created: {record.email} (ID: {record.id})")
    return record
