"""
Talent Console - Account Lifecycle Service
Recruiter provisioning, listing, deactivation and password-reset issuance.
"""

import logging
from datetime import timedelta
from typing import List, Optional

from talent_console.core.config import Settings, get_settings
from talent_console.core.schemas.auth import (
    Account,
    AccountDraft,
    AccountRecord,
    CreateRecruiterRequest,
    CredentialScheme,
    ProvisioningErrorCode,
    ProvisioningPhase,
    ProvisioningResult,
    RECOVERABLE_PHASES,
    Role,
)
from talent_console.core.security.auth import PasswordVerificationPolicy, SecurityAuditLogger
from talent_console.core.session import SessionStore, get_session_store
from talent_console.database.credential_store import CredentialStore, DuplicateAccountError
from talent_console.database.journal import JournalError, ProvisioningJournal
from talent_console.identity.base import IdentityProvider, IdentityProviderError

logger = logging.getLogger(__name__)

PROVISIONING_MESSAGES = {
    ProvisioningErrorCode.ALREADY_EXISTS: "A recruiter with this email already exists",
    ProvisioningErrorCode.IDENTITY_PROVIDER_FAILED: "Could not create the login identity",
    ProvisioningErrorCode.PROFILE_STORE_FAILED: "Could not create the recruiter profile",
    ProvisioningErrorCode.JOURNAL_FAILED: "Could not record the provisioning request",
}


class AccountServiceError(Exception):
    """Base account lifecycle error."""
    pass


class PartialCreationError(AccountServiceError):
    """The identity was created but the profile insert failed."""

    def __init__(self, identity_id: str, cause: Exception):
        self.identity_id = identity_id
        self.cause = cause
        super().__init__(f"Profile creation failed after identity {identity_id} was created: {cause}")


class AccountLifecycleManager:
    """
    Recruiter account lifecycle for admin operators.

    Callers are expected to be signed in as admin; the route guard enforces
    that, this service does not re-check it.

    Recruiter creation spans two stores with no shared transaction:

    1. create the login identity in the identity provider;
    2. insert the profile row in the credential store under the identity id.

    When step 2 fails, the identity from step 1 is deleted once as a
    compensating action. With a :class:`ProvisioningJournal` every attempt is
    logged durably so attempts interrupted between the two steps can be
    resolved later by :meth:`recover_incomplete`.
    """

    def __init__(
        self,
        store: CredentialStore,
        identity_provider: IdentityProvider,
        session_store: Optional[SessionStore] = None,
        policy: Optional[PasswordVerificationPolicy] = None,
        journal: Optional[ProvisioningJournal] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store
        self.identity_provider = identity_provider
        self.session_store = session_store if session_store is not None else get_session_store()
        self.policy = policy or PasswordVerificationPolicy(self.settings)
        self.journal = journal
        self.audit_logger = SecurityAuditLogger()

    async def create_recruiter(self, email: str, password: str, name: str) -> bool:
        """
        Create a recruiter account in both stores.

        Args:
            email: Recruiter email
            password: Initial password
            name: Display name

        Returns:
            True only if both the identity and the profile were created
        """
        try:
            request = CreateRecruiterRequest(email=email, password=password, name=name)
            result = await self.provision_recruiter(request)
        except Exception as e:
            logger.error(f"Error creating recruiter {email}: {e}")
            return False
        return result.success

    async def provision_recruiter(self, request: CreateRecruiterRequest) -> ProvisioningResult:
        """
        Create a recruiter account and report why it failed, if it did.

        Args:
            request: Recruiter email, password and name

        Returns:
            ProvisioningResult with the new account id or an error code
        """
        logger.info(f"Creating recruiter account: {request.email}")

        entry_id = None
        if self.journal is not None:
            try:
                entry_id = self.journal.start(request.email)
            except JournalError as e:
                logger.error(f"Error recording provisioning intent: {e}")
                return self._failure(ProvisioningErrorCode.JOURNAL_FAILED)

        # Phase 1: login identity
        try:
            identity_id = self.identity_provider.create_identity(request.email, request.password)
        except IdentityProviderError as e:
            logger.error(f"Error creating auth user: {e}")
            self._journal_mark(entry_id, ProvisioningPhase.FAILED, error=str(e))
            return self._failure(ProvisioningErrorCode.IDENTITY_PROVIDER_FAILED)

        self._journal_mark(entry_id, ProvisioningPhase.IDENTITY_CREATED, identity_id=identity_id)

        # Phase 2: profile row under the identity id
        try:
            record = self._create_profile(identity_id, request)
        except PartialCreationError as e:
            logger.error(f"Error creating profile: {e}")
            if isinstance(e.cause, DuplicateAccountError):
                error_code = ProvisioningErrorCode.ALREADY_EXISTS
            else:
                error_code = ProvisioningErrorCode.PROFILE_STORE_FAILED
            compensated = self._compensate(identity_id, entry_id, str(e))
            return self._failure(error_code, compensated=compensated)

        self._journal_mark(entry_id, ProvisioningPhase.COMMITTED)
        self.audit_logger.log_account_created(record.id, record.email, record.role.value)
        return ProvisioningResult(success=True, account_id=record.id)

    async def get_recruiters(self) -> List[Account]:
        """
        List recruiter accounts, most recently created first.

        Returns:
            Recruiter accounts with is_active; empty on any failure
        """
        try:
            records = self.store.find_many(order_by="created_at", descending=True, role=Role.RECRUITER)
        except Exception as e:
            logger.error(f"Error fetching recruiters: {e}")
            return []
        return [record.to_account(include_active=True) for record in records]

    async def deactivate_recruiter(self, account_id: str) -> bool:
        """
        Deactivate a recruiter account.

        Only rows with role recruiter are touched, so an admin account can
        never be deactivated here. The identity-provider record is kept so
        the account can be reactivated.

        Args:
            account_id: Recruiter account id

        Returns:
            True if a recruiter row was deactivated
        """
        return self._set_active(account_id, False)

    async def reactivate_recruiter(self, account_id: str) -> bool:
        """
        Reactivate a previously deactivated recruiter account.

        Args:
            account_id: Recruiter account id

        Returns:
            True if a recruiter row was reactivated
        """
        return self._set_active(account_id, True)

    async def reset_password(self, email: str) -> bool:
        """
        Ask the identity provider to send a recovery link.

        With RESET_REQUIRES_ACTIVE_ACCOUNT the email must belong to an
        active account first.

        Args:
            email: Account email

        Returns:
            True if the recovery link was issued
        """
        logger.info(f"Resetting password for: {email}")
        try:
            if self.settings.RESET_REQUIRES_ACTIVE_ACCOUNT:
                if self.store.find_one(email=email, is_active=True) is None:
                    logger.warning(f"Password reset refused, no active account: {email}")
                    return False
            self.identity_provider.generate_recovery_link(email)
        except Exception as e:
            logger.error(f"Error resetting password: {e}")
            self.audit_logger.log_password_reset(email, success=False)
            return False

        self.audit_logger.log_password_reset(email, success=True)
        return True

    async def is_current_user_admin(self) -> bool:
        """
        Check whether the session slot holds an admin.

        Reads the client-held snapshot without re-validating it against
        the credential store; use the route guard for access decisions.
        """
        try:
            snapshot = self.session_store.get()
        except Exception as e:
            logger.error(f"Error checking admin status: {e}")
            return False
        return snapshot is not None and snapshot.role == Role.ADMIN

    async def recover_incomplete(self, older_than: Optional[timedelta] = None) -> int:
        """
        Resolve provisioning attempts interrupted between phases.

        An attempt whose profile row exists is marked committed; otherwise
        its identity is deleted. Attempts whose compensation failed earlier
        are retried. Attempts that never recorded an identity id are marked
        failed and logged for manual review.

        Entries updated within ``older_than`` may still be in flight in
        another process and are skipped.

        Args:
            older_than: Minimum entry age (defaults to
                PROVISIONING_RECOVERY_AFTER_SECONDS)

        Returns:
            Number of attempts committed or compensated
        """
        if self.journal is None:
            return 0
        if older_than is None:
            older_than = timedelta(seconds=self.settings.PROVISIONING_RECOVERY_AFTER_SECONDS)
        try:
            pending = self.journal.pending(older_than=older_than, phases=RECOVERABLE_PHASES)
        except JournalError as e:
            logger.error(f"Error reading provisioning journal: {e}")
            return 0

        resolved = 0
        for entry in pending:
            if entry.identity_id is None:
                logger.warning(
                    f"Provisioning of {entry.email} stopped before an identity id was recorded; "
                    f"check the identity provider for an orphaned user"
                )
                self._journal_mark(entry.id, ProvisioningPhase.FAILED, error="identity id unknown")
                continue

            try:
                profile = self.store.find_one(id=entry.identity_id)
            except Exception as e:
                logger.error(f"Error checking profile for {entry.email}: {e}")
                continue

            if profile is not None:
                self._journal_mark(entry.id, ProvisioningPhase.COMMITTED)
                resolved += 1
            elif self._compensate(entry.identity_id, entry.id, "interrupted before profile creation"):
                resolved += 1

        if resolved:
            logger.info(f"Resolved {resolved} incomplete recruiter provisioning attempts")
        return resolved

    def _create_profile(self, identity_id: str, request: CreateRecruiterRequest) -> AccountRecord:
        """
        Insert the recruiter profile under the identity id.

        Raises:
            PartialCreationError: If the insert fails; the identity now has no profile
        """
        try:
            return self.store.insert(AccountDraft(
                id=identity_id,
                email=request.email,
                password_material=self.policy.hash_password(request.password),
                password_scheme=CredentialScheme.HASHED,
                role=Role.RECRUITER,
                name=request.name,
                is_active=True,
            ))
        except Exception as e:
            raise PartialCreationError(identity_id, e) from e

    def _set_active(self, account_id: str, is_active: bool) -> bool:
        action = "Activating" if is_active else "Deactivating"
        logger.info(f"{action} recruiter: {account_id}")
        try:
            updated = self.store.update(account_id, {"is_active": is_active}, role=Role.RECRUITER)
        except Exception as e:
            logger.error(f"Error updating recruiter {account_id} in database: {e}")
            return False

        if not updated:
            logger.warning(f"No recruiter account with id {account_id}")
            return False

        self.audit_logger.log_account_status_change(account_id, is_active)
        return True

    def _compensate(self, identity_id: str, entry_id: Optional[str], reason: str) -> bool:
        """Delete an orphaned identity. Failure is logged, never raised."""
        try:
            self.identity_provider.delete_identity(identity_id)
        except Exception as e:
            self.audit_logger.log_compensation(identity_id, success=False, details={"error": str(e)})
            self._journal_mark(entry_id, ProvisioningPhase.COMPENSATION_FAILED, error=f"{reason}; {e}")
            return False

        self.audit_logger.log_compensation(identity_id, success=True)
        self._journal_mark(entry_id, ProvisioningPhase.COMPENSATED, error=reason)
        return True

    def _journal_mark(self, entry_id: Optional[str], phase: ProvisioningPhase, **kwargs) -> None:
        if self.journal is None or entry_id is None:
            return
        try:
            self.journal.mark(entry_id, phase, **kwargs)
        except JournalError as e:
            logger.error(f"Error updating provisioning journal entry {entry_id}: {e}")

    @staticmethod
    def _failure(error_code: ProvisioningErrorCode, compensated: bool = False) -> ProvisioningResult:
        return ProvisioningResult(
            success=False,
            error_code=error_code,
            message=PROVISIONING_MESSAGES[error_code],
            compensated=compensated,
        )
