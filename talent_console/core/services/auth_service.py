"""
Talent Console - Authentication Service
Role-scoped sign-in, direct sign-up, sign-out and current-user resolution.
"""

import logging
from typing import Optional, Union

from talent_console.core.config import Settings, get_settings
from talent_console.core.schemas.auth import (
    Account,
    AccountDraft,
    AccountRecord,
    CredentialScheme,
    Role,
)
from talent_console.core.security.auth import (
    AccountNotFoundError,
    AuthenticationError,
    InvalidCredentialsError,
    PasswordVerificationPolicy,
    SecurityAuditLogger,
    VerificationTier,
)
from talent_console.core.session import SessionStore, get_session_store
from talent_console.database.credential_store import (
    CredentialStore,
    CredentialStoreError,
    DuplicateAccountError,
)

logger = logging.getLogger(__name__)


class AuthenticationService:
    """
    Authentication against the credential store.

    No operation raises to the caller: failures resolve to ``None`` and the
    detail is logged. A missing account, a wrong role, a rejected password
    and a store failure look the same from outside.
    """

    def __init__(
        self,
        store: CredentialStore,
        session_store: Optional[SessionStore] = None,
        policy: Optional[PasswordVerificationPolicy] = None,
        settings: Optional[Settings] = None,
    ):
        self.settings = settings or get_settings()
        self.store = store
        self.session_store = session_store if session_store is not None else get_session_store()
        self.policy = policy or PasswordVerificationPolicy(self.settings)
        self.audit_logger = SecurityAuditLogger()

    async def sign_in(
        self,
        required_role: Union[Role, str],
        email: str,
        password: str,
    ) -> Optional[Account]:
        """
        Authenticate an operator on the login surface for a role.

        Does not write the session; call :meth:`establish_session` next.

        Args:
            required_role: Role the account must hold
            email: Login email
            password: Plain text password

        Returns:
            Normalized Account, or None if authentication fails
        """
        role_name = getattr(required_role, "value", required_role)
        try:
            return self._authenticate(required_role, email, password)
        except AuthenticationError as e:
            self.audit_logger.log_login_attempt(
                email=email,
                role=role_name,
                success=False,
                failure_reason=str(e),
            )
            return None
        except CredentialStoreError as e:
            logger.error(f"Database error during {role_name} sign-in for {email}: {e}")
            return None
        except Exception as e:
            logger.error(f"Error during {role_name} sign-in for {email}: {e}")
            return None

    async def admin_sign_in(self, email: str, password: str) -> Optional[Account]:
        """Sign-in for the admin login surface."""
        return await self.sign_in(Role.ADMIN, email, password)

    async def recruiter_sign_in(self, email: str, password: str) -> Optional[Account]:
        """Sign-in for the recruiter login surface."""
        return await self.sign_in(Role.RECRUITER, email, password)

    async def sign_up(
        self,
        email: str,
        password: str,
        role: Union[Role, str] = Role.RECRUITER,
        name: Optional[str] = None,
    ) -> Optional[Account]:
        """
        Insert an account directly into the credential store.

        Unlike recruiter provisioning this creates no identity-provider
        record.

        Args:
            email: Login email
            password: Plain text password, stored hashed
            role: Account role
            name: Display name

        Returns:
            The created Account, or None if the insert fails
        """
        try:
            draft = AccountDraft(
                email=email,
                password_material=self.policy.hash_password(password),
                password_scheme=CredentialScheme.HASHED,
                role=role,
                name=name,
            )
            record = self.store.insert(draft)
        except DuplicateAccountError:
            logger.warning(f"Sign up rejected, account already exists: {email}")
            return None
        except Exception as e:
            logger.error(f"Sign up error for {email}: {e}")
            return None

        self.audit_logger.log_account_created(record.id, record.email, record.role.value)
        return record.to_account()

    async def establish_session(self, account: Account) -> bool:
        """
        Record the signed-in account in the session store.

        Args:
            account: Account returned by a successful sign-in

        Returns:
            True if the session was written
        """
        try:
            self.session_store.set(account)
        except Exception as e:
            logger.error(f"Error persisting session for {account.email}: {e}")
            return False
        logger.info(f"Session established for {account.email} ({account.role.value})")
        return True

    async def sign_out(self) -> None:
        """Clear the session slot. No store interaction."""
        try:
            self.session_store.clear()
        except Exception as e:
            logger.error(f"Error clearing session: {e}")

    async def get_current_user(self) -> Optional[Account]:
        """
        Resolve the signed-in account, re-validated against the store.

        The session is cleared when its account no longer exists, is
        inactive, or cannot be verified.

        Returns:
            The current Account (with is_active), or None
        """
        try:
            snapshot = self.session_store.get()
        except Exception as e:
            logger.error(f"Error reading session: {e}")
            return None
        if snapshot is None:
            return None

        try:
            record = self.store.find_one(id=snapshot.id, is_active=True)
        except CredentialStoreError as e:
            logger.error(f"Error verifying session for {snapshot.email}: {e}")
            record = None

        if record is None:
            logger.info(f"Session for {snapshot.email} no longer valid; clearing")
            await self.sign_out()
            return None

        return record.to_account(include_active=True)

    async def is_current_user_admin(self) -> bool:
        """Whether the session slot holds an admin. Not re-validated against the store."""
        try:
            snapshot = self.session_store.get()
        except Exception as e:
            logger.error(f"Error checking admin status: {e}")
            return False
        return snapshot is not None and snapshot.is_admin

    def _authenticate(self, required_role: Union[Role, str], email: str, password: str) -> Account:
        """
        Look up the active account for the role and apply the password policy.

        Raises:
            AccountNotFoundError: No active account for the email and role
            InvalidCredentialsError: The password policy rejected the attempt
            CredentialStoreError: The lookup failed
        """
        try:
            role = Role(str(getattr(required_role, "value", required_role)).strip().lower())
        except ValueError:
            raise AccountNotFoundError(f"Unknown role {required_role!r}")

        record = self.store.find_one(email=email, role=role, is_active=True)
        if record is None:
            raise AccountNotFoundError("No active account for this email and role")

        tier = self.policy.evaluate(
            password,
            record.password_material,
            record.email,
            record.password_scheme,
        )
        if tier is None:
            raise InvalidCredentialsError("Invalid password")

        if (
            self.settings.REHASH_LEGACY_ON_LOGIN
            and tier != VerificationTier.BOOTSTRAP
            and self.policy.needs_upgrade(record.password_material, record.password_scheme)
        ):
            self._upgrade_credential(record, password)

        self.audit_logger.log_login_attempt(
            email=email,
            role=role.value,
            success=True,
            tier=tier.value,
        )
        return record.to_account()

    def _upgrade_credential(self, record: AccountRecord, password: str) -> None:
        """Re-hash legacy or deprecated material after a successful sign-in."""
        try:
            self.store.update(
                record.id,
                {
                    "password_material": self.policy.hash_password(password),
                    "password_scheme": CredentialScheme.HASHED,
                },
            )
            logger.info(f"Upgraded stored credential for {record.email}")
        except Exception as e:
            logger.error(f"Error upgrading credential for {record.email}: {e}")
