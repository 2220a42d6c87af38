"""
Talent Console - Authentication & Security Core
Tiered password verification, session token signing and security audit logging.
"""

import hmac
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Dict, Any

import jwt
from passlib.context import CryptContext

from ..config import Settings, get_settings
from ..schemas.auth import CredentialScheme, SessionSnapshot

logger = logging.getLogger(__name__)


class AuthenticationError(Exception):
    """Base authentication error."""
    pass


class AccountNotFoundError(AuthenticationError):
    """No active account matches the email and role."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Account found but the password policy rejected the attempt."""
    pass


class TokenExpiredError(AuthenticationError):
    """Signed session token has expired."""
    pass


class InvalidTokenError(AuthenticationError):
    """Signed session token is malformed or tampered with."""
    pass


def build_crypt_context(settings: Optional[Settings] = None) -> CryptContext:
    """
    Build the passlib context used for password hashing.

    Args:
        settings: Settings providing PASSWORD_HASH_SCHEMES and BCRYPT_ROUNDS

    Returns:
        Configured CryptContext
    """
    settings = settings or get_settings()
    options = {}
    if "bcrypt" in settings.PASSWORD_HASH_SCHEMES:
        options["bcrypt__rounds"] = settings.BCRYPT_ROUNDS
    return CryptContext(
        schemes=settings.PASSWORD_HASH_SCHEMES,
        deprecated="auto",
        **options,
    )


class VerificationTier(str, Enum):
    """Which tier of the password policy accepted an attempt."""

    BOOTSTRAP = "bootstrap"
    SECURE_HASH = "secure_hash"
    LEGACY_PLAINTEXT = "legacy_plaintext"


class PasswordVerificationPolicy:
    """
    Tiered password verification over a mixed corpus of hashed and legacy
    plaintext credentials.

    Tiers are evaluated in order and the first match wins:

    1. Bootstrap: the designated bootstrap email with the designated
       bootstrap password. Both must match exactly.
    2. Secure hash: passlib comparison against the stored hash. If the
       mechanism itself raises (the stored value is not a hash) the tier
       is skipped rather than failing the attempt.
    3. Legacy plaintext: constant-time equality with the stored value.

    Rows tagged with a :class:`CredentialScheme` at write time go straight
    to their tier. Untagged rows predate the tag and go through the
    cascade. This is a transitional policy for migrating legacy plaintext
    rows to hashes without downtime.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        context: Optional[CryptContext] = None,
    ):
        settings = settings or get_settings()
        self.bootstrap_email = settings.BOOTSTRAP_ADMIN_EMAIL
        self.bootstrap_password = settings.BOOTSTRAP_ADMIN_PASSWORD
        self.context = context or build_crypt_context(settings)

    def hash_password(self, password: str) -> str:
        """
        Hash password with the configured scheme.

        Args:
            password: Plain text password

        Returns:
            Hashed password string
        """
        return self.context.hash(password)

    def verify(
        self,
        attempt: str,
        stored: Optional[str],
        account_email: str,
        scheme: Optional[CredentialScheme] = None,
    ) -> bool:
        """
        Decide whether an attempt matches the stored credential.

        Args:
            attempt: Plain text password attempt
            stored: Stored password material
            account_email: Email of the account the material belongs to
            scheme: How the material was written, if known

        Returns:
            True if any tier accepts the attempt
        """
        return self.evaluate(attempt, stored, account_email, scheme) is not None

    def evaluate(
        self,
        attempt: str,
        stored: Optional[str],
        account_email: str,
        scheme: Optional[CredentialScheme] = None,
    ) -> Optional[VerificationTier]:
        """
        Run the tiers and report which one accepted the attempt.

        Returns:
            The accepting tier, or None when the attempt is rejected
        """
        if attempt is None:
            return None

        if self._matches_bootstrap(attempt, account_email):
            return VerificationTier.BOOTSTRAP

        if scheme == CredentialScheme.LEGACY_PLAINTEXT:
            if self._matches_plaintext(attempt, stored):
                return VerificationTier.LEGACY_PLAINTEXT
            return None

        hash_result = self._matches_hash(attempt, stored)
        if hash_result is not None:
            return VerificationTier.SECURE_HASH if hash_result else None

        if scheme == CredentialScheme.HASHED:
            # Tagged as hashed but unreadable by the context; never fall back.
            logger.warning(f"Stored hash for {account_email} could not be verified")
            return None

        if self._matches_plaintext(attempt, stored):
            return VerificationTier.LEGACY_PLAINTEXT
        return None

    def needs_upgrade(self, stored: Optional[str], scheme: Optional[CredentialScheme] = None) -> bool:
        """
        Whether stored material should be re-hashed after a successful sign-in.

        Args:
            stored: Stored password material
            scheme: How the material was written, if known

        Returns:
            True for legacy plaintext material or deprecated hashes
        """
        if not stored:
            return True
        if scheme == CredentialScheme.LEGACY_PLAINTEXT:
            return True
        if self.context.identify(stored) is None:
            return True
        return self.context.needs_update(stored)

    def _matches_bootstrap(self, attempt: str, account_email: str) -> bool:
        if not self.bootstrap_email or not self.bootstrap_password:
            return False
        if account_email != self.bootstrap_email:
            return False
        return hmac.compare_digest(attempt.encode("utf-8"), self.bootstrap_password.encode("utf-8"))

    def _matches_hash(self, attempt: str, stored: Optional[str]) -> Optional[bool]:
        """Secure-hash tier; None means the mechanism could not run."""
        try:
            return self.context.verify(attempt, stored)
        except (ValueError, TypeError) as e:
            logger.debug(f"Secure-hash tier skipped: {e}")
            return None

    @staticmethod
    def _matches_plaintext(attempt: str, stored: Optional[str]) -> bool:
        if stored is None:
            return False
        return hmac.compare_digest(attempt.encode("utf-8"), stored.encode("utf-8"))


class SessionTokenCodec:
    """
    Signs session snapshots as JWTs so a client-held session blob
    cannot be edited without detection.
    """

    TOKEN_TYPE = "session"

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_minutes: int = 480,
    ):
        if not secret_key:
            raise ValueError("A signing key is required for session tokens")
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> Optional["SessionTokenCodec"]:
        """Build a codec when SESSION_SIGNING_KEY is configured, else None."""
        settings = settings or get_settings()
        if not settings.SESSION_SIGNING_KEY:
            return None
        return cls(
            secret_key=settings.SESSION_SIGNING_KEY,
            algorithm=settings.SESSION_SIGNING_ALGORITHM,
            expire_minutes=settings.SESSION_TIMEOUT_MINUTES,
        )

    def encode(self, snapshot: SessionSnapshot, expires_delta: Optional[timedelta] = None) -> str:
        """
        Sign a session snapshot.

        Args:
            snapshot: Account snapshot to sign
            expires_delta: Custom lifetime

        Returns:
            JWT string
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        to_encode = {
            "sub": snapshot.id,
            "account": snapshot.model_dump(mode="json"),
            "iat": now,
            "exp": expire,
            "type": self.TOKEN_TYPE,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> SessionSnapshot:
        """
        Verify and decode a signed session.

        Args:
            token: JWT string

        Returns:
            The signed snapshot

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token is invalid or of the wrong type
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Session has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid session token: {e}")

        if payload.get("type") != self.TOKEN_TYPE or "account" not in payload:
            raise InvalidTokenError("Invalid session token type")
        return SessionSnapshot.model_validate(payload["account"])


class SecurityAuditLogger:
    """
    Security event logging for sign-in and account lifecycle events.
    """

    @classmethod
    def log_login_attempt(
        cls,
        email: str,
        role: str,
        success: bool,
        failure_reason: Optional[str] = None,
        tier: Optional[str] = None,
    ):
        """
        Log a sign-in attempt.

        Args:
            email: Attempted email
            role: Login surface role
            success: Whether sign-in succeeded
            failure_reason: Internal reason for a failure
            tier: Password policy tier that accepted the attempt
        """
        if success:
            logger.info(f"Successful {role} sign-in: {email} (tier: {tier})")
        else:
            logger.warning(f"Failed {role} sign-in: {email} - {failure_reason}")

    @classmethod
    def log_account_created(cls, account_id: str, email: str, role: str):
        logger.info(f"Account created: {email} (ID: {account_id}, role: {role})")

    @classmethod
    def log_account_status_change(cls, account_id: str, is_active: bool):
        state = "reactivated" if is_active else "deactivated"
        logger.info(f"Account {state}: {account_id}")

    @classmethod
    def log_password_reset(cls, email: str, success: bool):
        if success:
            logger.info(f"Password recovery issued for {email}")
        else:
            logger.warning(f"Password recovery failed for {email}")

    @classmethod
    def log_compensation(cls, identity_id: str, success: bool, details: Optional[Dict[str, Any]] = None):
        """
        Log the outcome of a compensating identity delete.

        Args:
            identity_id: Identity-provider id being rolled back
            success: Whether the delete succeeded
            details: Extra context (e.g. the provider error)
        """
        if success:
            logger.warning(f"Compensated orphaned identity {identity_id}")
        else:
            logger.error(f"Compensation failed for identity {identity_id} - {details}")
