"""
Talent Console - Security Module
Password policy, session signing, audit logging and route guards.
"""

from .auth import (
    PasswordVerificationPolicy,
    VerificationTier,
    SessionTokenCodec,
    SecurityAuditLogger,
    build_crypt_context,
    AuthenticationError,
    AccountNotFoundError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
)

from .guards import GuardDecision, RouteGuard

__all__ = [
    # Password policy
    "PasswordVerificationPolicy",
    "VerificationTier",
    "build_crypt_context",

    # Sessions
    "SessionTokenCodec",

    # Audit
    "SecurityAuditLogger",

    # Exceptions
    "AuthenticationError",
    "AccountNotFoundError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",

    # Guards
    "GuardDecision",
    "RouteGuard",
]
