"""
Talent Console - Account & Session Schemas
Pydantic models for accounts, session snapshots and recruiter provisioning.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, Field


class Role(str, Enum):
    """Operator roles. Immutable after account creation."""

    ADMIN = "admin"
    RECRUITER = "recruiter"


class CredentialScheme(str, Enum):
    """How stored password material was written."""

    HASHED = "hashed"
    LEGACY_PLAINTEXT = "plaintext"


DEFAULT_DISPLAY_NAMES = {
    Role.ADMIN: "Admin User",
    Role.RECRUITER: "Recruiter",
}
FALLBACK_DISPLAY_NAME = "User"


def _coerce_role(v):
    if isinstance(v, str) and not isinstance(v, Role):
        return v.strip().lower()
    return v


RoleField = Annotated[Role, BeforeValidator(_coerce_role)]


def default_display_name(role: Optional[Role]) -> str:
    """Display name used when an account row carries none."""
    return DEFAULT_DISPLAY_NAMES.get(role, FALLBACK_DISPLAY_NAME)


class AccountRecord(BaseModel):
    """
    Full account row as persisted in the credential store.

    Carries the password material and must never be handed to the
    presentation layer; use :meth:`to_account` for that.
    """

    id: str
    email: str
    password_material: str = Field(..., repr=False)
    password_scheme: Optional[CredentialScheme] = None
    name: Optional[str] = None
    role: RoleField
    is_active: bool = True
    created_at: datetime

    class Config:
        from_attributes = True

    def to_account(self, include_active: bool = False) -> "Account":
        """
        Build the normalized account view.

        Args:
            include_active: Whether to carry the is_active flag

        Returns:
            Account with the display name defaulted
        """
        return Account(
            id=self.id,
            email=self.email,
            name=self.name or default_display_name(self.role),
            role=self.role,
            created_at=self.created_at,
            is_active=self.is_active if include_active else None,
        )


class Account(BaseModel):
    """Normalized account view returned by the core operations."""

    id: str
    email: str
    name: str
    role: RoleField
    created_at: datetime
    is_active: Optional[bool] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# A session is a serialized snapshot of the signed-in account.
SessionSnapshot = Account


class AccountDraft(BaseModel):
    """Values for a new account row; the store assigns created_at."""

    email: str
    password_material: str = Field(..., repr=False)
    password_scheme: CredentialScheme = CredentialScheme.HASHED
    role: RoleField = Role.RECRUITER
    name: Optional[str] = None
    is_active: bool = True
    id: Optional[str] = Field(None, description="Preset id, e.g. the identity-provider id")


class CreateRecruiterRequest(BaseModel):
    """Admin request to provision a recruiter account."""

    email: str = Field(..., description="Recruiter email address")
    password: str = Field(..., description="Initial password", repr=False)
    name: str = Field(..., description="Display name")


class ProvisioningErrorCode(str, Enum):
    """Why a recruiter provisioning attempt failed."""

    ALREADY_EXISTS = "already_exists"
    IDENTITY_PROVIDER_FAILED = "identity_provider_failed"
    PROFILE_STORE_FAILED = "profile_store_failed"
    JOURNAL_FAILED = "journal_failed"


class ProvisioningResult(BaseModel):
    """Outcome of a recruiter provisioning attempt."""

    success: bool
    account_id: Optional[str] = None
    error_code: Optional[ProvisioningErrorCode] = None
    message: Optional[str] = None
    compensated: bool = False


class ProvisioningPhase(str, Enum):
    """States of the recruiter provisioning journal."""

    STARTED = "started"
    IDENTITY_CREATED = "identity_created"
    COMMITTED = "committed"
    FAILED = "failed"
    COMPENSATED = "compensated"
    COMPENSATION_FAILED = "compensation_failed"


PENDING_PHASES = (ProvisioningPhase.STARTED, ProvisioningPhase.IDENTITY_CREATED)
# Phases recovery picks up: unfinished attempts plus failed rollbacks
RECOVERABLE_PHASES = PENDING_PHASES + (ProvisioningPhase.COMPENSATION_FAILED,)
