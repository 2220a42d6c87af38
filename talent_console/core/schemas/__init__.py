"""
Talent Console - Schemas Module
Pydantic schemas for accounts, sessions and provisioning.
"""

from .auth import *

__all__ = [
    "Role",
    "CredentialScheme",
    "DEFAULT_DISPLAY_NAMES",
    "FALLBACK_DISPLAY_NAME",
    "default_display_name",
    "AccountRecord",
    "Account",
    "SessionSnapshot",
    "AccountDraft",
    "CreateRecruiterRequest",
    "ProvisioningErrorCode",
    "ProvisioningResult",
    "ProvisioningPhase",
    "PENDING_PHASES",
    "RECOVERABLE_PHASES",
]
