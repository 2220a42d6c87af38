"""
Talent Console - Service Layer
"""

from .auth_service import AuthenticationService
from .account_service import (
    AccountLifecycleManager,
    AccountServiceError,
    PartialCreationError,
)

__all__ = [
    "AuthenticationService",
    "AccountLifecycleManager",
    "AccountServiceError",
    "PartialCreationError",
]
