"""
Talent Console - Route Guards
Access decisions for protected console views.
"""

import logging
from enum import Enum
from typing import Optional, Tuple

from talent_console.core.schemas.auth import Account, Role

logger = logging.getLogger(__name__)


class GuardDecision(str, Enum):
    """What the presentation layer should do with a protected view."""

    ALLOW = "allow"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_ADMIN_HOME = "redirect_admin_home"


class RouteGuard:
    """
    Role-based access control for protected views.

    The current user is re-validated against the credential store on every
    check, so a deactivated account loses access on its next navigation.
    """

    LOGIN_PATH = "/login"
    ADMIN_HOME_PATH = "/admin"

    def __init__(self, auth_service):
        self.auth_service = auth_service

    async def check(self, require_admin: bool = False) -> GuardDecision:
        """
        Decide whether the current session may open a view.

        Args:
            require_admin: Whether the view is restricted to admins

        Returns:
            ALLOW, REDIRECT_LOGIN when nobody valid is signed in, or
            REDIRECT_ADMIN_HOME when a recruiter opens an admin-only view
        """
        decision, _ = await self.resolve(require_admin)
        return decision

    async def resolve(self, require_admin: bool = False) -> Tuple[GuardDecision, Optional[Account]]:
        """Like :meth:`check`, also returning the resolved account."""
        try:
            user = await self.auth_service.get_current_user()
        except Exception as e:
            logger.error(f"Auth check error: {e}")
            return GuardDecision.REDIRECT_LOGIN, None

        if user is None:
            return GuardDecision.REDIRECT_LOGIN, None

        if require_admin and user.role != Role.ADMIN:
            logger.warning(f"Admin view refused for {user.email} ({user.role.value})")
            return GuardDecision.REDIRECT_ADMIN_HOME, user

        return GuardDecision.ALLOW, user

    def redirect_path(self, decision: GuardDecision) -> Optional[str]:
        """Path to navigate to for a decision, or None to render the view."""
        if decision == GuardDecision.REDIRECT_LOGIN:
            return self.LOGIN_PATH
        if decision == GuardDecision.REDIRECT_ADMIN_HOME:
            return self.ADMIN_HOME_PATH
        return None
