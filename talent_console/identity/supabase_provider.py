"""
Talent Console - Supabase Identity Provider
Identity provider adapter over the Supabase Auth admin API.
"""

import logging
from typing import Optional

from supabase import Client, create_client

from talent_console.core.config import Settings, get_settings
from .base import IdentityProviderError

logger = logging.getLogger(__name__)


class SupabaseIdentityProvider:
    """
    Manages login identities through the Supabase Auth admin API.

    Requires a service-role client; the anon key cannot create or delete
    users.

    Usage:
        provider = SupabaseIdentityProvider.from_settings()
        identity_id = provider.create_identity("r1@x.com", "P@ssw0rd1")
    """

    def __init__(self, client: Client):
        self.client = client

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SupabaseIdentityProvider":
        """
        Build the provider from SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY.

        Raises:
            IdentityProviderError: If the Supabase settings are missing
        """
        settings = settings or get_settings()
        if not settings.identity_provider_configured:
            raise IdentityProviderError("SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY not configured")
        return cls(create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY))

    def create_identity(self, email: str, password: str) -> str:
        """
        Create an auth user with email confirmation already satisfied.

        Args:
            email: Login email
            password: Initial password

        Returns:
            The new identity id

        Raises:
            IdentityProviderError: If Supabase rejects the request
        """
        try:
            response = self.client.auth.admin.create_user({
                "email": email,
                "password": password,
                "email_confirm": True,
            })
        except Exception as e:
            raise IdentityProviderError(f"Error creating auth user {email}: {e}") from e

        user = getattr(response, "user", None)
        if user is None or not getattr(user, "id", None):
            raise IdentityProviderError(f"Supabase returned no user for {email}")

        logger.info(f"Auth user created: {user.id}")
        return str(user.id)

    def delete_identity(self, identity_id: str) -> None:
        """
        Delete an auth user.

        Raises:
            IdentityProviderError: If Supabase rejects the request
        """
        try:
            self.client.auth.admin.delete_user(identity_id)
        except Exception as e:
            raise IdentityProviderError(f"Error deleting auth user {identity_id}: {e}") from e
        logger.info(f"Auth user deleted: {identity_id}")

    def generate_recovery_link(self, email: str) -> None:
        """
        Generate a recovery link; Supabase delivers the recovery email.

        Raises:
            IdentityProviderError: If Supabase rejects the request
        """
        try:
            self.client.auth.admin.generate_link({
                "type": "recovery",
                "email": email,
            })
        except Exception as e:
            raise IdentityProviderError(f"Error generating reset link for {email}: {e}") from e
        logger.info(f"Recovery link generated for {email}")
