"""
Talent Console - Identity Provider Contract
Login identities held by an external authentication provider, keyed by email
and independent of the credential store.
"""

from typing import Protocol, runtime_checkable


class IdentityProviderError(Exception):
    """The identity provider rejected or failed a request."""
    pass


@runtime_checkable
class IdentityProvider(Protocol):
    """
    Contract over an external authentication provider.

    Every method raises :class:`IdentityProviderError` on failure.
    """

    def create_identity(self, email: str, password: str) -> str:
        """Create a confirmed login identity and return its id."""
        ...

    def delete_identity(self, identity_id: str) -> None:
        """Delete a login identity."""
        ...

    def generate_recovery_link(self, email: str) -> None:
        """Issue a password recovery link for the email."""
        ...
