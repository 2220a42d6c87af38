"""
Talent Console - Identity Provider Module
"""

from .base import IdentityProvider, IdentityProviderError
from .supabase_provider import SupabaseIdentityProvider

__all__ = [
    "IdentityProvider",
    "IdentityProviderError",
    "SupabaseIdentityProvider",
]
