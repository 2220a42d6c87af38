"""Tests for the tiered password verification policy."""
import pytest

from talent_console.core.config import Settings
from talent_console.core.schemas.auth import CredentialScheme
from talent_console.core.security.auth import PasswordVerificationPolicy, VerificationTier


@pytest.fixture
def hashed(policy):
    return policy.hash_password("S3cure!pass")


def test_bootstrap_credentials_accepted(policy):
    tier = policy.evaluate("admin123", "admin123", "admin@example.com", CredentialScheme.LEGACY_PLAINTEXT)
    assert tier == VerificationTier.BOOTSTRAP


def test_bootstrap_accepted_regardless_of_stored_material(policy, hashed):
    assert policy.evaluate("admin123", hashed, "admin@example.com") == VerificationTier.BOOTSTRAP


def test_bootstrap_password_for_another_email_is_not_bootstrap(policy, hashed):
    assert policy.evaluate("admin123", hashed, "other@example.com") is None
    # Legacy plaintext equality can still apply, but never the bootstrap tier
    tier = policy.evaluate("admin123", "admin123", "other@example.com")
    assert tier == VerificationTier.LEGACY_PLAINTEXT


def test_bootstrap_email_is_matched_exactly(policy, hashed):
    assert policy.evaluate("admin123", hashed, "Admin@Example.com") is None


def test_bootstrap_email_with_wrong_password_falls_through(policy, hashed):
    assert policy.evaluate("wrong", hashed, "admin@example.com") is None
    assert policy.evaluate("S3cure!pass", hashed, "admin@example.com") == VerificationTier.SECURE_HASH


def test_bootstrap_tier_disabled_without_password():
    policy = PasswordVerificationPolicy(Settings(_env_file=None, BCRYPT_ROUNDS=4, BOOTSTRAP_ADMIN_PASSWORD=""))
    assert policy.evaluate("", "", "admin@example.com") != VerificationTier.BOOTSTRAP


def test_hash_match(policy, hashed):
    assert policy.evaluate("S3cure!pass", hashed, "r1@x.com", CredentialScheme.HASHED) == VerificationTier.SECURE_HASH
    assert policy.verify("S3cure!pass", hashed, "r1@x.com")


def test_hash_mismatch_rejected(policy, hashed):
    assert not policy.verify("wrong", hashed, "r1@x.com", CredentialScheme.HASHED)


def test_hash_mismatch_does_not_fall_back_to_plaintext(policy, hashed):
    # Submitting the stored hash itself must not pass the plaintext tier
    assert not policy.verify(hashed, hashed, "r1@x.com")


def test_untagged_plaintext_row_uses_legacy_tier(policy):
    tier = policy.evaluate("hunter2", "hunter2", "legacy@x.com")
    assert tier == VerificationTier.LEGACY_PLAINTEXT
    assert policy.evaluate("hunter3", "hunter2", "legacy@x.com") is None


def test_tagged_plaintext_row_skips_hash_tier(policy):
    tier = policy.evaluate("hunter2", "hunter2", "legacy@x.com", CredentialScheme.LEGACY_PLAINTEXT)
    assert tier == VerificationTier.LEGACY_PLAINTEXT


def test_tagged_hashed_row_never_compares_plaintext(policy):
    assert policy.evaluate("hunter2", "hunter2", "r1@x.com", CredentialScheme.HASHED) is None


def test_missing_material_rejected(policy):
    assert not policy.verify("anything", None, "r1@x.com")
    assert not policy.verify(None, "anything", "r1@x.com")


@pytest.mark.parametrize("stored,scheme,expected", [
    ("plain", None, True),
    ("plain", CredentialScheme.LEGACY_PLAINTEXT, True),
    ("", None, True),
])
def test_needs_upgrade_for_legacy_material(policy, stored, scheme, expected):
    assert policy.needs_upgrade(stored, scheme) is expected


def test_current_hash_needs_no_upgrade(policy, hashed):
    assert policy.needs_upgrade(hashed, CredentialScheme.HASHED) is False
