"""Tests for the SQLAlchemy credential store and bootstrap seeding."""
import logging
from datetime import datetime, timedelta, timezone
from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError

from talent_console.core.schemas.auth import AccountDraft, CredentialScheme, Role
from talent_console.database.credential_store import (
    CredentialStore,
    CredentialStoreError,
    DuplicateAccountError,
)
from talent_console.database.models import AdminUser
from talent_console.database.seeds import seed_bootstrap_admin
from talent_console.database.session import transaction


def _draft(email, role=Role.RECRUITER, **kwargs):
    return AccountDraft(email=email, password_material="$2b$hash", role=role, **kwargs)


def test_store_satisfies_contract(store):
    assert isinstance(store, CredentialStore)


def test_insert_assigns_id_and_created_at(store):
    record = store.insert(_draft("r1@x.com", name="R One"))
    assert record.id
    assert record.created_at is not None
    assert record.role == Role.RECRUITER
    assert record.is_active is True
    assert record.password_scheme == CredentialScheme.HASHED


def test_insert_keeps_preset_id(store):
    record = store.insert(_draft("r1@x.com", id="identity-123"))
    assert record.id == "identity-123"
    assert store.find_one(id="identity-123").email == "r1@x.com"


def test_insert_duplicate_email(store):
    store.insert(_draft("r1@x.com"))
    with pytest.raises(DuplicateAccountError):
        store.insert(_draft("r1@x.com"))


def test_find_one_filters_by_role_and_active(store):
    record = store.insert(_draft("r1@x.com"))
    assert store.find_one(email="r1@x.com", role=Role.RECRUITER, is_active=True).id == record.id
    assert store.find_one(email="r1@x.com", role=Role.ADMIN) is None
    assert store.find_one(email="r1@x.com", role="recruiter").id == record.id
    assert store.find_one(email="missing@x.com") is None


def test_find_one_unknown_filter(store):
    with pytest.raises(ValueError):
        store.find_one(password_hash="x")


def test_find_many_orders_by_created_at(store, session_factory):
    now = datetime.now(timezone.utc)
    for offset, email in enumerate(["old@x.com", "mid@x.com", "new@x.com"]):
        record = store.insert(_draft(email))
        with transaction(session_factory) as session:
            session.get(AdminUser, record.id).created_at = now + timedelta(minutes=offset)

    records = store.find_many(order_by="created_at", descending=True)
    assert [r.email for r in records] == ["new@x.com", "mid@x.com", "old@x.com"]

    records = store.find_many(order_by="created_at", descending=False)
    assert [r.email for r in records] == ["old@x.com", "mid@x.com", "new@x.com"]


def test_find_many_unknown_order(store):
    with pytest.raises(ValueError):
        store.find_many(order_by="password_hash")


def test_update_respects_filters(store):
    admin = store.insert(_draft("boss@x.com", role=Role.ADMIN))
    assert store.update(admin.id, {"is_active": False}, role=Role.RECRUITER) is False
    assert store.find_one(id=admin.id).is_active is True

    assert store.update(admin.id, {"is_active": False}) is True
    assert store.find_one(id=admin.id).is_active is False


def test_update_password_material(store):
    record = store.insert(_draft("r1@x.com", password_scheme=CredentialScheme.LEGACY_PLAINTEXT))
    store.update(record.id, {"password_material": "$2b$new", "password_scheme": CredentialScheme.HASHED})
    updated = store.find_one(id=record.id)
    assert updated.password_material == "$2b$new"
    assert updated.password_scheme == CredentialScheme.HASHED


def test_update_unknown_field(store):
    record = store.insert(_draft("r1@x.com"))
    with pytest.raises(ValueError):
        store.update(record.id, {"role": "admin"})


def test_update_missing_row(store):
    assert store.update("missing", {"is_active": False}) is False


def test_database_errors_are_wrapped(store):
    with mock.patch.object(store, "session_factory", side_effect=OperationalError("SELECT", {}, Exception("down"))):
        with pytest.raises(CredentialStoreError):
            store.find_one(email="r1@x.com")


def test_seed_bootstrap_admin(store, settings):
    record = seed_bootstrap_admin(store, settings)
    assert record.email == "admin@example.com"
    assert record.role == Role.ADMIN
    assert record.name == "Admin User"
    assert record.password_scheme == CredentialScheme.LEGACY_PLAINTEXT


def test_seed_bootstrap_admin_is_idempotent(store, settings):
    seed_bootstrap_admin(store, settings)
    assert seed_bootstrap_admin(store, settings) is None
    assert len(store.find_many(role=Role.ADMIN)) == 1


def test_rolled_back_insert_logs_transaction_failure(store, caplog):
    store.insert(_draft("r1@x.com"))
    with caplog.at_level(logging.ERROR, logger="talent_console.database.session"):
        with pytest.raises(DuplicateAccountError):
            store.insert(_draft("r1@x.com"))
    messages = [r.getMessage() for r in caplog.records if r.name == "talent_console.database.session"]
    assert any(m.startswith("Transaction failed, rolling back") for m in messages)
    assert not any("Commit failed" in m for m in messages)
