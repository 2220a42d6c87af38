"""Tests for route guard access decisions."""
from unittest import mock

import pytest

from talent_console.core.schemas.auth import AccountDraft, Role
from talent_console.core.security.guards import GuardDecision, RouteGuard


@pytest.fixture
def guard(auth_service):
    return RouteGuard(auth_service)


async def _sign_in_as(auth_service, store, policy, email, role):
    store.insert(AccountDraft(email=email, password_material=policy.hash_password("P@ssw0rd1"), role=role))
    account = await auth_service.sign_in(role, email, "P@ssw0rd1")
    await auth_service.establish_session(account)
    return account


@pytest.mark.asyncio
async def test_anonymous_redirected_to_login(guard):
    assert await guard.check() == GuardDecision.REDIRECT_LOGIN
    assert await guard.check(require_admin=True) == GuardDecision.REDIRECT_LOGIN


@pytest.mark.asyncio
async def test_admin_allowed_everywhere(guard, auth_service, store, policy):
    await _sign_in_as(auth_service, store, policy, "boss@x.com", Role.ADMIN)
    assert await guard.check() == GuardDecision.ALLOW
    assert await guard.check(require_admin=True) == GuardDecision.ALLOW


@pytest.mark.asyncio
async def test_recruiter_kept_out_of_admin_views(guard, auth_service, store, policy):
    account = await _sign_in_as(auth_service, store, policy, "r1@x.com", Role.RECRUITER)
    assert await guard.check() == GuardDecision.ALLOW

    decision, user = await guard.resolve(require_admin=True)
    assert decision == GuardDecision.REDIRECT_ADMIN_HOME
    assert user.id == account.id


@pytest.mark.asyncio
async def test_deactivated_account_redirected_to_login(guard, auth_service, store, policy, session_store):
    account = await _sign_in_as(auth_service, store, policy, "r1@x.com", Role.RECRUITER)
    store.update(account.id, {"is_active": False})

    assert await guard.check() == GuardDecision.REDIRECT_LOGIN
    assert session_store.get() is None


@pytest.mark.asyncio
async def test_forged_admin_snapshot_is_rejected(guard, auth_service, store, policy, session_store):
    account = await _sign_in_as(auth_service, store, policy, "r1@x.com", Role.RECRUITER)
    session_store.set(account.model_copy(update={"role": Role.ADMIN}))

    # The stored row still says recruiter
    assert await guard.check(require_admin=True) == GuardDecision.REDIRECT_ADMIN_HOME


@pytest.mark.asyncio
async def test_lookup_error_redirects_to_login(guard, auth_service):
    with mock.patch.object(auth_service, "get_current_user", side_effect=RuntimeError("boom")):
        assert await guard.check() == GuardDecision.REDIRECT_LOGIN


def test_redirect_paths(guard):
    assert guard.redirect_path(GuardDecision.REDIRECT_LOGIN) == "/login"
    assert guard.redirect_path(GuardDecision.REDIRECT_ADMIN_HOME) == "/admin"
    assert guard.redirect_path(GuardDecision.ALLOW) is None
