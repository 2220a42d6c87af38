"""End-to-end wiring through create_console."""
import pytest

from talent_console.core.schemas.auth import Role
from talent_console.core.security.guards import GuardDecision
from talent_console.core.session import InMemorySessionStore
from talent_console.factory import create_console


@pytest.fixture
def console(settings, identity_provider):
    return create_console(
        settings=settings,
        identity_provider=identity_provider,
        session_store=InMemorySessionStore(),
        create_db=True,
        seed=True,
    )


@pytest.mark.asyncio
async def test_admin_manages_recruiter(console):
    admin = await console.auth.admin_sign_in("admin@example.com", "admin123")
    assert admin.role == Role.ADMIN
    await console.auth.establish_session(admin)
    assert await console.guard.check(require_admin=True) == GuardDecision.ALLOW
    assert await console.accounts.is_current_user_admin() is True

    assert await console.accounts.create_recruiter("r1@x.com", "P@ssw0rd1", "R One") is True
    recruiters = await console.accounts.get_recruiters()
    assert [r.email for r in recruiters] == ["r1@x.com"]

    await console.auth.sign_out()
    assert await console.guard.check() == GuardDecision.REDIRECT_LOGIN

    recruiter = await console.auth.recruiter_sign_in("r1@x.com", "P@ssw0rd1")
    await console.auth.establish_session(recruiter)
    assert await console.guard.check() == GuardDecision.ALLOW
    assert await console.guard.check(require_admin=True) == GuardDecision.REDIRECT_ADMIN_HOME


@pytest.mark.asyncio
async def test_deactivation_ends_recruiter_session(console):
    await console.accounts.create_recruiter("r1@x.com", "P@ssw0rd1", "R One")
    recruiter = await console.auth.recruiter_sign_in("r1@x.com", "P@ssw0rd1")
    await console.auth.establish_session(recruiter)

    assert await console.accounts.deactivate_recruiter(recruiter.id) is True

    assert await console.auth.get_current_user() is None
    assert await console.auth.recruiter_sign_in("r1@x.com", "P@ssw0rd1") is None
