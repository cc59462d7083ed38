from datetime import timedelta

import pytest

from codeshare.api.v1.services.session_service import ANONYMOUS
from codeshare.core.enums import EventName, SessionState
from codeshare.core.exception import AuthError, PermissionDenied

from conftest import ADMIN_EMAIL, PASSWORD, USER_EMAIL


@pytest.mark.asyncio
async def test_sign_up_enters_authenticated_state_with_ledger(container, recorder):
    session = await container.sessions.sign_up(USER_EMAIL, PASSWORD)

    assert session.state is SessionState.AUTHENTICATED
    assert session.is_authenticated
    assert session.email == USER_EMAIL
    assert session.is_admin is False
    assert (await container.ledger.get_entry(session.uid)).points == 0
    assert recorder.of(EventName.SESSION_CHANGED) == [
        {"uid": session.uid, "state": "authenticated", "is_admin": False}
    ]


@pytest.mark.asyncio
async def test_admin_role_follows_allow_list_case_insensitively(container):
    session = await container.sessions.sign_up("Admin@CodeShare.local", PASSWORD)

    assert session.is_admin is True
    assert session.require_admin() is session.identity
    assert container.sessions.is_admin_email(f"  {ADMIN_EMAIL.upper()} ")
    assert not container.sessions.is_admin_email(None)


@pytest.mark.asyncio
async def test_sign_in_keeps_existing_balance(container):
    first = await container.sessions.sign_up(USER_EMAIL, PASSWORD)
    await container.ledger.credit(first.uid, 15)

    again = await container.sessions.sign_in(USER_EMAIL, PASSWORD)

    assert again.uid == first.uid
    assert await container.ledger.get_points(again.uid) == 15


@pytest.mark.asyncio
async def test_bad_credentials_raise_auth_error(container):
    await container.sessions.sign_up(USER_EMAIL, PASSWORD)

    with pytest.raises(AuthError):
        await container.sessions.sign_in(USER_EMAIL, "wrong-password")
    with pytest.raises(AuthError):
        await container.sessions.sign_in("nobody@example.com", PASSWORD)
    with pytest.raises(AuthError):
        await container.sessions.sign_up(USER_EMAIL, PASSWORD)
    with pytest.raises(AuthError):
        await container.sessions.sign_up("new@example.com", "123")


@pytest.mark.asyncio
async def test_resume_by_token(container):
    session = await container.sessions.sign_up(USER_EMAIL, PASSWORD)

    resumed = await container.sessions.resume(session.identity.id_token)

    assert resumed.uid == session.uid
    assert resumed.is_authenticated
    assert await container.sessions.resume(None) is ANONYMOUS
    with pytest.raises(AuthError):
        await container.sessions.resume("forged-token")


@pytest.mark.asyncio
async def test_sign_out_revokes_tokens(container, recorder):
    session = await container.sessions.sign_up(USER_EMAIL, PASSWORD)

    after = await container.sessions.sign_out(session)

    assert after is ANONYMOUS
    assert recorder.of(EventName.SESSION_CHANGED)[-1]["state"] == "unauthenticated"
    with pytest.raises(AuthError):
        await container.sessions.resume(session.identity.id_token)
    assert await container.sessions.sign_out(ANONYMOUS) is ANONYMOUS


def test_anonymous_session_requirements():
    assert ANONYMOUS.uid is None
    with pytest.raises(AuthError):
        ANONYMOUS.require_user()
    with pytest.raises(AuthError):
        ANONYMOUS.require_admin()


@pytest.mark.asyncio
async def test_regular_user_is_not_admin(container):
    session = await container.sessions.sign_up(USER_EMAIL, PASSWORD)

    with pytest.raises(PermissionDenied):
        session.require_admin()


@pytest.mark.asyncio
async def test_admin_activity_expires_after_ttl(container, clock):
    sessions = container.sessions
    assert sessions.admin_active() is False

    admin = await sessions.sign_up(ADMIN_EMAIL, PASSWORD)
    assert sessions.admin_active() is True

    clock.advance(seconds=3599)
    assert sessions.admin_active() is True

    await sessions.resume(admin.identity.id_token)
    clock.advance(seconds=3599)
    assert sessions.admin_active() is True

    clock.advance(seconds=2)
    assert sessions.admin_active() is False
    assert sessions.admin_active(clock() - timedelta(seconds=10)) is False


@pytest.mark.asyncio
async def test_admin_sign_out_clears_activity(container):
    admin = await container.sessions.sign_up(ADMIN_EMAIL, PASSWORD)

    await container.sessions.sign_out(admin)

    assert container.sessions.admin_active() is False
