import pytest

from catalog_site.core.auth import INVALID_CREDENTIALS, Authenticator
from catalog_site.core.errors import AuthenticationError, LockoutError
from catalog_site.core.lockout import LoginLockout
from catalog_site.core.sessions import SessionStore


@pytest.fixture()
def authenticator(storage, clock):
    return Authenticator(
        storage,
        SessionStore(max_age_seconds=30 * 24 * 60 * 60, clock=clock),
        LoginLockout(max_attempts=5, lock_seconds=15 * 60, clock=clock),
    )


def test_login_returns_user_and_resolvable_token(authenticator):
    user, token = authenticator.login("root", "root-password")

    assert user.username == "root"
    assert user.role == "super_admin"
    assert authenticator.current_user(token).id == user.id


def test_unknown_user_and_wrong_password_are_indistinguishable(authenticator):
    with pytest.raises(AuthenticationError) as unknown:
        authenticator.login("nobody", "root-password")
    with pytest.raises(AuthenticationError) as wrong:
        authenticator.login("root", "wrong-password")

    assert unknown.value.message == wrong.value.message == INVALID_CREDENTIALS
    assert unknown.value.status_code == wrong.value.status_code == 401


def test_username_match_is_case_sensitive(authenticator):
    with pytest.raises(AuthenticationError):
        authenticator.login("ROOT", "root-password")


def test_lockout_rejects_even_correct_password_until_it_expires(authenticator, clock):
    for _ in range(5):
        with pytest.raises(AuthenticationError):
            authenticator.login("root", "bad")

    with pytest.raises(LockoutError) as locked:
        authenticator.login("root", "root-password")
    assert locked.value.status_code == 429
    assert locked.value.remaining_minutes == 15
    assert "15 minutes" in locked.value.message

    clock.advance(10 * 60)
    with pytest.raises(LockoutError) as still_locked:
        authenticator.login("root", "root-password")
    assert still_locked.value.remaining_minutes == 5

    clock.advance(5 * 60)
    user, _ = authenticator.login("root", "root-password")
    assert user.username == "root"
    assert authenticator.lockout.failure_count("root") == 0


def test_success_resets_failure_counter(authenticator):
    for _ in range(4):
        with pytest.raises(AuthenticationError):
            authenticator.login("editor", "bad")
    authenticator.login("editor", "editor-password")

    # four more failures are allowed again before locking
    for _ in range(4):
        with pytest.raises(AuthenticationError):
            authenticator.login("editor", "bad")
    authenticator.login("editor", "editor-password")


def test_unknown_usernames_are_locked_too(authenticator):
    for _ in range(5):
        with pytest.raises(AuthenticationError):
            authenticator.login("ghost", "whatever")
    with pytest.raises(LockoutError):
        authenticator.login("ghost", "whatever")


def test_logout_is_idempotent(authenticator):
    _, token = authenticator.login("root", "root-password")

    authenticator.logout(token)
    authenticator.logout(token)
    authenticator.logout(None)
    assert authenticator.current_user(token) is None


def test_login_rotates_previous_session(authenticator):
    _, first = authenticator.login("root", "root-password")
    _, second = authenticator.login("root", "root-password", previous_token=first)

    assert first != second
    assert authenticator.current_user(first) is None
    assert authenticator.current_user(second).username == "root"


def test_session_expires_after_thirty_days(authenticator, clock):
    _, token = authenticator.login("root", "root-password")

    clock.advance(29 * 24 * 60 * 60)
    assert authenticator.current_user(token) is not None
    clock.advance(24 * 60 * 60)
    assert authenticator.current_user(token) is None
