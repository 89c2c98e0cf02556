import logging
from typing import Optional, Tuple

from fastapi import Request

from catalog_site import schemas
from catalog_site.core.errors import AuthenticationError, LockoutError
from catalog_site.core.lockout import LoginLockout
from catalog_site.core.sessions import SessionStore
from catalog_site.db.storage import Storage

logger = logging.getLogger("catalog_site.auth")

SESSION_TOKEN_KEY = "session_token"
INVALID_CREDENTIALS = "Invalid username or password"


class Authenticator:
    """Credential checks, failed-login lockout and server-side sessions."""

    def __init__(self, storage: Storage, sessions: SessionStore, lockout: LoginLockout):
        self.storage = storage
        self.sessions = sessions
        self.lockout = lockout

    def login(self, username: str, password: str, previous_token: Optional[str] = None) -> Tuple[schemas.User, str]:
        """Return the user and a fresh session token.

        Raises LockoutError while the username is locked and AuthenticationError
        for an unknown username or a wrong password alike.
        """
        retry_after = self.lockout.retry_after(username)
        if retry_after > 0:
            logger.warning("login_locked", extra={"username": username, "retry_after": retry_after})
            raise LockoutError(retry_after)

        user = self.storage.validate_user(username, password)
        if user is None:
            locked = self.lockout.register_failure(username)
            logger.warning(
                "login_failed",
                extra={"username": username, "attempts": self.lockout.failure_count(username), "locked": locked},
            )
            raise AuthenticationError(INVALID_CREDENTIALS)

        self.lockout.reset(username)
        self.sessions.destroy(previous_token)
        self.sessions.purge_expired()
        token = self.sessions.create(user.id)
        logger.info("login_success", extra={"user_id": user.id, "username": user.username})
        return user, token

    def logout(self, token: Optional[str]) -> None:
        user_id = self.sessions.resolve(token)
        self.sessions.destroy(token)
        logger.info("logout", extra={"user_id": user_id})

    def current_user(self, token: Optional[str]) -> Optional[schemas.User]:
        user_id = self.sessions.resolve(token)
        if user_id is None:
            return None
        user = self.storage.get_user(user_id)
        if user is None:
            self.sessions.destroy(token)
        return user


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def session_token(request: Request) -> Optional[str]:
    return request.session.get(SESSION_TOKEN_KEY)
