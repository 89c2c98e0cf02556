from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request

from catalog_site import schemas
from catalog_site.core.auth import Authenticator, get_authenticator, session_token
from catalog_site.core.errors import AuthenticationError, AuthorizationError


@dataclass(frozen=True)
class ProtectedAccount:
    """An account that only its owner may modify, even among super admins."""

    user_id: Optional[int] = None
    username: Optional[str] = None

    def matches(self, user_id: Optional[int] = None, username: Optional[str] = None) -> bool:
        if self.user_id is not None and user_id is not None and user_id == self.user_id:
            return True
        if self.username is not None and username is not None and username == self.username:
            return True
        return False


def can_manage_account(
    actor: schemas.User,
    protected: ProtectedAccount,
    target_id: Optional[int] = None,
    target_username: Optional[str] = None,
) -> bool:
    if actor.role != "super_admin":
        return False
    if not protected.matches(target_id, target_username):
        return True
    return protected.matches(actor.id, actor.username)


def ensure_can_manage_account(
    actor: schemas.User,
    protected: ProtectedAccount,
    target_id: Optional[int] = None,
    target_username: Optional[str] = None,
) -> None:
    if not can_manage_account(actor, protected, target_id=target_id, target_username=target_username):
        raise AuthorizationError("Cannot modify super admin account")


def get_protected_account(request: Request) -> ProtectedAccount:
    return request.app.state.protected_account


def require_user(request: Request, authenticator: Authenticator = Depends(get_authenticator)) -> schemas.User:
    user = authenticator.current_user(session_token(request))
    if user is None:
        raise AuthenticationError("Unauthorized")
    return user


def require_super_admin(
    request: Request, authenticator: Authenticator = Depends(get_authenticator)
) -> schemas.User:
    user = authenticator.current_user(session_token(request))
    if user is None or user.role != "super_admin":
        raise AuthorizationError("Forbidden - requires super admin privileges")
    return user
