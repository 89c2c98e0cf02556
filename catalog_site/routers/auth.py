import logging

from fastapi import APIRouter, Depends, Request

from catalog_site import schemas
from catalog_site.core.auth import SESSION_TOKEN_KEY, Authenticator, get_authenticator, session_token
from catalog_site.core.errors import AuthenticationError

router = APIRouter(prefix="/api", tags=["Auth"])
logger = logging.getLogger("catalog_site.auth")


def public_user(user: schemas.User) -> schemas.UserPublic:
    return schemas.UserPublic(id=user.id, username=user.username, role=user.role)


@router.post("/login", response_model=schemas.UserEnvelope)
@router.post("/auth/login", response_model=schemas.UserEnvelope, include_in_schema=False)
def login(
    request: Request,
    payload: schemas.LoginRequest,
    authenticator: Authenticator = Depends(get_authenticator),
):
    user, token = authenticator.login(payload.username, payload.password, previous_token=session_token(request))
    request.session[SESSION_TOKEN_KEY] = token
    return schemas.UserEnvelope(user=public_user(user))


@router.post("/logout", response_model=schemas.MessageResponse)
def logout(request: Request, authenticator: Authenticator = Depends(get_authenticator)):
    authenticator.logout(session_token(request))
    request.session.clear()
    return schemas.MessageResponse(message="Logged out successfully")


@router.get("/current-user", response_model=schemas.UserEnvelope)
@router.get("/auth/user", response_model=schemas.UserEnvelope, include_in_schema=False)
def current_user(request: Request, authenticator: Authenticator = Depends(get_authenticator)):
    user = authenticator.current_user(session_token(request))
    if user is None:
        raise AuthenticationError("Not authenticated")
    return schemas.UserEnvelope(user=public_user(user))
