import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.api.deps import get_auth_service, get_current_user
from app.core.errors import DuplicateUsernameError, InvalidCredentialsError
from app.core.rate_limit import LOGIN_LIMIT, REGISTER_LIMIT, limiter
from app.models import User
from app.schemas import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    Token,
    UserCreate,
    UserLogin,
    UserResponse,
)
from app.services.auth import AuthService

log = logging.getLogger("taskmanager.auth")

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id or 0, username=user.username, created_at=user.created_at)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(REGISTER_LIMIT)
def register(
    request: Request,
    body: UserCreate,
    auth: AuthService = Depends(get_auth_service),
):
    try:
        user = auth.register(body.username, body.password)
    except DuplicateUsernameError as e:
        log.warning("username already exists: %s", body.username)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return _user_response(user)


@router.post("/login", response_model=Token)
@limiter.limit(LOGIN_LIMIT)
def login(
    request: Request,
    body: UserLogin,
    auth: AuthService = Depends(get_auth_service),
):
    try:
        token = auth.login(body.username, body.password)
    except InvalidCredentialsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return Token(access_token=token)


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    """Identity behind the bearer token."""
    return _user_response(user)


@router.post("/change-password")
def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Requires the current password; tokens issued earlier stay valid until they expire."""
    try:
        auth.change_password(user, body.current_password, body.new_password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)
    return {"message": "Password updated"}


@router.post("/delete-account")
def delete_account(
    body: DeleteAccountRequest,
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    """Deletes the account and its push subscriptions after password confirmation."""
    try:
        auth.delete_account(user, body.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)
    return {"message": "Account deleted"}
