import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.security import Claims, TokenConfig, TokenIssuer
from app.models import User
from app.services.auth import AuthService
from app.services.notifier import NotificationDispatcher
from app.services.push import PushSubscriptionManager, VapidConfig
from app.stores.sql import SqlSubscriptionStore, SqlUserStore

log = logging.getLogger("taskmanager.auth")

security = HTTPBearer(auto_error=False)


def get_token_issuer() -> TokenIssuer:
    return TokenIssuer(TokenConfig.from_settings(settings))


def get_vapid_config() -> VapidConfig:
    return VapidConfig.from_settings(settings)


def get_auth_service(
    db: Session = Depends(get_db),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(
        users=SqlUserStore(db),
        issuer=issuer,
        subscriptions=SqlSubscriptionStore(db),
        bcrypt_rounds=settings.bcrypt_rounds,
    )


def get_push_manager(
    db: Session = Depends(get_db),
    vapid: VapidConfig = Depends(get_vapid_config),
) -> PushSubscriptionManager:
    return PushSubscriptionManager(SqlSubscriptionStore(db), vapid)


def get_dispatcher(
    db: Session = Depends(get_db),
    vapid: VapidConfig = Depends(get_vapid_config),
) -> NotificationDispatcher:
    return NotificationDispatcher(SqlSubscriptionStore(db), vapid, icon=settings.push_icon)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> Claims:
    if not credentials:
        raise _unauthorized("Not authenticated")
    claims = issuer.verify(credentials.credentials)
    if claims is None:
        raise _unauthorized("Invalid or expired token")
    return claims


def get_current_user(
    claims: Claims = Depends(get_current_claims),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    user = auth.resolve(claims)
    if user is None:
        log.info("token for unknown user_id=%s rejected", claims.subject)
        raise _unauthorized("Invalid token or user not found")
    return user
