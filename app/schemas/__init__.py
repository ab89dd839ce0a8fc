from .auth import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    Token,
    UserCreate,
    UserLogin,
    UserResponse,
)
from .push import PushSubscriptionIn, PushSubscriptionOut, SubscriptionKeys, VapidPublicKey

__all__ = [
    "ChangePasswordRequest",
    "DeleteAccountRequest",
    "PushSubscriptionIn",
    "PushSubscriptionOut",
    "SubscriptionKeys",
    "Token",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "VapidPublicKey",
]
