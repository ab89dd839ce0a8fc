from .push_subscription import PushSubscription
from .user import User, utcnow

__all__ = [
    "PushSubscription",
    "User",
    "utcnow",
]
