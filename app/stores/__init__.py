"""Storage capabilities the services depend on (lookup by key, upsert, delete)."""
from typing import Protocol

from app.models import PushSubscription, User


class UserStore(Protocol):
    def get(self, user_id: int) -> User | None: ...

    def get_by_username(self, username: str) -> User | None: ...

    def add(self, username: str, hashed_password: str) -> User: ...

    def update_password(self, user_id: int, hashed_password: str) -> None: ...

    def delete(self, user_id: int) -> bool: ...


class SubscriptionStore(Protocol):
    def get_by_endpoint(self, endpoint: str) -> PushSubscription | None: ...

    def list_for_user(self, user_id: int) -> list[PushSubscription]: ...

    def upsert(
        self,
        user_id: int,
        endpoint: str,
        p256dh: str,
        auth: str,
        user_agent: str | None = None,
    ) -> PushSubscription: ...

    def delete(self, user_id: int, endpoint: str) -> bool: ...

    def delete_endpoint(self, endpoint: str) -> bool: ...

    def delete_for_user(self, user_id: int) -> int: ...

    def touch(self, endpoint: str) -> None: ...


__all__ = ["SubscriptionStore", "UserStore"]
