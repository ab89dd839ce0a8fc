"""Per-user Web Push subscriptions and the VAPID key handed to browsers."""
import logging
from dataclasses import dataclass

from app.core.config import Settings
from app.core.errors import PushNotConfiguredError
from app.models import PushSubscription
from app.stores import SubscriptionStore

log = logging.getLogger("taskmanager.push")


@dataclass(frozen=True)
class VapidConfig:
    public_key: str = ""
    private_key: str = ""
    email: str = "admin@taskmanager.com"

    @classmethod
    def from_settings(cls, s: Settings) -> "VapidConfig":
        return cls(public_key=s.vapid_public_key, private_key=s.vapid_private_key, email=s.vapid_email)

    @property
    def enabled(self) -> bool:
        return bool(self.public_key and self.private_key)

    @property
    def claims_subject(self) -> str:
        return self.email if self.email.startswith("mailto:") else f"mailto:{self.email}"


def short_endpoint(endpoint: str, n: int = 48) -> str:
    return endpoint if len(endpoint) <= n else endpoint[:n] + "..."


class PushSubscriptionManager:
    def __init__(self, store: SubscriptionStore, vapid: VapidConfig):
        self.store = store
        self.vapid = vapid

    def get_public_key(self) -> str:
        if not self.vapid.public_key:
            raise PushNotConfiguredError()
        return self.vapid.public_key

    def subscribe(
        self,
        user_id: int,
        endpoint: str,
        p256dh: str,
        auth: str,
        user_agent: str | None = None,
    ) -> PushSubscription:
        """Upsert by endpoint: re-subscribing overwrites keys and owner."""
        sub = self.store.upsert(user_id, endpoint, p256dh, auth, user_agent)
        log.info("push subscription saved user_id=%s endpoint=%s", user_id, short_endpoint(endpoint))
        return sub

    def unsubscribe(self, user_id: int, endpoint: str) -> bool:
        """Idempotent; returns whether a row was actually removed."""
        removed = self.store.delete(user_id, endpoint)
        log.info(
            "push unsubscribe user_id=%s endpoint=%s removed=%s",
            user_id,
            short_endpoint(endpoint),
            removed,
        )
        return removed

    def deactivate_all(self, user_id: int) -> int:
        count = self.store.delete_for_user(user_id)
        log.info("push subscriptions deactivated user_id=%s count=%s", user_id, count)
        return count

    def list_subscriptions(self, user_id: int) -> list[PushSubscription]:
        return self.store.list_for_user(user_id)
