"""Web Push subscriptions (one row per browser endpoint)."""
from datetime import datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from .user import utcnow


class PushSubscription(SQLModel, table=True):
    __tablename__ = "push_subscriptions"
    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    endpoint: str = Field(unique=True, index=True)  # re-subscribing the same endpoint overwrites the row
    p256dh: str = ""  # client public key (base64url)
    auth: str = ""    # auth secret (base64url)
    user_agent: str | None = None
    last_used_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    def subscription_info(self) -> dict:
        """Shape expected by pywebpush."""
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}
