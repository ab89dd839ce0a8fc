from datetime import datetime

from pydantic import BaseModel, field_validator


class SubscriptionKeys(BaseModel):
    p256dh: str
    auth: str


class PushSubscriptionIn(BaseModel):
    """Shape of PushSubscription.toJSON() in the browser."""
    endpoint: str
    keys: SubscriptionKeys

    @field_validator("endpoint")
    @classmethod
    def endpoint_is_url(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith(("https://", "http://")):
            raise ValueError("endpoint must be an http(s) URL.")
        return v


class PushSubscriptionOut(BaseModel):
    id: int
    endpoint: str
    user_agent: str | None = None
    last_used_at: datetime | None = None
    created_at: datetime | None = None


class VapidPublicKey(BaseModel):
    publicKey: str
