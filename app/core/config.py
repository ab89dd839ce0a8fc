from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

# .env at project root: app/core/config.py -> app/core -> app -> root
_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _ROOT / ".env"


class Settings(BaseSettings):
    # Token signing (HS256). Override in every real deployment.
    secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24  # 24h
    bcrypt_rounds: int = 10
    database_url: str = "sqlite:///./taskmanager.db"
    # CORS: comma separated origins, "*" for any
    cors_origins: str = "*"
    rate_limit_per_minute: int = 60
    rate_limit_register_per_minute: int = 3
    rate_limit_login: str = "5/minute;20/hour"
    environment: str = "development"
    # Web Push (VAPID, base64url). Push is disabled while either key is empty.
    vapid_public_key: str = ""
    vapid_private_key: str = ""
    vapid_email: str = "admin@taskmanager.com"
    push_icon: str = "/logo192.png"

    model_config = {
        "env_file": _ENV_FILE if _ENV_FILE.is_file() else ".env",
        "extra": "ignore",
    }

    @field_validator("vapid_public_key", "vapid_private_key", "vapid_email", mode="before")
    @classmethod
    def strip_keys(cls, v: str | None) -> str:
        """Copy/paste whitespace around keys breaks the push service handshake."""
        return (v or "").strip()


settings = Settings()
