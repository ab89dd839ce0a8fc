from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import bcrypt
from jose import JWTError, jwt

from .config import Settings

MAX_BCRYPT_BYTES = 72  # bcrypt limit
DEFAULT_BCRYPT_ROUNDS = 10


def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    p = password.encode("utf-8")[:MAX_BCRYPT_BYTES]
    return bcrypt.hashpw(p, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    p = plain.encode("utf-8")[:MAX_BCRYPT_BYTES]
    try:
        return bcrypt.checkpw(p, hashed.encode("utf-8"))
    except ValueError:
        # malformed / foreign hash format
        return False


@lru_cache(maxsize=8)
def dummy_hash(rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Hash compared against when the username is unknown, so both paths cost one bcrypt check."""
    return hash_password("not-a-real-password", rounds)


@dataclass(frozen=True)
class Identity:
    id: int
    username: str


@dataclass(frozen=True)
class Claims:
    subject: int
    username: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenConfig:
    secret_key: str
    algorithm: str = "HS256"
    expire_minutes: int = 60 * 24

    @classmethod
    def from_settings(cls, s: Settings) -> "TokenConfig":
        return cls(
            secret_key=s.secret_key,
            algorithm=s.jwt_algorithm,
            expire_minutes=s.access_token_expire_minutes,
        )


class TokenIssuer:
    """Signs and verifies access tokens (JWT, symmetric key)."""

    def __init__(self, config: TokenConfig):
        self.config = config

    def issue(self, identity: Identity, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        expire = issued_at + timedelta(minutes=self.config.expire_minutes)
        to_encode = {
            "sub": str(identity.id),
            "username": identity.username,
            "iat": issued_at,
            "exp": expire,
        }
        return jwt.encode(to_encode, self.config.secret_key, algorithm=self.config.algorithm)

    def verify(self, token: str) -> Claims | None:
        """Returns None for a bad signature, malformed token, missing subject or past expiry."""
        try:
            payload = jwt.decode(token, self.config.secret_key, algorithms=[self.config.algorithm])
        except JWTError:
            return None
        sub = payload.get("sub")
        exp = payload.get("exp")
        if sub is None or exp is None:
            return None
        try:
            subject = int(sub)
        except (TypeError, ValueError):
            return None
        iat = payload.get("iat", exp)
        return Claims(
            subject=subject,
            username=str(payload.get("username") or ""),
            issued_at=datetime.fromtimestamp(int(iat), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(int(exp), tz=timezone.utc),
        )
