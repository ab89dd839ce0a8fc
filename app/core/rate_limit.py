"""
IP based rate limiting (SlowAPI).
Credential endpoints get their own tighter budgets; push writes share the general per-minute budget.
"""
from fastapi import Request

from slowapi import Limiter

from .config import settings

REGISTER_LIMIT = f"{settings.rate_limit_register_per_minute}/minute;100/hour"
LOGIN_LIMIT = settings.rate_limit_login
PUSH_WRITE_LIMIT = f"{settings.rate_limit_per_minute}/minute"


def _get_client_ip(request: Request) -> str:
    """First X-Forwarded-For hop when behind a proxy; blank hops are skipped."""
    xff = request.headers.get("x-forwarded-for")
    if xff:
        for hop in xff.split(","):
            if hop.strip():
                return hop.strip()
    if request.client and request.client.host:
        return request.client.host
    return "127.0.0.1"


limiter = Limiter(key_func=_get_client_ip)
