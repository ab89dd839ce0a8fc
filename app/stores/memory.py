"""Dict-backed stores with the same semantics as the SQL ones (unit tests, local experiments)."""
from itertools import count

from app.core.errors import DuplicateUsernameError
from app.models import PushSubscription, User, utcnow


class MemoryUserStore:
    def __init__(self):
        self._rows: dict[int, User] = {}
        self._ids = count(1)

    def get(self, user_id: int) -> User | None:
        return self._rows.get(user_id)

    def get_by_username(self, username: str) -> User | None:
        for user in self._rows.values():
            if user.username == username:
                return user
        return None

    def add(self, username: str, hashed_password: str) -> User:
        if self.get_by_username(username) is not None:
            raise DuplicateUsernameError()
        user = User(id=next(self._ids), username=username, hashed_password=hashed_password)
        self._rows[user.id] = user
        return user

    def update_password(self, user_id: int, hashed_password: str) -> None:
        user = self._rows.get(user_id)
        if user is not None:
            user.hashed_password = hashed_password

    def delete(self, user_id: int) -> bool:
        return self._rows.pop(user_id, None) is not None


class MemorySubscriptionStore:
    def __init__(self):
        self._by_endpoint: dict[str, PushSubscription] = {}
        self._ids = count(1)

    def get_by_endpoint(self, endpoint: str) -> PushSubscription | None:
        return self._by_endpoint.get(endpoint)

    def list_for_user(self, user_id: int) -> list[PushSubscription]:
        rows = [s for s in self._by_endpoint.values() if s.user_id == user_id]
        return sorted(rows, key=lambda s: s.id or 0)

    def upsert(
        self,
        user_id: int,
        endpoint: str,
        p256dh: str,
        auth: str,
        user_agent: str | None = None,
    ) -> PushSubscription:
        row = self._by_endpoint.get(endpoint)
        if row is None:
            row = PushSubscription(id=next(self._ids), user_id=user_id, endpoint=endpoint)
            self._by_endpoint[endpoint] = row
        row.user_id = user_id
        row.p256dh = p256dh
        row.auth = auth
        row.user_agent = user_agent
        row.last_used_at = utcnow()
        return row

    def delete(self, user_id: int, endpoint: str) -> bool:
        row = self._by_endpoint.get(endpoint)
        if row is None or row.user_id != user_id:
            return False
        del self._by_endpoint[endpoint]
        return True

    def delete_endpoint(self, endpoint: str) -> bool:
        return self._by_endpoint.pop(endpoint, None) is not None

    def delete_for_user(self, user_id: int) -> int:
        doomed = [e for e, s in self._by_endpoint.items() if s.user_id == user_id]
        for endpoint in doomed:
            del self._by_endpoint[endpoint]
        return len(doomed)

    def touch(self, endpoint: str) -> None:
        row = self._by_endpoint.get(endpoint)
        if row is not None:
            row.last_used_at = utcnow()
