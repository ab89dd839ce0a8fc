"""SQLModel-backed stores; uniqueness comes from the database indexes."""

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.errors import DuplicateUsernameError
from app.models import PushSubscription, User, utcnow


class SqlUserStore:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> User | None:
        return self.db.get(User, user_id)

    def get_by_username(self, username: str) -> User | None:
        return self.db.exec(select(User).where(User.username == username)).first()

    def add(self, username: str, hashed_password: str) -> User:
        user = User(username=username, hashed_password=hashed_password)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateUsernameError() from exc
        self.db.refresh(user)
        return user

    def update_password(self, user_id: int, hashed_password: str) -> None:
        user = self.db.get(User, user_id)
        if user is None:
            return
        user.hashed_password = hashed_password
        self.db.add(user)
        self.db.commit()

    def delete(self, user_id: int) -> bool:
        user = self.db.get(User, user_id)
        if user is None:
            return False
        self.db.delete(user)
        self.db.commit()
        return True


class SqlSubscriptionStore:
    def __init__(self, db: Session):
        self.db = db

    def get_by_endpoint(self, endpoint: str) -> PushSubscription | None:
        return self.db.exec(select(PushSubscription).where(PushSubscription.endpoint == endpoint)).first()

    def list_for_user(self, user_id: int) -> list[PushSubscription]:
        stmt = select(PushSubscription).where(PushSubscription.user_id == user_id).order_by(PushSubscription.id)
        return list(self.db.exec(stmt).all())

    def _overwrite(self, row: PushSubscription, user_id: int, p256dh: str, auth: str, user_agent: str | None) -> PushSubscription:
        row.user_id = user_id
        row.p256dh = p256dh
        row.auth = auth
        row.user_agent = user_agent
        row.last_used_at = utcnow()
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def upsert(
        self,
        user_id: int,
        endpoint: str,
        p256dh: str,
        auth: str,
        user_agent: str | None = None,
    ) -> PushSubscription:
        existing = self.get_by_endpoint(endpoint)
        if existing:
            return self._overwrite(existing, user_id, p256dh, auth, user_agent)
        row = PushSubscription(
            user_id=user_id,
            endpoint=endpoint,
            p256dh=p256dh,
            auth=auth,
            user_agent=user_agent,
            last_used_at=utcnow(),
        )
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            # concurrent insert of the same endpoint won; update that row instead
            self.db.rollback()
            existing = self.get_by_endpoint(endpoint)
            if existing is None:
                raise
            return self._overwrite(existing, user_id, p256dh, auth, user_agent)
        self.db.refresh(row)
        return row

    def delete(self, user_id: int, endpoint: str) -> bool:
        stmt = select(PushSubscription).where(
            PushSubscription.user_id == user_id,
            PushSubscription.endpoint == endpoint,
        )
        row = self.db.exec(stmt).first()
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def delete_endpoint(self, endpoint: str) -> bool:
        row = self.get_by_endpoint(endpoint)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True

    def delete_for_user(self, user_id: int) -> int:
        rows = self.list_for_user(user_id)
        for row in rows:
            self.db.delete(row)
        self.db.commit()
        return len(rows)

    def touch(self, endpoint: str) -> None:
        row = self.get_by_endpoint(endpoint)
        if row is None:
            return
        row.last_used_at = utcnow()
        self.db.add(row)
        self.db.commit()
