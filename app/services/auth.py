"""Login validation, token minting and account lifecycle on top of a UserStore."""
import logging

from app.core.errors import InvalidCredentialsError
from app.core.security import (
    DEFAULT_BCRYPT_ROUNDS,
    Claims,
    Identity,
    TokenIssuer,
    dummy_hash,
    hash_password,
    verify_password,
)
from app.models import User
from app.stores import SubscriptionStore, UserStore

log = logging.getLogger("taskmanager.auth")


class AuthService:
    def __init__(
        self,
        users: UserStore,
        issuer: TokenIssuer,
        subscriptions: SubscriptionStore | None = None,
        bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS,
    ):
        self.users = users
        self.issuer = issuer
        self.subscriptions = subscriptions
        self.bcrypt_rounds = bcrypt_rounds

    def validate(self, username: str, password: str) -> Identity | None:
        """
        Fails closed: unknown username and wrong password both return None.
        An unknown username still pays for one bcrypt comparison.
        """
        user = self.users.get_by_username(username)
        if user is None or user.id is None:
            verify_password(password, dummy_hash(self.bcrypt_rounds))
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return Identity(id=user.id, username=user.username)

    def issue_token(self, identity: Identity) -> str:
        return self.issuer.issue(identity)

    def login(self, username: str, password: str) -> str:
        identity = self.validate(username, password)
        if identity is None:
            log.info("failed login for username=%s", username)
            raise InvalidCredentialsError()
        log.info("login user_id=%s", identity.id)
        return self.issue_token(identity)

    def register(self, username: str, password: str) -> User:
        """Raises DuplicateUsernameError when the username is taken."""
        user = self.users.add(username, hash_password(password, self.bcrypt_rounds))
        log.info("registered user_id=%s username=%s", user.id, user.username)
        return user

    def resolve(self, claims: Claims) -> User | None:
        """User behind a verified token; None if it was deleted or renamed since issuance."""
        user = self.users.get(claims.subject)
        if user is None:
            return None
        if not claims.username or user.username != claims.username:
            log.warning("token username mismatch for user_id=%s", claims.subject)
            return None
        return user

    def change_password(self, user: User, current_password: str, new_password: str) -> None:
        user_id = user.id
        if not verify_password(current_password, user.hashed_password):
            raise InvalidCredentialsError("Current password is incorrect")
        self.users.update_password(user_id, hash_password(new_password, self.bcrypt_rounds))
        log.info("password changed user_id=%s", user_id)

    def delete_account(self, user: User, password: str) -> None:
        """Deletes the user and every push subscription they own."""
        user_id = user.id
        if not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError("Password is incorrect")
        removed = 0
        if self.subscriptions is not None:
            removed = self.subscriptions.delete_for_user(user_id)
        self.users.delete(user_id)
        log.info("account deleted user_id=%s subscriptions_removed=%s", user_id, removed)
