"""Password hashing and access token issue/verify."""
from datetime import datetime, timedelta, timezone

from app.core.security import (
    Identity,
    TokenConfig,
    TokenIssuer,
    hash_password,
    verify_password,
)


def test_hash_is_salted_and_verifies():
    h1 = hash_password("pw123", rounds=4)
    h2 = hash_password("pw123", rounds=4)
    assert h1 != h2
    assert "pw123" not in h1
    assert verify_password("pw123", h1)
    assert verify_password("pw123", h2)
    assert not verify_password("pw124", h1)


def test_verify_password_malformed_hash_is_false():
    assert verify_password("pw123", "not-a-bcrypt-hash") is False


def test_passwords_beyond_bcrypt_limit_are_truncated():
    base = "a" * 72
    h = hash_password(base + "tail-one", rounds=4)
    assert verify_password(base + "tail-two", h)


def test_token_roundtrip(issuer: TokenIssuer):
    token = issuer.issue(Identity(id=7, username="alice"))
    claims = issuer.verify(token)
    assert claims is not None
    assert claims.subject == 7
    assert claims.username == "alice"
    assert claims.expires_at > claims.issued_at
    assert claims.expires_at - claims.issued_at == timedelta(minutes=30)


def test_expired_token_rejected(issuer: TokenIssuer):
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    token = issuer.issue(Identity(id=7, username="alice"), now=past)
    assert issuer.verify(token) is None


def test_tampered_signature_rejected(issuer: TokenIssuer):
    token = issuer.issue(Identity(id=7, username="alice"))
    i = len(token) - 10  # inside the signature segment
    flipped = "A" if token[i] != "A" else "B"
    tampered = token[:i] + flipped + token[i + 1 :]
    assert tampered != token
    assert issuer.verify(tampered) is None


def test_tampered_payload_rejected(issuer: TokenIssuer):
    token = issuer.issue(Identity(id=7, username="alice"))
    header, payload, sig = token.split(".")
    other = issuer.issue(Identity(id=8, username="mallory")).split(".")[1]
    assert issuer.verify(".".join([header, other, sig])) is None


def test_token_from_other_secret_rejected(issuer: TokenIssuer):
    foreign = TokenIssuer(TokenConfig(secret_key="some-other-secret"))
    token = foreign.issue(Identity(id=7, username="alice"))
    assert issuer.verify(token) is None


def test_malformed_token_rejected(issuer: TokenIssuer):
    assert issuer.verify("") is None
    assert issuer.verify("not.a.jwt") is None
    assert issuer.verify("garbage") is None
