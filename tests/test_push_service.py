"""PushSubscriptionManager against the in-memory store."""
import pytest

from app.core.errors import PushNotConfiguredError
from app.services.push import PushSubscriptionManager, VapidConfig

EP = "https://fcm.googleapis.com/fcm/send/abc123"


def test_public_key(push_manager: PushSubscriptionManager):
    assert push_manager.get_public_key() == "BPublicKeyForTests"


def test_public_key_not_configured(sub_store):
    manager = PushSubscriptionManager(sub_store, VapidConfig())
    assert manager.vapid.enabled is False
    with pytest.raises(PushNotConfiguredError):
        manager.get_public_key()


def test_vapid_claims_subject():
    assert VapidConfig(email="ops@example.com").claims_subject == "mailto:ops@example.com"
    assert VapidConfig(email="mailto:ops@example.com").claims_subject == "mailto:ops@example.com"


def test_resubscribe_same_endpoint_overwrites_keys(push_manager: PushSubscriptionManager):
    first = push_manager.subscribe(1, EP, "old-p256dh", "old-auth")
    second = push_manager.subscribe(1, EP, "new-p256dh", "new-auth", user_agent="Firefox")
    subs = push_manager.list_subscriptions(1)
    assert len(subs) == 1
    assert first.id == second.id
    assert subs[0].p256dh == "new-p256dh"
    assert subs[0].auth == "new-auth"
    assert subs[0].user_agent == "Firefox"


def test_resubscribe_moves_endpoint_to_new_owner(push_manager: PushSubscriptionManager):
    push_manager.subscribe(1, EP, "k", "a")
    push_manager.subscribe(2, EP, "k2", "a2")
    assert push_manager.list_subscriptions(1) == []
    assert [s.endpoint for s in push_manager.list_subscriptions(2)] == [EP]


def test_unsubscribe_is_idempotent(push_manager: PushSubscriptionManager):
    push_manager.subscribe(1, EP, "k", "a")
    assert push_manager.unsubscribe(1, EP) is True
    assert push_manager.unsubscribe(1, EP) is False
    assert push_manager.unsubscribe(1, "https://push.example/never-seen") is False


def test_unsubscribe_only_touches_own_endpoint(push_manager: PushSubscriptionManager):
    push_manager.subscribe(1, EP, "k", "a")
    assert push_manager.unsubscribe(2, EP) is False
    assert len(push_manager.list_subscriptions(1)) == 1


def test_deactivate_all_leaves_other_users(push_manager: PushSubscriptionManager):
    push_manager.subscribe(1, "https://push.example/1a", "k", "a")
    push_manager.subscribe(1, "https://push.example/1b", "k", "a")
    push_manager.subscribe(2, "https://push.example/2a", "k", "a")
    assert push_manager.deactivate_all(1) == 2
    assert push_manager.list_subscriptions(1) == []
    assert [s.endpoint for s in push_manager.list_subscriptions(2)] == ["https://push.example/2a"]
    assert push_manager.deactivate_all(1) == 0
