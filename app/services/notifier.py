"""
Best-effort Web Push delivery (pywebpush).
Each subscription is tried once; endpoints the push service reports as gone (404/410) are pruned.
Delivery failures are logged and counted, never raised to the caller.
"""
import json
import logging
from dataclasses import dataclass, field
from enum import Enum

from pywebpush import WebPushException, webpush

from app.services.push import VapidConfig, short_endpoint
from app.stores import SubscriptionStore

log = logging.getLogger("taskmanager.notifier")

GONE_STATUS_CODES = (404, 410)
DEFAULT_TTL = 24 * 60 * 60


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


@dataclass
class NotificationPayload:
    title: str
    message: str
    type: str = "general"
    id: str | None = None
    task_id: str | None = None
    priority: NotificationPriority = NotificationPriority.MEDIUM


@dataclass
class DeliveryReport:
    sent: int = 0
    failed: int = 0
    pruned: list[str] = field(default_factory=list)


def build_push_message(payload: NotificationPayload, icon: str = "/logo192.png") -> dict:
    """JSON body consumed by the service worker's push handler."""
    message = {
        "title": payload.title,
        "body": payload.message,
        "icon": icon,
        "badge": icon,
        "data": {
            "notificationId": payload.id,
            "taskId": payload.task_id,
            "type": payload.type,
            "url": f"/tasks/{payload.task_id}" if payload.task_id else "/",
        },
        "requireInteraction": payload.priority == NotificationPriority.URGENT,
        "tag": payload.type,
        "renotify": True,
    }
    if payload.task_id:
        message["actions"] = [{"action": "view", "title": "View Task", "icon": icon}]
    return message


class NotificationDispatcher:
    def __init__(self, store: SubscriptionStore, vapid: VapidConfig, icon: str = "/logo192.png", ttl: int = DEFAULT_TTL):
        self.store = store
        self.vapid = vapid
        self.icon = icon
        self.ttl = ttl

    def send_to_user(self, user_id: int, payload: NotificationPayload) -> DeliveryReport:
        report = DeliveryReport()
        if not self.vapid.enabled:
            log.debug("push disabled (VAPID keys missing), skipping user_id=%s", user_id)
            return report
        subscriptions = self.store.list_for_user(user_id)
        if not subscriptions:
            log.debug("no push subscriptions for user_id=%s", user_id)
            return report

        data = json.dumps(build_push_message(payload, self.icon))
        for sub in subscriptions:
            endpoint = sub.endpoint
            try:
                webpush(
                    subscription_info=sub.subscription_info(),
                    data=data,
                    vapid_private_key=self.vapid.private_key,
                    vapid_claims={"sub": self.vapid.claims_subject},
                    ttl=self.ttl,
                )
            except WebPushException as e:
                report.failed += 1
                status = e.response.status_code if e.response is not None else None
                log.warning(
                    "push failed user_id=%s endpoint=%s status=%s: %s",
                    user_id,
                    short_endpoint(endpoint),
                    status,
                    e,
                )
                if status in GONE_STATUS_CODES:
                    self.store.delete_endpoint(endpoint)
                    report.pruned.append(endpoint)
                continue
            except Exception:
                report.failed += 1
                log.exception("unexpected push error user_id=%s endpoint=%s", user_id, short_endpoint(endpoint))
                continue
            self.store.touch(endpoint)
            report.sent += 1

        log.info(
            "push delivery user_id=%s sent=%s failed=%s pruned=%s",
            user_id,
            report.sent,
            report.failed,
            len(report.pruned),
        )
        return report

    def send_to_users(self, user_ids: list[int], payload: NotificationPayload) -> DeliveryReport:
        total = DeliveryReport()
        for user_id in user_ids:
            r = self.send_to_user(user_id, payload)
            total.sent += r.sent
            total.failed += r.failed
            total.pruned.extend(r.pruned)
        return total
