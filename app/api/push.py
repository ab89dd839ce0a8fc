import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.api.deps import get_current_user, get_dispatcher, get_push_manager
from app.core.errors import PushNotConfiguredError
from app.core.rate_limit import PUSH_WRITE_LIMIT, limiter
from app.models import PushSubscription, User
from app.schemas import PushSubscriptionIn, PushSubscriptionOut, VapidPublicKey
from app.services.notifier import NotificationDispatcher, NotificationPayload
from app.services.push import PushSubscriptionManager

log = logging.getLogger("taskmanager.push")

router = APIRouter(prefix="/auth/push", tags=["push"])


def _out(sub: PushSubscription) -> PushSubscriptionOut:
    return PushSubscriptionOut(
        id=sub.id or 0,
        endpoint=sub.endpoint,
        user_agent=sub.user_agent,
        last_used_at=sub.last_used_at,
        created_at=sub.created_at,
    )


@router.get("/vapid-public-key", response_model=VapidPublicKey)
def vapid_public_key(push: PushSubscriptionManager = Depends(get_push_manager)):
    try:
        return VapidPublicKey(publicKey=push.get_public_key())
    except PushNotConfiguredError as e:
        log.error("VAPID public key requested but not configured")
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/subscribe", status_code=status.HTTP_201_CREATED)
@limiter.limit(PUSH_WRITE_LIMIT)
def subscribe(
    body: PushSubscriptionIn,
    request: Request,
    user: User = Depends(get_current_user),
    push: PushSubscriptionManager = Depends(get_push_manager),
):
    sub = push.subscribe(
        user.id,
        body.endpoint,
        body.keys.p256dh,
        body.keys.auth,
        user_agent=request.headers.get("user-agent"),
    )
    return {"message": "Push subscription registered successfully", "subscriptionId": sub.id}


@router.get("/subscriptions")
def list_subscriptions(
    user: User = Depends(get_current_user),
    push: PushSubscriptionManager = Depends(get_push_manager),
):
    return {"subscriptions": [_out(s) for s in push.list_subscriptions(user.id)]}


@router.delete("/unsubscribe/{endpoint:path}")
def unsubscribe(
    endpoint: str,
    user: User = Depends(get_current_user),
    push: PushSubscriptionManager = Depends(get_push_manager),
):
    """Endpoint arrives URL-encoded; removing an unknown endpoint is not an error."""
    removed = push.unsubscribe(user.id, endpoint)
    return {"message": "Push subscription unregistered successfully", "removed": removed}


@router.delete("/subscriptions")
def deactivate_all(
    user: User = Depends(get_current_user),
    push: PushSubscriptionManager = Depends(get_push_manager),
):
    removed = push.deactivate_all(user.id)
    return {"message": "All push subscriptions deactivated successfully", "removed": removed}


@router.post("/test")
@limiter.limit(PUSH_WRITE_LIMIT)
def send_test_notification(
    request: Request,
    user: User = Depends(get_current_user),
    push: PushSubscriptionManager = Depends(get_push_manager),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Sends a sample notification to every subscription of the caller."""
    if not push.vapid.enabled:
        raise HTTPException(status_code=503, detail=PushNotConfiguredError.message)
    report = dispatcher.send_to_user(
        user.id,
        NotificationPayload(title="Task Manager", message="Push notifications are working", type="test"),
    )
    return {"sent": report.sent, "failed": report.failed, "pruned": len(report.pruned)}
