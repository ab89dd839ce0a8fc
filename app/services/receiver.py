"""
Notification receiver contract: what the browser service worker (static/service-worker.js)
does with each inbound event, expressed as plain handlers so the payload format and click
routing can be checked server-side against build_push_message.
"""
import json
from dataclasses import dataclass, field
from typing import Any, Callable

APP_NAME = "Task Manager"
DEFAULT_BODY = "You have a new notification"
DEFAULT_ICON = "/logo192.png"
DEFAULT_TAG = "default"
VIBRATE_PATTERN = (200, 100, 200)


@dataclass
class DisplayNotification:
    title: str = APP_NAME
    body: str = DEFAULT_BODY
    icon: str = DEFAULT_ICON
    badge: str = DEFAULT_ICON
    tag: str = DEFAULT_TAG
    renotify: bool = True
    require_interaction: bool = False
    data: dict = field(default_factory=dict)
    actions: list = field(default_factory=list)
    vibrate: tuple = VIBRATE_PATTERN


@dataclass(frozen=True)
class ClickOutcome:
    kind: str  # "focus" | "open"
    url: str


def _as_dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def parse_push(raw: bytes | str | None) -> DisplayNotification:
    """Missing body or unparsable JSON degrades to the generic notification."""
    if not raw:
        return DisplayNotification()
    try:
        payload = json.loads(raw)
    except (TypeError, ValueError):
        return DisplayNotification()
    if not isinstance(payload, dict):
        return DisplayNotification()
    return DisplayNotification(
        title=payload.get("title") or APP_NAME,
        body=payload.get("body") or DEFAULT_BODY,
        icon=payload.get("icon") or DEFAULT_ICON,
        badge=payload.get("badge") or DEFAULT_ICON,
        tag=payload.get("tag") or DEFAULT_TAG,
        renotify=payload.get("renotify") is not False,
        require_interaction=bool(payload.get("requireInteraction")),
        data=_as_dict(payload.get("data")),
        actions=payload.get("actions") if isinstance(payload.get("actions"), list) else [],
    )


def resolve_click(data: dict | None, action: str | None, open_urls: list[str]) -> ClickOutcome:
    """
    With a target url: focus the first open window whose url contains it, else open it.
    Without one: focus any open window, else open the app root.
    The "view" action and a plain click route the same way.
    """
    target = _as_dict(data).get("url")
    if target:
        for url in open_urls:
            if target in url:
                return ClickOutcome("focus", url)
        return ClickOutcome("open", target)
    if open_urls:
        return ClickOutcome("focus", open_urls[0])
    return ClickOutcome("open", "/")


def on_close(data: dict | None) -> str | None:
    return _as_dict(data).get("notificationId")


def on_message(message: Any) -> str | None:
    if isinstance(message, dict) and message.get("type") == "SKIP_WAITING":
        return "skip_waiting"
    return None


def _on_click(data: dict | None = None, action: str | None = None, open_urls: list[str] | None = None) -> ClickOutcome:
    return resolve_click(data, action, open_urls or [])


HANDLERS: dict[str, Callable[..., Any]] = {
    "push": parse_push,
    "notificationclick": _on_click,
    "notificationclose": on_close,
    "message": on_message,
}


def dispatch(event_type: str, *args, **kwargs) -> Any:
    """Raises KeyError for event types the worker does not handle."""
    return HANDLERS[event_type](*args, **kwargs)
