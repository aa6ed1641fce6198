"""
Real-time event channel consumer.

Frames arrive from the socket transport as JSON `{"event": name, "data": {...}}`
and are dispatched to handlers registered per event name. The transport
itself is plugged in from outside: inbound frames are pushed through
`feed()`, outbound events go through the `sender` callable.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from storefront.models.events import ChatMessage, ConversationEvent, Notification, OrderEvent

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

ORDER_NEW = "order.new"
ORDER_STATUS_CHANGED = "order.status_changed"
MESSAGE_NEW = "message.new"
HISTORY_MESSAGES = "history.messages"
CONVERSATION_ASSIGNED = "conversation.assigned"
CONVERSATION_CLOSED = "conversation.closed"
NOTIFICATION_NEW = "notification.new"
JOIN_CONVERSATION = "join_conversation"

Handler = Callable[[Any], None]
Sender = Callable[[str, Dict[str, Any]], None]

ORDER_STATUS_LABELS = {
    "pending": "Chờ xác nhận",
    "confirmed": "Đã xác nhận",
    "shipped": "Đang giao",
    "delivered": "Đã giao",
    "cancelled": "Đã hủy",
}


def _parse_history(data: Any) -> List[ChatMessage]:
    return [ChatMessage.from_payload(m) for m in data or []]


# Payload model per event; unknown events pass the raw payload through.
PARSERS: Dict[str, Callable[[Any], Any]] = {
    ORDER_NEW: OrderEvent.from_payload,
    ORDER_STATUS_CHANGED: OrderEvent.from_payload,
    MESSAGE_NEW: ChatMessage.from_payload,
    HISTORY_MESSAGES: _parse_history,
    CONVERSATION_ASSIGNED: ConversationEvent.from_payload,
    CONVERSATION_CLOSED: ConversationEvent.from_payload,
    NOTIFICATION_NEW: Notification.from_payload,
}


class EventChannel:
    def __init__(self, sender: Optional[Sender] = None):
        self.sender = sender
        self._handlers: Dict[str, List[Handler]] = {}

    def on(self, event: str, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def off(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, data: Dict[str, Any]) -> None:
        if self.sender is None:
            logger.warning(f"[REALTIME] No transport attached, dropping {event}")
            return
        self.sender(event, data)

    def dispatch(self, event: str, payload: Any) -> int:
        """
        Validate `payload` for `event` and call its handlers.

        Returns the number of handlers that ran without raising.
        """
        parser = PARSERS.get(event)
        try:
            parsed = parser(payload) if parser else payload
        except (TypeError, ValueError, ValidationError) as e:
            logger.warning(f"[REALTIME] Dropping invalid {event} payload: {e}")
            return 0

        delivered = 0
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(parsed)
                delivered += 1
            except Exception as e:
                logger.error(f"[REALTIME] Handler for {event} failed: {e}")
        return delivered

    def feed(self, frame: str) -> int:
        """Dispatch one raw JSON frame from the transport."""
        try:
            message = json.loads(frame)
        except (TypeError, ValueError):
            logger.warning(f"[REALTIME] Dropping malformed frame: {str(frame)[:100]}")
            return 0

        if not isinstance(message, dict) or not message.get("event"):
            logger.warning("[REALTIME] Dropping frame without event name")
            return 0

        return self.dispatch(message["event"], message.get("data"))


class NotificationCenter:
    """Ordered, de-duplicated notification list (newest first) with an unread count."""

    def __init__(self, channel: Optional[EventChannel] = None):
        self._notifications: List[Notification] = []
        if channel:
            self.attach(channel)

    def attach(self, channel: EventChannel) -> None:
        channel.on(NOTIFICATION_NEW, self.add)
        channel.on(ORDER_NEW, self._on_order_new)
        channel.on(ORDER_STATUS_CHANGED, self._on_order_status)
        channel.on(CONVERSATION_ASSIGNED, self._on_conversation)
        channel.on(CONVERSATION_CLOSED, self._on_conversation)

    @property
    def notifications(self) -> List[Notification]:
        return [n.copy() for n in self._notifications]

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._notifications if not n.is_read)

    def add(self, notification: Notification) -> bool:
        """Returns False when a notification with the same id is already listed."""
        if any(n.id == notification.id for n in self._notifications):
            return False
        self._notifications.insert(0, notification)
        return True

    def replace_all(self, notifications: List[Notification]) -> None:
        self._notifications = []
        for n in reversed(notifications):
            self.add(n)

    def mark_read(self, notification_id: str) -> None:
        for n in self._notifications:
            if n.id == notification_id:
                n.is_read = True

    def mark_all_read(self) -> None:
        for n in self._notifications:
            n.is_read = True

    def remove(self, notification_id: str) -> None:
        self._notifications = [n for n in self._notifications if n.id != notification_id]

    def _on_order_new(self, event: OrderEvent) -> None:
        self.add(Notification(
            id=f"order-new-{event.id}",
            type="order",
            title="Đơn hàng mới",
            message=event.message or f"Đơn hàng #{event.id} vừa được tạo",
            link=f"/orders/{event.id}",
        ))

    def _on_order_status(self, event: OrderEvent) -> None:
        label = ORDER_STATUS_LABELS.get(event.status, event.status)
        self.add(Notification(
            id=f"order-{event.id}-{event.status}",
            type="order",
            title="Cập nhật đơn hàng",
            message=event.message or f"Đơn hàng #{event.id}: {label}",
            link=f"/orders/{event.id}",
        ))

    def _on_conversation(self, event: ConversationEvent) -> None:
        self.add(Notification(
            id=f"conversation-{event.id}-{event.status}",
            type="chat",
            title="Hỗ trợ trực tuyến",
            message=event.message or f"Cuộc trò chuyện {event.status}",
            link=f"/messages/{event.id}",
        ))


class ConversationFeed:
    """Messages of one conversation: history replaces, new messages append."""

    def __init__(self, conversation_id: str):
        self.conversation_id = conversation_id
        self.messages: List[ChatMessage] = []
        self._channel: Optional[EventChannel] = None

    def join(self, channel: EventChannel) -> None:
        self._channel = channel
        channel.on(HISTORY_MESSAGES, self._on_history)
        channel.on(MESSAGE_NEW, self._on_message)
        channel.emit(JOIN_CONVERSATION, {"conversation_id": self.conversation_id})

    def leave(self) -> None:
        if self._channel:
            self._channel.off(HISTORY_MESSAGES, self._on_history)
            self._channel.off(MESSAGE_NEW, self._on_message)
            self._channel = None

    def _on_history(self, history: List[ChatMessage]) -> None:
        own = [m for m in history if m.conversation_id == self.conversation_id]
        if history and not own:
            # History of another room on the same socket.
            return
        self.messages = own

    def _on_message(self, message: ChatMessage) -> None:
        if message.conversation_id != self.conversation_id:
            return
        if any(m.id == message.id for m in self.messages):
            return
        self.messages.append(message)
