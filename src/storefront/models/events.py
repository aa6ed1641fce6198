"""
Real-time channel payloads. Each carries an identifier plus a status or message.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime


def _with_id(raw: Dict[str, Any], *keys: str) -> Dict[str, Any]:
    data = dict(raw)
    for key in keys:
        if raw.get(key):
            data["id"] = str(raw[key])
            break
    return data


class OrderEvent(BaseModel):
    """`order.new` / `order.status_changed`."""
    id: str
    status: str
    message: Optional[str] = None
    total: Optional[float] = None

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> "OrderEvent":
        return cls(**_with_id(raw, "id", "_id", "order_id", "orderId"))


class ChatMessage(BaseModel):
    """`message.new` and the entries of `history.messages`."""
    id: str
    conversation_id: str
    sender_type: str = "USER"
    sender_id: Optional[str] = None
    text: str = ""
    is_read: bool = False
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> "ChatMessage":
        data = _with_id(raw, "id", "_id")
        if raw.get("createdAt") and not raw.get("created_at"):
            data["created_at"] = raw["createdAt"]
        if data.get("text") is None:
            data["text"] = raw.get("content") or ""
        data["sender_type"] = str(raw.get("sender_type") or "USER").upper()
        return cls(**data)


class ConversationEvent(BaseModel):
    """`conversation.assigned` / `conversation.closed`."""
    id: str
    status: str
    staff_id: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> "ConversationEvent":
        return cls(**_with_id(raw, "conversation_id", "id", "_id"))


class Notification(BaseModel):
    id: str
    type: str = "system"
    title: str = ""
    message: str
    link: Optional[str] = None
    is_read: bool = False
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())

    @classmethod
    def from_payload(cls, raw: Dict[str, Any]) -> "Notification":
        return cls(**_with_id(raw, "id", "_id"))
