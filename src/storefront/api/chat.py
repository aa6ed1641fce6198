"""
Chat API - customer conversations with support staff and the staff console.
"""

import logging
from typing import Any, Dict, List, Optional

from storefront.models.events import ChatMessage
from .client import ApiClient

logger = logging.getLogger(__name__)

PRESENCE_STATUSES = ("ONLINE", "OFFLINE")


def _messages(data: Any) -> List[ChatMessage]:
    raw = data.get("messages", []) if isinstance(data, dict) else data or []
    return [ChatMessage.from_payload(m) for m in raw]


class ConversationService:
    base_path = "/conversations"

    def __init__(self, client: ApiClient):
        self.client = client

    def create_conversation(self, user_id: str) -> Dict[str, Any]:
        """Open (or reuse) the customer's conversation: `{conversation_id, is_new, state}`."""
        data = self.client.post(self.base_path, {"userId": user_id})
        logger.info(f"[CHAT] Conversation {data.get('conversation_id')} for {user_id} (new={data.get('is_new')})")
        return data

    def send_message(self, conversation_id: str, text: str) -> ChatMessage:
        data = self.client.post(f"{self.base_path}/{conversation_id}/messages", {"text": text})
        return ChatMessage.from_payload(data)

    def send_staff_message(self, conversation_id: str, text: str) -> ChatMessage:
        data = self.client.post(f"{self.base_path}/{conversation_id}/messages/staff", {"text": text})
        return ChatMessage.from_payload(data)


class StaffService:
    base_path = "/staff"

    def __init__(self, client: ApiClient):
        self.client = client

    def update_presence(self, status: str, max_conversations: int = 5) -> Dict[str, Any]:
        if status not in PRESENCE_STATUSES:
            raise ValueError(f"Invalid presence status: {status}")
        return self.client.post(f"{self.base_path}/presence", {"status": status, "max": max_conversations})

    def get_conversations(
        self,
        state: Optional[str] = None,
        limit: int = 50,
        skip: int = 0,
        search: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        data = self.client.get(
            f"{self.base_path}/conversations",
            params={"state": state, "limit": limit, "skip": skip, "search": search},
        ) or {}
        return data.get("conversations", [])

    def get_conversation(self, conversation_id: str) -> Dict[str, Any]:
        return self.client.get(f"{self.base_path}/conversations/{conversation_id}")

    def get_messages(self, conversation_id: str, limit: int = 50, skip: int = 0) -> List[ChatMessage]:
        data = self.client.get(
            f"{self.base_path}/conversations/{conversation_id}/messages",
            params={"limit": limit, "skip": skip},
        )
        return _messages(data)

    def mark_as_read(self, conversation_id: str) -> Dict[str, Any]:
        return self.client.patch(f"{self.base_path}/conversations/{conversation_id}/read")

    def get_stats(self) -> Dict[str, Any]:
        return self.client.get(f"{self.base_path}/stats")
