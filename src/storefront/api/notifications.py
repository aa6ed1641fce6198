"""
Notifications API - customer and staff notification inboxes.
"""

from typing import Any, Dict, List, Optional

from storefront.models.api import Page
from storefront.models.events import Notification
from .client import ApiClient


class NotificationService:
    base_path = "/notifications"

    def __init__(self, client: ApiClient):
        self.client = client

    def get_my_notifications(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        type: Optional[str] = None,
        unread_only: Optional[bool] = None
    ) -> Page:
        data = self.client.get(
            self.base_path,
            params={"page": page, "limit": limit, "type": type, "unread_only": unread_only},
        ) or {}
        return self._page(data, page)

    def get_staff_notifications(self) -> Page:
        return self._page(self.client.get(f"{self.base_path}/staff") or {}, None)

    def get_unread_count(self) -> int:
        data = self.client.get(f"{self.base_path}/unread-count") or {}
        return int(data.get("unreadCount", 0))

    def get_staff_unread_count(self) -> int:
        data = self.client.get(f"{self.base_path}/staff/unread-count") or {}
        return int(data.get("unreadCount", 0))

    def mark_as_read(self, notification_id: str) -> Notification:
        return Notification.from_payload(self.client.patch(f"{self.base_path}/{notification_id}/read"))

    def mark_as_read_for_staff(self, notification_id: str) -> Notification:
        return Notification.from_payload(self.client.patch(f"{self.base_path}/staff/{notification_id}/read"))

    def mark_all_as_read(self) -> Dict[str, Any]:
        return self.client.patch(f"{self.base_path}/read-all")

    def hide(self, notification_id: str) -> Notification:
        return Notification.from_payload(self.client.patch(f"{self.base_path}/{notification_id}/hide"))

    def delete(self, notification_id: str) -> Dict[str, Any]:
        return self.client.delete(f"{self.base_path}/{notification_id}")

    def delete_all(self) -> Dict[str, Any]:
        return self.client.delete(self.base_path)

    @staticmethod
    def _page(data: Dict[str, Any], page: Optional[int]) -> Page:
        items: List[Notification] = [Notification.from_payload(n) for n in data.get("notifications") or []]
        return Page(
            items=items,
            total=data.get("total", len(items)),
            page=data.get("page") or page or 1,
            total_pages=data.get("totalPages") or 1,
        )
