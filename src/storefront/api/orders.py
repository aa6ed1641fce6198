"""
Orders API - customer orders, staff order management and order creation.

Order creation is asynchronous on the backend: the POST returns a job id
which is polled until the job completes, fails or the wait times out.
"""

import logging
import time
from typing import List, Optional

from pydantic import BaseModel

from storefront.core.config import settings
from storefront.core.retry_utils import ApiError, PermanentError
from storefront.models.api import Page
from storefront.models.order import CreateOrderPayload, Order, transform_order
from .client import ApiClient

logger = logging.getLogger(__name__)

ORDER_FAILED_MESSAGE = "Không thể tạo đơn hàng. Vui lòng thử lại."


class OrderJobResult(BaseModel):
    job_id: str
    order_id: Optional[str] = None
    order: Optional[Order] = None

    @property
    def completed(self) -> bool:
        return self.order is not None


class OrderService:
    base_path = "/orders"

    def __init__(self, client: ApiClient):
        self.client = client

    # ---------------- customer ----------------

    def get_my_orders(self) -> List[Order]:
        data = self.client.get(self.base_path) or []
        return [transform_order(o) for o in data]

    def get_order(self, order_id: str) -> Order:
        return transform_order(self.client.get(f"{self.base_path}/{order_id}"))

    def cancel_order(self, order_id: str, cancel_reason: Optional[str] = None) -> Order:
        body = {"cancel_reason": cancel_reason} if cancel_reason else {}
        return transform_order(self.client.patch(f"{self.base_path}/{order_id}/cancel", body))

    def create_order(
        self,
        payload: CreateOrderPayload,
        timeout: Optional[float] = None,
        interval: Optional[float] = None
    ) -> OrderJobResult:
        """
        Submit an order and wait for the backend job to finish.

        Raises:
            ApiError: submission rejected or the job reported failure
        """
        data = self.client.post(self.base_path, payload.to_request_body()) or {}
        job_id = data.get("jobId")
        if not job_id:
            raise PermanentError(data.get("message") or "Không thể tạo đơn hàng. Thiếu jobId.", payload=data)

        logger.info(f"[ORDERS] Order job {job_id} queued")
        return self.wait_for_job(str(job_id), timeout, interval)

    def wait_for_job(self, job_id: str, timeout: Optional[float] = None, interval: Optional[float] = None) -> OrderJobResult:
        timeout = settings.order_job_timeout if timeout is None else timeout
        interval = settings.order_job_interval if interval is None else interval
        deadline = time.monotonic() + timeout

        while time.monotonic() < deadline:
            try:
                status = self.client.get(f"{self.base_path}/job/{job_id}") or {}
            except ApiError as e:
                # Keep polling until the deadline.
                logger.warning(f"[ORDERS] Error polling job {job_id}: {e}")
                status = {}

            result = status.get("result") or {}
            if status.get("state") == "completed" and result.get("order"):
                order = transform_order(result["order"])
                logger.info(f"[ORDERS] Order job {job_id} completed: {order.id}")
                return OrderJobResult(job_id=job_id, order_id=result.get("orderId") or order.id, order=order)

            if status.get("state") == "failed":
                message = status.get("error") or result.get("message") or ORDER_FAILED_MESSAGE
                logger.error(f"[ORDERS] Order job {job_id} failed: {message}")
                raise PermanentError(message, payload={"message": message})

            time.sleep(interval)

        logger.warning(f"[ORDERS] Timeout while waiting for order job {job_id}")
        return OrderJobResult(job_id=job_id)

    # ---------------- staff ----------------

    def get_staff_orders(self, status: Optional[str] = None, page: Optional[int] = None, limit: Optional[int] = None) -> Page:
        data = self.client.get(f"{self.base_path}/admin/all", params={"status": status, "page": page, "limit": limit}) or {}
        orders = [transform_order(o) for o in data.get("orders") or []]
        return Page(
            items=orders,
            total=data.get("total", len(orders)),
            page=data.get("page") or page or 1,
            total_pages=data.get("totalPages") or 1,
        )

    def confirm_order(self, order_id: str) -> Order:
        return transform_order(self.client.patch(f"{self.base_path}/admin/{order_id}/confirm"))

    def ship_order(self, order_id: str) -> Order:
        return transform_order(self.client.patch(f"{self.base_path}/admin/{order_id}/ship"))

    def deliver_order(self, order_id: str) -> Order:
        return transform_order(self.client.patch(f"{self.base_path}/admin/{order_id}/deliver"))

    def cancel_order_by_staff(self, order_id: str, cancel_reason: Optional[str] = None) -> Order:
        body = {"cancel_reason": cancel_reason or "Cancelled by staff"}
        return transform_order(self.client.patch(f"{self.base_path}/admin/{order_id}/cancel", body))

    def apply_staff_action(self, order_id: str, action: str, cancel_reason: Optional[str] = None) -> Order:
        """Dispatch one of the staff transitions offered by `staff_actions`."""
        if action == "confirm":
            return self.confirm_order(order_id)
        if action == "ship":
            return self.ship_order(order_id)
        if action == "deliver":
            return self.deliver_order(order_id)
        if action == "cancel":
            return self.cancel_order_by_staff(order_id, cancel_reason)
        raise ValueError(f"Unknown staff action: {action}")
