"""
Payments API - starts an online payment and returns the gateway redirect target.
"""

import logging

from storefront.core.retry_utils import PermanentError
from .client import ApiClient

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("momo", "vnpay")


class PaymentService:
    base_path = "/payments"

    def __init__(self, client: ApiClient):
        self.client = client

    def create_payment(self, order_id: str, method: str) -> str:
        """Returns the URL the customer must be redirected to."""
        if method not in PAYMENT_METHODS:
            raise ValueError(f"Unsupported payment method: {method}")

        data = self.client.post(f"{self.base_path}/create-payment", {"orderId": order_id, "payment_method": method})
        redirect_url = data.get("data") if isinstance(data, dict) else data
        if not redirect_url:
            raise PermanentError("Không thể khởi tạo thanh toán", payload=data if isinstance(data, dict) else None)

        logger.info(f"[PAYMENTS] {method} payment started for order {order_id}")
        return str(redirect_url)
