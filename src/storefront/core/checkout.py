"""
Checkout - order summary for the cart and order placement.

The cart is cleared only after the backend has created the order.
"""

import logging
from typing import Optional

from pydantic import BaseModel

from storefront.api.orders import OrderJobResult, OrderService
from storefront.api.payments import PaymentService
from storefront.models.cart import Cart
from storefront.models.order import CreateOrderPayload, CustomerInfo, InvoiceInfo, OrderLine
from .cart_store import CartStore
from .config import settings
from .retry_utils import ApiError, error_message

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

EMPTY_CART_MESSAGE = "Giỏ hàng trống"


class OrderSummary(BaseModel):
    subtotal: float
    shipping_fee: float
    total: float

    @property
    def free_shipping(self) -> bool:
        return self.shipping_fee == 0


def shipping_fee_for(subtotal: float) -> float:
    if subtotal >= settings.free_shipping_threshold:
        return 0
    return settings.shipping_fee


def order_summary(cart: Cart) -> OrderSummary:
    fee = shipping_fee_for(cart.subtotal) if cart.items else 0
    return OrderSummary(subtotal=cart.subtotal, shipping_fee=fee, total=cart.subtotal + fee)


class CheckoutService:
    def __init__(self, cart: CartStore, orders: OrderService, payments: PaymentService):
        self.cart = cart
        self.orders = orders
        self.payments = payments

    def build_payload(self, address_id: str, invoice_info: Optional[InvoiceInfo] = None) -> CreateOrderPayload:
        cart = self.cart.snapshot()
        if cart.is_empty:
            raise ValueError(EMPTY_CART_MESSAGE)
        return CreateOrderPayload(
            address_id=address_id,
            items=[OrderLine(product_id=item.id, quantity=item.quantity) for item in cart.items],
            shipping_fee=order_summary(cart).shipping_fee,
            request_invoice=invoice_info is not None,
            invoice_info=invoice_info,
        )

    def place_order(
        self,
        customer: CustomerInfo,
        address_id: str,
        invoice_info: Optional[InvoiceInfo] = None
    ) -> OrderJobResult:
        """
        Create an order from the current cart.

        `customer` is an already-validated form; constructing it raises the
        inline "Vui lòng điền đầy đủ thông tin!" error when a field is blank.

        Raises:
            ValueError: the cart is empty
            ApiError: the backend rejected or failed the order; the cart is kept
        """
        payload = self.build_payload(address_id, invoice_info)
        logger.info(f"[CHECKOUT] Placing order for {customer.name}: {len(payload.items)} lines")

        try:
            result = self.orders.create_order(payload)
        except ApiError as e:
            logger.error(f"[CHECKOUT] Order failed: {error_message(e)}")
            raise

        if result.completed:
            self.cart.clear_cart()
        else:
            logger.warning(f"[CHECKOUT] Order job {result.job_id} still pending, cart kept")
        return result

    def start_payment(self, order_id: str, method: str) -> str:
        return self.payments.create_payment(order_id, method)
