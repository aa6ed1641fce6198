"""Order summary and order placement from the cart."""

from unittest.mock import MagicMock

import pytest

from storefront.api.orders import OrderJobResult
from storefront.core.checkout import CheckoutService, order_summary
from storefront.core.retry_utils import PermanentError
from storefront.models.cart import Cart, LineItem
from storefront.models.order import CustomerInfo, transform_order

from conftest import make_item

CUSTOMER = CustomerInfo(name="Lan", phone="0901234567", address="1 Lê Lợi, HCM")


def _cart(subtotal_price: float) -> Cart:
    items = [LineItem(id="p1", name="x", price=subtotal_price, quantity=1)]
    return Cart(namespace="cart_guest", items=items, total_items=1, subtotal=subtotal_price)


@pytest.fixture()
def orders():
    return MagicMock()


@pytest.fixture()
def checkout(cart_store, orders):
    return CheckoutService(cart_store, orders, MagicMock())


class TestOrderSummary:
    def test_shipping_charged_below_threshold(self):
        summary = order_summary(_cart(299999))

        assert summary.shipping_fee == 15000
        assert summary.total == 314999

    def test_free_shipping_at_threshold(self):
        summary = order_summary(_cart(300000))

        assert summary.free_shipping
        assert summary.total == 300000

    def test_empty_cart_has_no_fee(self):
        assert order_summary(Cart(namespace="cart_guest")).total == 0


class TestPlaceOrder:
    def test_success_clears_cart(self, checkout, cart_store, orders):
        cart_store.add_item(make_item("p1", price=100000), 2)
        orders.create_order.return_value = OrderJobResult(
            job_id="j1", order_id="o1", order=transform_order({"_id": "o1"})
        )

        result = checkout.place_order(CUSTOMER, "a1")

        assert result.order_id == "o1"
        assert cart_store.items == ()
        payload = orders.create_order.call_args.args[0]
        assert [(line.product_id, line.quantity) for line in payload.items] == [("p1", 2)]
        assert payload.shipping_fee == 15000

    def test_failure_keeps_cart_and_reraises(self, checkout, cart_store, orders):
        cart_store.add_item(make_item("p1"))
        orders.create_order.side_effect = PermanentError("Hết hàng", 400)

        with pytest.raises(PermanentError):
            checkout.place_order(CUSTOMER, "a1")

        assert cart_store.total_items == 1

    def test_pending_job_keeps_cart(self, checkout, cart_store, orders):
        cart_store.add_item(make_item("p1"))
        orders.create_order.return_value = OrderJobResult(job_id="j1")

        result = checkout.place_order(CUSTOMER, "a1")

        assert not result.completed
        assert cart_store.total_items == 1

    def test_empty_cart_rejected(self, checkout, orders):
        with pytest.raises(ValueError, match="Giỏ hàng trống"):
            checkout.place_order(CUSTOMER, "a1")

        orders.create_order.assert_not_called()

    def test_start_payment_delegates(self, cart_store, orders):
        payments = MagicMock()
        payments.create_payment.return_value = "https://pay.example/1"

        url = CheckoutService(cart_store, orders, payments).start_payment("o1", "vnpay")

        assert url == "https://pay.example/1"
        payments.create_payment.assert_called_once_with("o1", "vnpay")
