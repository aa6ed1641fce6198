"""Backend service wrappers against a fake backend."""

import pytest

from storefront.api.auth import AuthService
from storefront.api.catalog import ProductService
from storefront.api.chat import ConversationService, StaffService
from storefront.api.inventory import InventoryService
from storefront.api.notifications import NotificationService
from storefront.api.orders import OrderService
from storefront.api.payments import PaymentService
from storefront.core.retry_utils import PermanentError, TransientError
from storefront.models.inventory import InventoryAdjustment, InventoryOperation
from storefront.models.order import CreateOrderPayload, OrderLine

ORDER_DOC = {
    "_id": "o1",
    "status": "pending",
    "total": 120000,
    "address_id": {"full_name": "Lan", "phone": "0901234567", "address": "1 Lê Lợi", "city": "HCM"},
    "items": [{"_id": "i1", "product_id": {"_id": "p1", "name": "Táo", "final_price": 60000}, "quantity": 2}],
}

TRANSACTION_DOC = {
    "_id": "t1",
    "product_id": "p1",
    "type": "import",
    "quantity": 5,
    "quantity_before": 10,
    "quantity_after": 15,
    "created_at": "2025-01-01T00:00:00Z",
}


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture()
def clock(monkeypatch):
    fake = FakeClock()
    monkeypatch.setattr("storefront.api.orders.time", fake)
    return fake


def _payload():
    return CreateOrderPayload(address_id="a1", items=[OrderLine(product_id="p1", quantity=2)])


class TestOrderCreation:
    def test_polls_until_completed(self, client, backend, clock):
        backend.add("POST", "/orders", body={"jobId": "j1"})
        backend.add("GET", "/orders/job/j1", body={"state": "waiting"})
        backend.add("GET", "/orders/job/j1", body={"state": "active"})
        backend.add("GET", "/orders/job/j1", body={"state": "completed", "result": {"orderId": "o1", "order": ORDER_DOC}})

        result = OrderService(client).create_order(_payload(), timeout=20, interval=1)

        assert result.completed
        assert result.order_id == "o1"
        assert result.order.items[0].name == "Táo"
        assert clock.sleeps == [1, 1]
        assert backend.calls_to("POST", "/orders")[0].kwargs["json"] == {
            "address_id": "a1",
            "items": [{"product_id": "p1", "quantity": 2}],
        }

    def test_failed_job_raises(self, client, backend, clock):
        backend.add("POST", "/orders", body={"jobId": "j1"})
        backend.add("GET", "/orders/job/j1", body={"state": "failed", "error": "Hết hàng"})

        with pytest.raises(PermanentError, match="Hết hàng"):
            OrderService(client).create_order(_payload(), timeout=20, interval=1)

    def test_timeout_returns_job_id_only(self, client, backend, clock):
        backend.add("POST", "/orders", body={"jobId": "j1"})
        backend.add("GET", "/orders/job/j1", body={"state": "active"})

        result = OrderService(client).create_order(_payload(), timeout=3, interval=1)

        assert result.job_id == "j1"
        assert not result.completed
        assert len(backend.calls_to("GET", "/orders/job/j1")) == 3

    def test_missing_job_id_raises(self, client, backend, clock):
        backend.add("POST", "/orders", body={"message": "Địa chỉ không hợp lệ"})

        with pytest.raises(PermanentError, match="Địa chỉ không hợp lệ"):
            OrderService(client).create_order(_payload())

    def test_payload_requires_items(self):
        with pytest.raises(ValueError):
            CreateOrderPayload(address_id="a1", items=[])


class TestOrderManagement:
    def test_my_orders(self, client, backend):
        backend.add("GET", "/orders", body=[ORDER_DOC])

        orders = OrderService(client).get_my_orders()

        assert orders[0].customer_address == "1 Lê Lợi, HCM"
        assert orders[0].can_cancel

    def test_staff_list_is_paged(self, client, backend):
        backend.add("GET", "/orders/admin/all", body={"orders": [ORDER_DOC], "total": 31, "page": 2, "totalPages": 4})

        page = OrderService(client).get_staff_orders(status="pending", page=2, limit=10)

        assert page.total == 31
        assert page.total_pages == 4
        assert backend.request.call_args.kwargs["params"] == {"status": "pending", "page": 2, "limit": 10}

    @pytest.mark.parametrize("action", ["confirm", "ship", "deliver"])
    def test_staff_actions(self, client, backend, action):
        backend.add("PATCH", f"/orders/admin/o1/{action}", body=ORDER_DOC)

        OrderService(client).apply_staff_action("o1", action)

        assert len(backend.calls_to("PATCH", f"/orders/admin/o1/{action}")) == 1

    def test_staff_cancel_sends_default_reason(self, client, backend):
        backend.add("PATCH", "/orders/admin/o1/cancel", body={**ORDER_DOC, "status": "cancelled"})

        order = OrderService(client).cancel_order_by_staff("o1")

        assert order.status == "cancelled"
        assert backend.request.call_args.kwargs["json"] == {"cancel_reason": "Cancelled by staff"}

    def test_unknown_action(self, client):
        with pytest.raises(ValueError):
            OrderService(client).apply_staff_action("o1", "refund")


class TestPayments:
    def test_returns_redirect_url(self, client, backend):
        backend.add("POST", "/payments/create-payment", body={"data": "https://pay.example/checkout/1"})

        url = PaymentService(client).create_payment("o1", "momo")

        assert url == "https://pay.example/checkout/1"
        assert backend.request.call_args.kwargs["json"] == {"orderId": "o1", "payment_method": "momo"}

    def test_rejects_unknown_method(self, client):
        with pytest.raises(ValueError):
            PaymentService(client).create_payment("o1", "cash")


class TestInventory:
    def test_import_posts_operation(self, client, backend):
        backend.add("POST", "/inventory/import", body={"transaction": TRANSACTION_DOC})

        tx = InventoryService(client).import_stock(InventoryOperation(product_id="p1", quantity=5, note=" "))

        assert tx.quantity_after == 15
        assert backend.request.call_args.kwargs["json"] == {"product_id": "p1", "quantity": 5}

    def test_adjust_posts_new_quantity(self, client, backend):
        backend.add("POST", "/inventory/adjust", body={"transaction": {**TRANSACTION_DOC, "type": "adjustment"}})

        InventoryService(client).adjust_stock(InventoryAdjustment(product_id="p1", new_quantity=0))

        assert backend.request.call_args.kwargs["json"] == {"product_id": "p1", "new_quantity": 0}

    def test_history(self, client, backend):
        backend.add("GET", "/inventory/history/p1", body={"history": [TRANSACTION_DOC]})

        history = InventoryService(client).get_history("p1")

        assert [t.id for t in history] == ["t1"]

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_operation_rejects_non_positive_quantity(self, quantity):
        with pytest.raises(ValueError, match="Số lượng phải lớn hơn 0"):
            InventoryOperation(product_id="p1", quantity=quantity)

    def test_adjustment_rejects_negative(self):
        with pytest.raises(ValueError, match="Số lượng không được âm"):
            InventoryAdjustment(product_id="p1", new_quantity=-1)


class TestCatalog:
    def test_retries_transient_failures(self, client, backend):
        backend.add("GET", "/products", status=502)
        backend.add("GET", "/products", body={"products": [{"_id": "p1", "name": "Cam", "unit_price": 30000}]})

        products = ProductService(client).get_products()

        assert [p.id for p in products] == ["p1"]
        assert len(backend.calls_to("GET", "/products")) == 2

    def test_gives_up_after_retries(self, client, backend):
        backend.add("GET", "/products", status=500)

        with pytest.raises(TransientError):
            ProductService(client).get_products()

        assert len(backend.calls_to("GET", "/products")) == 3

    def test_does_not_retry_client_errors(self, client, backend):
        backend.add("GET", "/products/missing", status=404, body={"message": "Không tìm thấy"})

        with pytest.raises(PermanentError):
            ProductService(client).get_product("missing")

        assert len(backend.calls_to("GET", "/products/missing")) == 1


class TestAuth:
    def test_login_stores_session(self, client, tokens, backend):
        backend.add("POST", "/auth/login-email", body={
            "accessToken": "a1", "refreshToken": "r1", "user": {"_id": "u1", "email": "u1@example.com"},
        })

        AuthService(client).login_email("u1@example.com", "secret")

        assert tokens.access_token == "a1"
        assert tokens.refresh_token == "r1"
        assert tokens.load_user_id() == "u1"

    def test_unverified_login_stores_nothing(self, client, tokens, backend):
        backend.add("POST", "/auth/login-email", body={"requiresEmailVerification": True})

        data = AuthService(client).login_email("u1@example.com", "secret")

        assert data["requiresEmailVerification"]
        assert tokens.access_token is None

    def test_get_me(self, client, backend):
        backend.add("GET", "/auth/me", body={"user": {"_id": "u1", "role": "admin"}})

        user = AuthService(client).get_me()

        assert user.id == "u1"
        assert user.is_staff


class TestNotificationsAndChat:
    def test_unread_count(self, client, backend):
        backend.add("GET", "/notifications/unread-count", body={"unreadCount": 3})

        assert NotificationService(client).get_unread_count() == 3

    def test_list_notifications(self, client, backend):
        backend.add("GET", "/notifications", body={
            "notifications": [{"_id": "n1", "message": "Đơn hàng đã giao"}], "total": 1,
        })

        page = NotificationService(client).get_my_notifications(unread_only=True)

        assert page.items[0].id == "n1"
        assert backend.request.call_args.kwargs["params"] == {"unread_only": True}

    def test_create_conversation(self, client, backend):
        backend.add("POST", "/conversations", body={"conversation_id": "c1", "is_new": True, "state": "OPEN"})

        data = ConversationService(client).create_conversation("u1")

        assert data["conversation_id"] == "c1"
        assert backend.request.call_args.kwargs["json"] == {"userId": "u1"}

    def test_staff_messages(self, client, backend):
        backend.add("GET", "/staff/conversations/c1/messages", body={"messages": [
            {"_id": "m1", "conversation_id": "c1", "sender_type": "user", "content": "Xin chào"},
        ]})

        messages = StaffService(client).get_messages("c1")

        assert messages[0].text == "Xin chào"
        assert messages[0].sender_type == "USER"

    def test_presence_validated(self, client):
        with pytest.raises(ValueError):
            StaffService(client).update_presence("AWAY")
