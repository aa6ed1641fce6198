"""Catalog mapper, order transform and form validation."""

import pytest
from pydantic import ValidationError

from storefront.core.retry_utils import form_error_message
from storefront.models.address import AddressInput, is_valid_phone
from storefront.models.cart import DEFAULT_UNIT_LABEL, NewLineItem
from storefront.models.order import CustomerInfo, staff_actions, transform_order
from storefront.models.product import UNNAMED_PRODUCT, map_product_from_api
from storefront.utils.formatters import format_date, format_price


class TestProductMapper:
    def test_maps_backend_document(self):
        product = map_product_from_api({
            "_id": "p1",
            "name": "Sữa tươi",
            "unit": "hộp 1L",
            "unit_price": 40000,
            "final_price": 36000,
            "discount_percent": 10,
            "stock_quantity": 0,
            "category_id": {"_id": "c1", "name": "Sữa"},
            "images": ["a.jpg", ""],
        })

        assert product.id == "p1"
        assert product.final_price == 36000
        assert product.category_id == "c1"
        assert product.stock_status == "out_of_stock"
        assert not product.in_stock
        assert product.image == "a.jpg"

    def test_defaults(self):
        product = map_product_from_api({"id": 7, "unit_price": "12000"})

        assert product.id == "7"
        assert product.name == UNNAMED_PRODUCT
        assert product.final_price == 12000
        assert product.stock_status == "in_stock"

    def test_empty_payload_rejected(self):
        with pytest.raises(ValueError, match="Invalid product data"):
            map_product_from_api({})

    def test_to_new_line_item_uses_final_price(self):
        product = map_product_from_api({"_id": "p1", "name": "Cam", "unit_price": 50000, "final_price": 45000})
        item = product.to_new_line_item()

        assert item.price == 45000
        assert item.unit == DEFAULT_UNIT_LABEL


class TestOrderTransform:
    def test_unpopulated_product_reference(self):
        order = transform_order({"_id": "o1", "items": [{"product_id": "p1", "quantity": 2, "unit_price": 5000}]})

        assert order.items[0].product_id == "p1"
        assert order.items[0].price == 5000
        assert order.customer_name == "Khách hàng"

    def test_unknown_status_falls_back_to_pending(self):
        assert transform_order({"_id": "o1", "status": "weird"}).status == "pending"

    def test_paid_and_invoice(self):
        order = transform_order({
            "_id": "o1",
            "payment_status": "paid",
            "is_company_invoice": True,
            "invoice_info": {"company_name": "ACME", "tax_code": None},
        })

        assert order.paid
        assert order.invoice_info.company_name == "ACME"
        assert order.invoice_info.tax_code == ""

    def test_staff_actions_per_status(self):
        assert staff_actions("pending") == ["confirm", "cancel"]
        assert staff_actions("confirmed") == ["ship", "cancel"]
        assert staff_actions("shipped") == ["deliver"]
        assert staff_actions("delivered") == []


class TestForms:
    def test_customer_info_requires_fields(self):
        with pytest.raises(ValidationError) as exc_info:
            CustomerInfo(name="Lan", phone=" ", address="1 Lê Lợi")

        assert form_error_message(exc_info.value) == "Vui lòng điền đầy đủ thông tin!"

    def test_customer_info_strips(self):
        info = CustomerInfo(name=" Lan ", phone="0901234567", address="1 Lê Lợi")

        assert info.name == "Lan"

    def test_new_line_item_rejects_negative_price(self):
        with pytest.raises(ValidationError):
            NewLineItem(id="p1", name="x", price=-1)

    @pytest.mark.parametrize("phone, valid", [
        ("0901234567", True),
        ("+84901234567", True),
        ("090 123 4567", True),
        ("12345", False),
    ])
    def test_phone_validation(self, phone, valid):
        assert is_valid_phone(phone) is valid

    def test_address_input_message(self):
        with pytest.raises(ValidationError) as exc_info:
            AddressInput(full_name="Lan", phone="123", address="1 Lê Lợi", ward="Bến Nghé", city="HCM")

        assert form_error_message(exc_info.value) == "Số điện thoại không hợp lệ"


class TestFormatters:
    def test_format_price(self):
        assert format_price(1234567) == "1.234.567 ₫"
        assert format_price(0) == "0 ₫"
        assert format_price(None) == "0 ₫"

    def test_format_date(self):
        assert format_date("2025-03-01T08:05:00Z") == "01/03/2025 08:05"
        assert format_date("not a date") == "not a date"
