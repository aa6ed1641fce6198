"""
Order models, checkout form and the backend order mapper.
"""

from pydantic import BaseModel, Field, validator
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime

from .cart import DEFAULT_UNIT_LABEL

OrderStatus = Literal["pending", "confirmed", "shipped", "delivered", "cancelled"]
PaymentMethod = Literal["momo", "vnpay"]

ORDER_STATUSES = ("pending", "confirmed", "shipped", "delivered", "cancelled")

# Staff transitions the back office offers for each order status.
STAFF_ACTIONS: Dict[str, List[str]] = {
    "pending": ["confirm", "cancel"],
    "confirmed": ["ship", "cancel"],
    "shipped": ["deliver"],
    "delivered": [],
    "cancelled": [],
}

DEFAULT_CUSTOMER_NAME = "Khách hàng"
DEFAULT_PRODUCT_NAME = "Sản phẩm"


class OrderItem(BaseModel):
    id: str
    product_id: str
    name: str = DEFAULT_PRODUCT_NAME
    price: float = 0.0
    quantity: int = 1
    image: str = ""
    unit: str = DEFAULT_UNIT_LABEL


class InvoiceInfo(BaseModel):
    company_name: str = ""
    company_address: str = ""
    tax_code: str = ""
    email: str = ""


class Order(BaseModel):
    id: str
    customer_name: str = DEFAULT_CUSTOMER_NAME
    customer_phone: str = ""
    customer_address: str = ""
    items: List[OrderItem] = Field(default_factory=list)
    total_amount: float = 0.0
    status: OrderStatus = "pending"
    payment_status: Optional[str] = None
    paid: bool = False
    created_at: str = Field(default_factory=lambda: datetime.utcnow().isoformat())
    notes: Optional[str] = None
    is_company_invoice: bool = False
    invoice_info: Optional[InvoiceInfo] = None

    @property
    def can_cancel(self) -> bool:
        return self.status == "pending"


class CustomerInfo(BaseModel):
    """Checkout form. Name, phone and address are required."""
    name: str
    phone: str
    address: str
    notes: Optional[str] = None

    @validator("name", "phone", "address")
    def check_required(cls, v):
        if not v or not v.strip():
            raise ValueError("Vui lòng điền đầy đủ thông tin!")
        return v.strip()


class OrderLine(BaseModel):
    product_id: str
    quantity: int

    @validator("quantity")
    def check_quantity(cls, v):
        if v < 1:
            raise ValueError("Quantity must be at least 1")
        return v


class CreateOrderPayload(BaseModel):
    address_id: str
    items: List[OrderLine]
    shipping_fee: Optional[float] = None
    discount: Optional[float] = None
    request_invoice: bool = False
    invoice_info: Optional[InvoiceInfo] = None

    @validator("items")
    def check_items(cls, v):
        if not v:
            raise ValueError("Order must contain at least one item")
        return v

    def to_request_body(self) -> Dict[str, Any]:
        """Request body in the backend's snake_case shape."""
        body: Dict[str, Any] = {
            "address_id": self.address_id,
            "items": [{"product_id": i.product_id, "quantity": i.quantity} for i in self.items],
        }
        if self.discount is not None:
            body["discount"] = self.discount
        if self.shipping_fee is not None:
            body["shipping_fee"] = self.shipping_fee
        if self.request_invoice:
            body["is_company_invoice"] = True
            if self.invoice_info:
                body["invoice_info"] = self.invoice_info.dict()
        return body


def staff_actions(status: str) -> List[str]:
    return list(STAFF_ACTIONS.get(status, []))


def _product_image(product: Dict[str, Any]) -> str:
    images = product.get("images") or []
    return product.get("image_primary") or (images[0] if images else "") or product.get("image_url") or ""


def transform_order_item(item: Dict[str, Any], index: int) -> OrderItem:
    raw_product = item.get("product_id")
    product = raw_product if isinstance(raw_product, dict) else {}
    if isinstance(raw_product, dict):
        product_id = str(product.get("_id") or product.get("id") or "")
    else:
        product_id = str(raw_product or "")

    return OrderItem(
        id=str(item.get("_id") or f"item-{product_id or index}-{index}"),
        product_id=product_id,
        name=product.get("name") or DEFAULT_PRODUCT_NAME,
        price=item.get("unit_price") or product.get("final_price") or product.get("unit_price") or 0,
        quantity=item.get("quantity") or 1,
        image=_product_image(product),
        unit=product.get("unit") or DEFAULT_UNIT_LABEL,
    )


def transform_order(raw: Dict[str, Any]) -> Order:
    """Map a backend order document to the client order model."""
    address = raw.get("address_id") if isinstance(raw.get("address_id"), dict) else {}
    status = raw.get("status") if raw.get("status") in ORDER_STATUSES else "pending"

    address_parts = [address.get(k) for k in ("address", "ward", "district", "city")]
    invoice = raw.get("invoice_info") if raw.get("is_company_invoice") else None

    return Order(
        id=str(raw.get("_id") or raw.get("id") or ""),
        customer_name=address.get("full_name") or DEFAULT_CUSTOMER_NAME,
        customer_phone=address.get("phone") or "",
        customer_address=", ".join(p for p in address_parts if p),
        items=[transform_order_item(item, i) for i, item in enumerate(raw.get("items") or [])],
        total_amount=raw.get("total") or raw.get("subtotal") or 0,
        status=status,
        payment_status=raw.get("payment_status"),
        paid=raw.get("payment_status") == "paid",
        created_at=raw.get("created_at") or datetime.utcnow().isoformat(),
        notes=raw.get("notes"),
        is_company_invoice=bool(raw.get("is_company_invoice")),
        invoice_info=InvoiceInfo(**{k: v or "" for k, v in invoice.items()}) if invoice else None,
    )
