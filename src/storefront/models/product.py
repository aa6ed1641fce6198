"""
Catalog models (products, categories, brands) and the backend payload mapper.
"""

from pydantic import BaseModel, Field, validator
from typing import Any, Dict, List, Optional

from .cart import DEFAULT_UNIT_LABEL, NewLineItem

UNNAMED_PRODUCT = "Sản phẩm không tên"


def _ref_id(value: Any) -> Optional[str]:
    """Backend references arrive either as an id or as a populated document."""
    if value is None:
        return None
    if isinstance(value, dict):
        ref = value.get("_id") or value.get("id")
        return str(ref) if ref else None
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if number != number else number


class Product(BaseModel):
    """Catalog product as used by the storefront."""
    id: str
    name: str
    slug: str = ""
    category_id: Optional[str] = None
    brand_id: Optional[str] = None
    unit: Optional[str] = None
    unit_price: float = 0.0
    discount_percent: float = 0.0
    final_price: float = 0.0
    image_primary: str = ""
    images: List[str] = Field(default_factory=list)
    quantity: Optional[int] = None
    stock_status: str = "in_stock"
    is_active: bool = True
    is_hot: bool = False
    description: Optional[str] = None

    @validator("unit_price", "final_price")
    def check_non_negative(cls, v):
        if v < 0:
            raise ValueError("Must be non-negative")
        return v

    @property
    def in_stock(self) -> bool:
        return self.stock_status != "out_of_stock"

    @property
    def image(self) -> str:
        if self.image_primary:
            return self.image_primary
        return self.images[0] if self.images else ""

    def to_new_line_item(self) -> NewLineItem:
        """Cart input for this product, priced at its final (discounted) price."""
        return NewLineItem(
            id=self.id,
            name=self.name,
            price=self.final_price or self.unit_price,
            image=self.image,
            unit=self.unit or DEFAULT_UNIT_LABEL,
        )

    class Config:
        arbitrary_types_allowed = True


class Category(BaseModel):
    id: str
    name: str
    slug: str = ""
    parent_id: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Category":
        data = dict(raw)
        data["id"] = _ref_id(raw.get("id") or raw.get("_id")) or ""
        data["parent_id"] = _ref_id(raw.get("parent_id"))
        return cls(**data)


class Brand(BaseModel):
    id: str
    name: str
    slug: str = ""
    logo: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Brand":
        data = dict(raw)
        data["id"] = _ref_id(raw.get("id") or raw.get("_id")) or ""
        return cls(**data)


def map_product_from_api(raw: Optional[Dict[str, Any]]) -> Product:
    """
    Normalize a backend product payload.

    Stock quantity is read from `quantity` or `stock_quantity`; when the
    backend omits `stock_status` it is derived from that quantity.

    Raises:
        ValueError: payload is empty
    """
    if not raw:
        raise ValueError("Invalid product data received from API")

    if _is_number(raw.get("quantity")):
        quantity = int(raw["quantity"])
    elif _is_number(raw.get("stock_quantity")):
        quantity = int(raw["stock_quantity"])
    else:
        quantity = None

    stock_status = raw.get("stock_status")
    if not isinstance(stock_status, str) or not stock_status.strip():
        if quantity is None:
            stock_status = "in_stock"
        else:
            stock_status = "in_stock" if quantity > 0 else "out_of_stock"

    product_id = _ref_id(raw.get("id") or raw.get("_id")) or ""
    unit_price = _to_number(raw.get("unit_price"))
    final_price = raw["final_price"] if _is_number(raw.get("final_price")) else unit_price

    if isinstance(raw.get("images"), list):
        images = [str(i) for i in raw["images"] if i]
    elif raw.get("image"):
        images = [str(raw["image"])]
    else:
        images = []

    return Product(
        id=product_id,
        name=raw.get("name") or UNNAMED_PRODUCT,
        slug=raw.get("slug") or product_id,
        category_id=_ref_id(raw.get("category_id")),
        brand_id=_ref_id(raw.get("brand_id")),
        unit=raw.get("unit"),
        unit_price=unit_price,
        discount_percent=_to_number(raw.get("discount_percent")),
        final_price=float(final_price),
        image_primary=raw.get("image_primary") or raw.get("image_url") or "",
        images=images,
        quantity=quantity,
        stock_status=stock_status,
        is_active=raw.get("is_active", True) is not False,
        is_hot=bool(raw.get("is_hot", False)),
        description=raw.get("description"),
    )
