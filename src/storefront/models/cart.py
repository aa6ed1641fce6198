"""
Shopping cart models.
"""

from pydantic import BaseModel, Field, validator
from typing import List

DEFAULT_UNIT_LABEL = "1 sản phẩm"


class NewLineItem(BaseModel):
    """Product picked for the cart, before a quantity is attached."""
    id: str
    name: str
    price: float
    image: str = ""
    unit: str = DEFAULT_UNIT_LABEL

    @validator("id")
    def check_id(cls, v):
        if not v or not v.strip():
            raise ValueError("Product id must not be empty")
        return v

    @validator("price")
    def check_price(cls, v):
        if v < 0:
            raise ValueError("Price must be non-negative")
        return v

    class Config:
        arbitrary_types_allowed = True


class LineItem(NewLineItem):
    """One product-plus-quantity entry of a cart."""
    quantity: int = Field(default=1)

    @validator("quantity")
    def check_quantity(cls, v):
        if v < 1:
            raise ValueError("Quantity must be at least 1")
        return v

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class Cart(BaseModel):
    """Read-only view of the cart held for one namespace."""
    namespace: str
    items: List[LineItem] = Field(default_factory=list)
    total_items: int = 0
    subtotal: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.items

    class Config:
        arbitrary_types_allowed = True
