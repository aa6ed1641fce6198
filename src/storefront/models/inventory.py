"""
Inventory models for the back-office stock dialogs.
"""

from pydantic import BaseModel, validator
from typing import Any, Dict, Literal, Optional

LOW_STOCK_THRESHOLD = 10


class InventoryOperation(BaseModel):
    """Stock import or export request."""
    product_id: str
    quantity: int
    note: Optional[str] = None

    @validator("product_id")
    def check_product(cls, v):
        if not v or not v.strip():
            raise ValueError("Vui lòng chọn sản phẩm")
        return v

    @validator("quantity")
    def check_quantity(cls, v):
        if v <= 0:
            raise ValueError("Số lượng phải lớn hơn 0")
        return v

    @validator("note")
    def blank_note_is_none(cls, v):
        return v.strip() or None if v else None


class InventoryAdjustment(BaseModel):
    """Stock count correction after a physical stocktake."""
    product_id: str
    new_quantity: int
    note: Optional[str] = None

    @validator("product_id")
    def check_product(cls, v):
        if not v or not v.strip():
            raise ValueError("Vui lòng chọn sản phẩm")
        return v

    @validator("new_quantity")
    def check_new_quantity(cls, v):
        if v < 0:
            raise ValueError("Số lượng không được âm")
        return v

    @validator("note")
    def blank_note_is_none(cls, v):
        return v.strip() or None if v else None


class InventoryTransaction(BaseModel):
    id: str
    product_id: str
    type: Literal["import", "export", "adjustment"]
    quantity: int
    quantity_before: int
    quantity_after: int
    note: Optional[str] = None
    created_by: Optional[str] = None
    created_at: str

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "InventoryTransaction":
        data = dict(raw)
        data["id"] = str(raw.get("_id") or raw.get("id") or "")
        creator = raw.get("created_by")
        if isinstance(creator, dict):
            data["created_by"] = creator.get("name") or creator.get("email")
        return cls(**data)


class ProductInventory(BaseModel):
    id: str
    name: str
    quantity: int = 0
    stock_status: str = "in_stock"

    def is_low_stock(self, threshold: int = LOW_STOCK_THRESHOLD) -> bool:
        return self.quantity <= threshold

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "ProductInventory":
        data = dict(raw)
        data["id"] = str(raw.get("_id") or raw.get("id") or "")
        return cls(**data)
