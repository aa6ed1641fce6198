"""
Inventory API - stock import/export/adjustment and per-product history.
"""

import logging
from typing import List

from storefront.models.inventory import (
    InventoryAdjustment, InventoryOperation, InventoryTransaction, ProductInventory
)
from .client import ApiClient

logger = logging.getLogger(__name__)


class InventoryService:
    base_path = "/inventory"

    def __init__(self, client: ApiClient):
        self.client = client

    def import_stock(self, operation: InventoryOperation) -> InventoryTransaction:
        """Nhập kho: add `quantity` units to the product's stock."""
        data = self.client.post(f"{self.base_path}/import", operation.dict(exclude_none=True))
        logger.info(f"[INVENTORY] Imported {operation.quantity} of {operation.product_id}")
        return InventoryTransaction.from_api(data["transaction"])

    def export_stock(self, operation: InventoryOperation) -> InventoryTransaction:
        """Xuất kho: remove `quantity` units from the product's stock."""
        data = self.client.post(f"{self.base_path}/export", operation.dict(exclude_none=True))
        logger.info(f"[INVENTORY] Exported {operation.quantity} of {operation.product_id}")
        return InventoryTransaction.from_api(data["transaction"])

    def adjust_stock(self, adjustment: InventoryAdjustment) -> InventoryTransaction:
        """Set the stock count to the value found at stocktake."""
        data = self.client.post(f"{self.base_path}/adjust", adjustment.dict(exclude_none=True))
        logger.info(f"[INVENTORY] Adjusted {adjustment.product_id} to {adjustment.new_quantity}")
        return InventoryTransaction.from_api(data["transaction"])

    def get_product_inventory(self, product_id: str) -> ProductInventory:
        data = self.client.get(f"{self.base_path}/product/{product_id}")
        return ProductInventory.from_api(data["product"])

    def get_history(self, product_id: str) -> List[InventoryTransaction]:
        data = self.client.get(f"{self.base_path}/history/{product_id}")
        return [InventoryTransaction.from_api(t) for t in data.get("history", [])]
