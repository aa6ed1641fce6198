"""
Catalog API - products, categories and brands (storefront reads, admin CRUD).

Read-only calls retry transient failures; admin mutations do not.
"""

import logging
from typing import Any, Dict, List, Optional

from storefront.core.retry_utils import retry_with_backoff
from storefront.models.product import Brand, Category, Product, map_product_from_api
from .client import ApiClient

logger = logging.getLogger(__name__)


def _as_list(data: Any, key: str) -> List[Dict[str, Any]]:
    """Lists arrive bare or wrapped in an envelope (`{"products": [...]}`)."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        for k in (key, "data", "items"):
            if isinstance(data.get(k), list):
                return data[k]
    return []


class ProductService:
    base_path = "/products"

    def __init__(self, client: ApiClient):
        self.client = client

    @retry_with_backoff
    def get_products(self, category_slug: Optional[str] = None, page: Optional[int] = None, limit: Optional[int] = None) -> List[Product]:
        data = self.client.get(self.base_path, params={"category": category_slug, "page": page, "limit": limit})
        products = [map_product_from_api(p) for p in _as_list(data, "products")]
        logger.info(f"[CATALOG] Fetched {len(products)} products (category={category_slug})")
        return products

    @retry_with_backoff
    def get_promotions(self, category_slug: Optional[str] = None, page: Optional[int] = None, limit: Optional[int] = None) -> List[Product]:
        data = self.client.get(f"{self.base_path}/promotions", params={"category": category_slug, "page": page, "limit": limit})
        return [map_product_from_api(p) for p in _as_list(data, "products")]

    @retry_with_backoff
    def search(self, keyword: str, skip: Optional[int] = None) -> List[Product]:
        data = self.client.get(f"{self.base_path}/search", params={"q": keyword, "skip": skip})
        return [map_product_from_api(p) for p in _as_list(data, "products")]

    @retry_with_backoff
    def get_product(self, product_id: str) -> Product:
        return map_product_from_api(self.client.get(f"{self.base_path}/{product_id}"))

    @retry_with_backoff
    def get_related(self, product_id: str, limit: int = 5) -> List[Product]:
        data = self.client.get(f"{self.base_path}/{product_id}/related", params={"limit": limit})
        return [map_product_from_api(p) for p in _as_list(data, "products")]

    def create_product(self, data: Dict[str, Any]) -> Product:
        return map_product_from_api(self.client.post(self.base_path, data))

    def update_product(self, product_id: str, data: Dict[str, Any]) -> Product:
        return map_product_from_api(self.client.put(f"{self.base_path}/{product_id}", data))

    def delete_product(self, product_id: str) -> Dict[str, Any]:
        return self.client.delete(f"{self.base_path}/{product_id}")


class CategoryService:
    base_path = "/categories"

    def __init__(self, client: ApiClient):
        self.client = client

    @retry_with_backoff
    def get_all(self) -> List[Category]:
        return [Category.from_api(c) for c in _as_list(self.client.get(self.base_path), "categories")]

    @retry_with_backoff
    def get_root(self) -> List[Category]:
        return [Category.from_api(c) for c in _as_list(self.client.get(f"{self.base_path}/root"), "categories")]

    @retry_with_backoff
    def get_children(self, category_id: str) -> List[Category]:
        data = self.client.get(f"{self.base_path}/{category_id}/children")
        return [Category.from_api(c) for c in _as_list(data, "categories")]

    @retry_with_backoff
    def get_by_slug(self, slug: str) -> Category:
        return Category.from_api(self.client.get(f"{self.base_path}/slug/{slug}"))

    def create(self, data: Dict[str, Any]) -> Category:
        return Category.from_api(self.client.post(self.base_path, data))

    def update(self, category_id: str, data: Dict[str, Any]) -> Category:
        return Category.from_api(self.client.put(f"{self.base_path}/{category_id}", data))

    def delete(self, category_id: str) -> Dict[str, Any]:
        return self.client.delete(f"{self.base_path}/{category_id}")


class BrandService:
    base_path = "/brands"

    def __init__(self, client: ApiClient):
        self.client = client

    @retry_with_backoff
    def get_all(self) -> List[Brand]:
        return [Brand.from_api(b) for b in _as_list(self.client.get(self.base_path), "brands")]

    @retry_with_backoff
    def get_by_slug(self, slug: str) -> Brand:
        return Brand.from_api(self.client.get(f"{self.base_path}/slug/{slug}"))

    def create(self, data: Dict[str, Any]) -> Brand:
        return Brand.from_api(self.client.post(self.base_path, data))

    def update(self, brand_id: str, data: Dict[str, Any]) -> Brand:
        return Brand.from_api(self.client.put(f"{self.base_path}/{brand_id}", data))

    def delete(self, brand_id: str) -> Dict[str, Any]:
        return self.client.delete(f"{self.base_path}/{brand_id}")
