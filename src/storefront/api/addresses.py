"""
Addresses API - the signed-in user's shipping addresses.
"""

from typing import Any, Dict, List

from storefront.models.address import Address, AddressInput
from .client import ApiClient


class AddressService:
    base_path = "/addresses"

    def __init__(self, client: ApiClient):
        self.client = client

    def get_addresses(self) -> List[Address]:
        # Returned as a bare list.
        return [Address.from_api(a) for a in self.client.get(self.base_path) or []]

    def get_address(self, address_id: str) -> Address:
        return Address.from_api(self.client.get(f"{self.base_path}/{address_id}"))

    def create_address(self, data: AddressInput) -> Address:
        return Address.from_api(self.client.post(self.base_path, data.dict(exclude_none=True)))

    def update_address(self, address_id: str, data: Dict[str, Any]) -> Address:
        return Address.from_api(self.client.put(f"{self.base_path}/{address_id}", data))

    def delete_address(self, address_id: str) -> Dict[str, Any]:
        return self.client.delete(f"{self.base_path}/{address_id}")

    def set_default_address(self, address_id: str) -> Address:
        return self.update_address(address_id, {"is_default": True})
