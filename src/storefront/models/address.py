"""
Shipping address models.
"""

import re

from pydantic import BaseModel, validator
from typing import Any, Dict, Optional

PHONE_PATTERN = re.compile(r"^(0|\+84)[0-9]{9}$")


def is_valid_phone(phone: str) -> bool:
    """Vietnamese mobile number: 0 or +84 followed by nine digits."""
    return bool(PHONE_PATTERN.match(re.sub(r"\s", "", phone or "")))


class Address(BaseModel):
    id: str
    full_name: str
    phone: str
    address: str
    ward: str = ""
    district: Optional[str] = None
    city: str = ""
    zip_code: Optional[str] = None
    is_default: bool = False

    @property
    def full_address(self) -> str:
        parts = [self.address, self.ward, self.district, self.city]
        return ", ".join(p for p in parts if p)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Address":
        data = dict(raw)
        data["id"] = str(raw.get("_id") or raw.get("id") or "")
        return cls(**data)


class AddressInput(BaseModel):
    """New shipping address as entered at checkout."""
    full_name: str
    phone: str
    address: str
    ward: str
    district: Optional[str] = None
    city: str
    zip_code: Optional[str] = None
    is_default: bool = False

    @validator("full_name", "address", "ward", "city")
    def check_required(cls, v):
        if not v or not v.strip():
            raise ValueError("Vui lòng điền đầy đủ thông tin!")
        return v.strip()

    @validator("phone")
    def check_phone(cls, v):
        if not is_valid_phone(v):
            raise ValueError("Số điện thoại không hợp lệ")
        return re.sub(r"\s", "", v)
