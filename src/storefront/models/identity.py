"""
Identity models: the authenticated user or the guest sentinel.
"""

from pydantic import BaseModel
from typing import Any, Dict, Optional, Union

GUEST_NAMESPACE = "cart_guest"
CART_NAMESPACE_PREFIX = "cart_"


class User(BaseModel):
    """Authenticated principal as returned by the profile endpoint."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str = "customer"
    phone: Optional[str] = None
    avatar: Optional[str] = None

    @property
    def is_staff(self) -> bool:
        return self.role in ("staff", "admin")

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "User":
        """Build a user from a backend payload (`_id` or `id`)."""
        data = dict(raw)
        data["id"] = str(raw.get("id") or raw.get("_id") or "")
        return cls(**data)

    class Config:
        arbitrary_types_allowed = True


class Guest:
    """Unauthenticated visitor."""

    id = None

    def __repr__(self) -> str:
        return "GUEST"


GUEST = Guest()

Identity = Union[User, Guest]


def is_guest(identity: Optional[Identity]) -> bool:
    return identity is None or isinstance(identity, Guest) or not identity.id


def identity_id(identity: Optional[Identity]) -> Optional[str]:
    return None if is_guest(identity) else identity.id


def namespace_for(identity: Optional[Identity]) -> str:
    """Storage key scoping a cart to one identity."""
    if is_guest(identity):
        return GUEST_NAMESPACE
    return f"{CART_NAMESPACE_PREFIX}{identity.id}"
