"""
Cart State Container - the in-memory cart of the active identity.

Every mutation writes the whole line-item list through to the persisted
store under the current namespace. When the identity changes the list is
swapped wholesale (never merged) for the record saved under the new
identity's namespace.
"""

import logging
from typing import Callable, List, Optional, Tuple

from storefront.models.cart import Cart, LineItem, NewLineItem
from storefront.models.identity import Identity, namespace_for
from .identity import IdentityResolver
from .storage import CartStorage

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

CartListener = Callable[[Cart], None]


class CartStore:
    """Owns the line items of the current namespace; exposes only defined operations."""

    def __init__(self, resolver: IdentityResolver, storage: CartStorage):
        self._resolver = resolver
        self._storage = storage
        self._items: List[LineItem] = []
        self._listeners: List[CartListener] = []
        self._namespace = namespace_for(resolver.current)
        self._items = storage.read(self._namespace)
        self._unsubscribe = resolver.subscribe(self._on_identity_change)
        logger.info(f"[CART] Loaded {len(self._items)} line items from {self._namespace}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def items(self) -> Tuple[LineItem, ...]:
        return tuple(item.copy() for item in self._items)

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def subtotal(self) -> float:
        return sum(item.line_total for item in self._items)

    def get_item(self, product_id: str) -> Optional[LineItem]:
        item = self._find(product_id)
        return item.copy() if item else None

    def snapshot(self) -> Cart:
        return Cart(
            namespace=self._namespace,
            items=list(self.items),
            total_items=self.total_items,
            subtotal=self.subtotal,
        )

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Views register here to re-render after every change of the list."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_item(self, item: NewLineItem, quantity: Optional[int] = 1) -> None:
        """
        Add `quantity` of a product; an id already in the cart is incremented.

        A missing or non-positive quantity counts as 1, so the call always
        succeeds and no line ever drops below 1.
        """
        if not quantity or quantity < 1:
            quantity = 1
        existing = self._find(item.id)
        if existing:
            existing.quantity += quantity
        else:
            data = item.dict()
            data["quantity"] = quantity
            self._items.append(LineItem(**data))
        logger.info(f"[CART] add {item.id} x{quantity} ({self._namespace})")
        self._commit()

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """Set the quantity of a line. Quantities below 1 are ignored."""
        if quantity < 1:
            return
        existing = self._find(product_id)
        if not existing or existing.quantity == quantity:
            return
        existing.quantity = quantity
        self._commit()

    def remove_item(self, product_id: str) -> None:
        before = len(self._items)
        self._items = [item for item in self._items if item.id != product_id]
        if len(self._items) != before:
            logger.info(f"[CART] remove {product_id} ({self._namespace})")
            self._commit()

    def clear_cart(self) -> None:
        self._items = []
        logger.info(f"[CART] cleared {self._namespace}")
        self._commit()

    def close(self) -> None:
        """Stop following identity changes."""
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _find(self, product_id: str) -> Optional[LineItem]:
        return next((item for item in self._items if item.id == product_id), None)

    def _commit(self) -> None:
        self._storage.write(self._namespace, self._items)
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        cart = self.snapshot()
        for listener in list(self._listeners):
            listener(cart)

    def _on_identity_change(self, old: Identity, new: Identity) -> None:
        # Visible state goes empty first; the old namespace keeps its record.
        self._items = []
        namespace = namespace_for(new)
        self._namespace = namespace
        self._notify()

        saved = self._storage.read(namespace)

        # A later transition may already have been recorded while reading.
        if saved and namespace == namespace_for(self._resolver.current):
            self._items = saved
            logger.info(f"[CART] Restored {len(saved)} line items from {namespace}")
            self._notify()
