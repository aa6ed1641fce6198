"""
Identity Resolver - who is currently using the app, plus change notification.
"""

import logging
from collections import deque
from typing import Callable, List, Optional, Tuple

from storefront.models.identity import GUEST, Identity, User, identity_id

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

IdentityListener = Callable[[Identity, Identity], None]


class IdentityResolver:
    """
    Holds the current identity (a User or GUEST) and notifies subscribers
    with `(old, new)` exactly once per transition.

    A transition requested from inside a listener is queued and delivered
    after every listener has seen the current one, so all listeners observe
    transitions in the same order.
    """

    def __init__(self, user: Optional[User] = None):
        self._current: Identity = user or GUEST
        self._listeners: List[IdentityListener] = []
        self._pending: deque = deque()
        self._notifying = False

    @property
    def current(self) -> Identity:
        return self._current

    @property
    def user(self) -> Optional[User]:
        return self._current if isinstance(self._current, User) else None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        """Register a listener; returns the matching unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_user(self, user: Optional[User]) -> None:
        """Switch to `user`, or to GUEST when None. Same id is not a transition."""
        new: Identity = user or GUEST
        if identity_id(new) == identity_id(self._current):
            # Refreshed profile for the same principal.
            self._current = new
            return

        old = self._current
        self._current = new
        logger.info(f"[IDENTITY] {identity_id(old) or 'guest'} -> {identity_id(new) or 'guest'}")
        self._pending.append((old, new))
        self._drain()

    def clear(self) -> None:
        self.set_user(None)

    def _drain(self) -> None:
        if self._notifying:
            return
        self._notifying = True
        try:
            while self._pending:
                transition: Tuple[Identity, Identity] = self._pending.popleft()
                for listener in list(self._listeners):
                    try:
                        listener(*transition)
                    except Exception as e:
                        logger.error(f"[IDENTITY] Listener {listener!r} failed: {e}")
        finally:
            self._notifying = False
