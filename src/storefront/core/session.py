"""
Auth session - ties the auth API to the identity resolver and the cart records.

Login and logout decide which persisted carts survive; the identity
transition that follows makes the cart store swap to the new namespace.
"""

import logging
from typing import Any, Dict, Optional

from storefront.api.auth import AuthService
from storefront.api.chat import StaffService
from storefront.models.identity import GUEST_NAMESPACE, User, namespace_for
from .identity import IdentityResolver
from .retry_utils import ApiError
from .storage import CartStorage, TokenStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)


class AuthSession:
    def __init__(
        self,
        auth: AuthService,
        resolver: IdentityResolver,
        cart_storage: CartStorage,
        tokens: TokenStore,
        staff: Optional[StaffService] = None
    ):
        self.auth = auth
        self.resolver = resolver
        self.cart_storage = cart_storage
        self.tokens = tokens
        self.staff = staff

    @property
    def user(self) -> Optional[User]:
        return self.resolver.user

    def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Log in and switch the identity to the returned user.

        The previously stored user's cart and the guest cart are dropped
        before the switch; the new user's own saved cart is kept and
        restored by the cart store.

        Raises:
            ApiError: rejected credentials or backend failure
        """
        previous_id = self.tokens.load_user_id()

        data = self.auth.login_email(email, password)
        if data.get("requiresEmailVerification"):
            return data

        self._drop_previous_carts(previous_id)

        raw_user = data.get("user")
        if raw_user:
            user = User.from_api(raw_user)
        else:
            user = self.auth.get_me()
        self._become(user)
        return data

    def register(self, email: str, password: str, name: Optional[str] = None) -> Dict[str, Any]:
        previous_id = self.tokens.load_user_id()

        data = self.auth.register_email(email, password, name)
        self._drop_previous_carts(previous_id)

        if data.get("user") and self.tokens.access_token:
            self._become(User.from_api(data["user"]))
        return data

    def logout(self) -> None:
        """Sign out locally even when the remote logout fails."""
        user = self.resolver.user

        if user and user.is_staff:
            self._set_presence("OFFLINE")

        try:
            self.auth.logout()
        except ApiError as e:
            logger.warning(f"[AUTH] Logout API error: {e}")

        if user:
            self.cart_storage.remove(namespace_for(user))
        self.cart_storage.remove(GUEST_NAMESPACE)

        self.tokens.clear()
        self.resolver.clear()
        logger.info("[AUTH] Signed out")

    def init_auth(self) -> Optional[User]:
        """
        Restore the session on startup.

        Uses the stored access token, or the refresh token when there is
        none. Any failure leaves the app signed out as guest.
        """
        try:
            if not self.tokens.access_token:
                self.auth.refresh_token()
            user = self.auth.get_me()
        except ApiError as e:
            logger.info(f"[AUTH] No session to restore: {e}")
            self.tokens.access_token = None
            self.resolver.clear()
            return None

        if user is None:
            self.tokens.access_token = None
            self.resolver.clear()
            return None

        self._become(user)
        return user

    def _drop_previous_carts(self, previous_id: Optional[str]) -> None:
        if previous_id:
            self.cart_storage.remove(f"cart_{previous_id}")
        self.cart_storage.remove(GUEST_NAMESPACE)

    def _become(self, user: Optional[User]) -> None:
        self.resolver.set_user(user)
        if user and user.is_staff:
            self._set_presence("ONLINE")

    def _set_presence(self, status: str) -> None:
        if not self.staff:
            return
        try:
            self.staff.update_presence(status)
        except ApiError as e:
            logger.warning(f"[AUTH] Could not set staff presence {status}: {e}")
