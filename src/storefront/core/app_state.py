"""
Application state container - builds the shared store, identity, cart and services once.
"""

from dataclasses import dataclass
from typing import Optional

import requests

from storefront.api import (
    AddressService, ApiClient, AuthService, BrandService, CategoryService, ConversationService,
    InventoryService, NotificationService, OrderService, PaymentService, ProductService, StaffService
)
from .cart_store import CartStore
from .checkout import CheckoutService
from .identity import IdentityResolver
from .realtime import EventChannel, NotificationCenter
from .session import AuthSession
from .socket_client import SocketTransport
from .storage import CartStorage, KeyValueStore, SearchHistory, TokenStore


@dataclass
class AppState:
    store: KeyValueStore
    tokens: TokenStore
    resolver: IdentityResolver
    cart: CartStore
    search_history: SearchHistory
    client: ApiClient
    auth: AuthService
    products: ProductService
    categories: CategoryService
    brands: BrandService
    addresses: AddressService
    orders: OrderService
    payments: PaymentService
    inventory: InventoryService
    notifications: NotificationService
    conversations: ConversationService
    staff: StaffService
    session: AuthSession
    checkout: CheckoutService
    channel: EventChannel
    notification_center: NotificationCenter
    socket: SocketTransport


def build_app_state(
    db_path: Optional[str] = None,
    http_session: Optional[requests.Session] = None,
    base_url: Optional[str] = None
) -> AppState:
    """Wire every component against one persisted store; the identity starts as guest."""
    store = KeyValueStore(db_path)
    tokens = TokenStore(store)
    cart_storage = CartStorage(store)
    resolver = IdentityResolver()
    cart = CartStore(resolver, cart_storage)

    client = ApiClient(tokens, base_url=base_url, session=http_session)
    auth = AuthService(client)
    orders = OrderService(client)
    payments = PaymentService(client)
    staff = StaffService(client)

    channel = EventChannel()
    socket = SocketTransport(channel, tokens)
    resolver.subscribe(socket.on_identity_change)

    return AppState(
        store=store,
        tokens=tokens,
        resolver=resolver,
        cart=cart,
        search_history=SearchHistory(store),
        client=client,
        auth=auth,
        products=ProductService(client),
        categories=CategoryService(client),
        brands=BrandService(client),
        addresses=AddressService(client),
        orders=orders,
        payments=payments,
        inventory=InventoryService(client),
        notifications=NotificationService(client),
        conversations=ConversationService(client),
        staff=staff,
        session=AuthSession(auth, resolver, cart_storage, tokens, staff),
        checkout=CheckoutService(cart, orders, payments),
        channel=channel,
        notification_center=NotificationCenter(channel),
        socket=socket,
    )
