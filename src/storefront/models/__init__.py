"""
Models package - data validation schemas for the storefront.
"""

# Cart models
from .cart import NewLineItem, LineItem, Cart, DEFAULT_UNIT_LABEL

# Identity models
from .identity import User, Guest, GUEST, Identity, is_guest, namespace_for

# Catalog models
from .product import Product, Category, Brand, map_product_from_api

# Order models
from .order import (
    Order, OrderItem, CustomerInfo, CreateOrderPayload, OrderLine, InvoiceInfo,
    transform_order, staff_actions
)

# Address models
from .address import Address, AddressInput, is_valid_phone

# Inventory models
from .inventory import InventoryOperation, InventoryAdjustment, InventoryTransaction, ProductInventory

# Real-time payloads
from .events import OrderEvent, ChatMessage, ConversationEvent, Notification

# API models
from .api import ApiErrorBody, Page

__all__ = [
    # Cart
    "NewLineItem",
    "LineItem",
    "Cart",
    "DEFAULT_UNIT_LABEL",
    # Identity
    "User",
    "Guest",
    "GUEST",
    "Identity",
    "is_guest",
    "namespace_for",
    # Catalog
    "Product",
    "Category",
    "Brand",
    "map_product_from_api",
    # Orders
    "Order",
    "OrderItem",
    "CustomerInfo",
    "CreateOrderPayload",
    "OrderLine",
    "InvoiceInfo",
    "transform_order",
    "staff_actions",
    # Addresses
    "Address",
    "AddressInput",
    "is_valid_phone",
    # Inventory
    "InventoryOperation",
    "InventoryAdjustment",
    "InventoryTransaction",
    "ProductInventory",
    # Real-time
    "OrderEvent",
    "ChatMessage",
    "ConversationEvent",
    "Notification",
    # API
    "ApiErrorBody",
    "Page",
]
