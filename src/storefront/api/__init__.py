"""
API module initialization - backend HTTP client and per-resource services.
"""

from .client import ApiClient, REFRESH_PATH
from .auth import AuthService
from .catalog import ProductService, CategoryService, BrandService
from .addresses import AddressService
from .orders import OrderService, OrderJobResult
from .payments import PaymentService, PAYMENT_METHODS
from .inventory import InventoryService
from .notifications import NotificationService
from .chat import ConversationService, StaffService

__all__ = [
    # Client
    "ApiClient",
    "REFRESH_PATH",
    # Services
    "AuthService",
    "ProductService",
    "CategoryService",
    "BrandService",
    "AddressService",
    "OrderService",
    "OrderJobResult",
    "PaymentService",
    "PAYMENT_METHODS",
    "InventoryService",
    "NotificationService",
    "ConversationService",
    "StaffService",
]
