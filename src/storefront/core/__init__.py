"""
Core module initialization.

Modules that talk to the backend (session, checkout, app_state) import the
api package and are imported directly rather than re-exported here.
"""

from .config import Settings, settings, load_settings

from .retry_utils import (
    retry_with_backoff,
    RetryConfig,
    ApiError,
    TransientError,
    PermanentError,
    AuthenticationRequired,
    error_message,
    form_error_message,
    DEFAULT_ERROR_MESSAGE
)

from .db import get_db_connection, init_database

from .storage import KeyValueStore, CartStorage, TokenStore, SearchHistory

from .identity import IdentityResolver

from .cart_store import CartStore

__all__ = [
    # Configuration
    "Settings",
    "settings",
    "load_settings",
    # Errors and retry
    "retry_with_backoff",
    "RetryConfig",
    "ApiError",
    "TransientError",
    "PermanentError",
    "AuthenticationRequired",
    "error_message",
    "form_error_message",
    "DEFAULT_ERROR_MESSAGE",
    # Database
    "get_db_connection",
    "init_database",
    # Storage
    "KeyValueStore",
    "CartStorage",
    "TokenStore",
    "SearchHistory",
    # State
    "IdentityResolver",
    "CartStore",
]
