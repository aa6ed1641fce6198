"""
Utils module initialization.
"""

from .formatters import format_price, format_date, order_status_label
from .health import check_database, check_api_connectivity, check_llm_connectivity, health_check

__all__ = [
    # Formatting
    "format_price",
    "format_date",
    "order_status_label",
    # Health checks
    "check_database",
    "check_api_connectivity",
    "check_llm_connectivity",
    "health_check",
]
