"""
Display formatting for prices, dates and order statuses (vi-VN conventions).
"""

from datetime import datetime
from typing import Optional, Union

from storefront.core.realtime import ORDER_STATUS_LABELS

CURRENCY_SYMBOL = "₫"


def format_price(amount: Union[int, float, None]) -> str:
    """1234567 -> "1.234.567 ₫" (dot thousands separator, no decimals)."""
    value = int(round(amount or 0))
    sign = "-" if value < 0 else ""
    grouped = f"{abs(value):,}".replace(",", ".")
    return f"{sign}{grouped} {CURRENCY_SYMBOL}"


def format_date(value: Optional[str]) -> str:
    """ISO timestamp -> "dd/mm/yyyy HH:MM"; unparseable input is returned unchanged."""
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%d/%m/%Y %H:%M")


def order_status_label(status: str) -> str:
    return ORDER_STATUS_LABELS.get(status, status)
