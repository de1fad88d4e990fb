"""
Display helpers
===============

Money and time formatting used when printing campaigns (CLI listing,
exports). Kept free of any locale machinery: amounts use a fixed symbol
table and comma thousands separators.
"""

from __future__ import annotations
from datetime import datetime
from typing import Dict, Tuple

# code -> (symbol, decimals)
CURRENCIES: Dict[str, Tuple[str, int]] = {
    "LKR": ("Rs.", 2),
    "USD": ("$", 2),
    "EUR": ("€", 2),
    "GBP": ("£", 2),
}


def format_currency(amount: float, currency: str = "LKR", show_code: bool = False) -> str:
    """`format_currency(1250000)` -> `'Rs.1,250,000.00'`."""
    symbol, decimals = CURRENCIES.get(currency.upper(), ("", 2))
    text = f"{symbol}{amount:,.{decimals}f}"
    if show_code or not symbol:
        text = f"{text} {currency.upper()}"
    return text


def format_compact(amount: float) -> str:
    """Short form for badges: 950 -> '950', 1500 -> '1.5K', 3500000 -> '3.5M'."""
    sign = "-" if amount < 0 else ""
    a = abs(amount)
    for threshold, suffix in ((1_000_000_000, "B"), (1_000_000, "M"), (1_000, "K")):
        if a >= threshold:
            value = f"{a / threshold:.1f}".rstrip("0").rstrip(".")
            return f"{sign}{value}{suffix}"
    return f"{sign}{a:.0f}"


def format_time_remaining(end_date: datetime, now: datetime) -> str:
    if end_date <= now:
        return "Ended"
    delta = end_date - now
    if delta.days >= 1:
        return f"{delta.days} day{'s' if delta.days != 1 else ''} left"
    hours = delta.seconds // 3600
    if hours >= 1:
        return f"{hours} hour{'s' if hours != 1 else ''} left"
    minutes = max(1, delta.seconds // 60)
    return f"{minutes} minute{'s' if minutes != 1 else ''} left"
