"""
Helper utilities
"""
from decimal import Decimal, ROUND_HALF_UP


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Safely divide two numbers"""
    try:
        return numerator / denominator if denominator != 0 else default
    except (TypeError, ZeroDivisionError):
        return default


def round_half_up(value: float, places: int = 0) -> float:
    """Round like a cash register: 0.5 always goes up, not to even."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_percent(value: float) -> int:
    """Round a percentage to a whole number (half-up)."""
    return int(round_half_up(value))


def format_currency(amount: float, currency: str = "USD") -> str:
    """Format amount as currency"""
    symbols = {"USD": "$", "EUR": "€", "GBP": "£"}
    symbol = symbols.get(currency, currency)
    return f"{symbol}{amount:,.2f}"
