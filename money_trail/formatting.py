"""Formatting helpers for money amounts and labels shown alongside the graph."""

from decimal import ROUND_HALF_UP, Decimal


def _round_half_up(value: float, digits: int = 0) -> str:
    quantum = Decimal(1).scaleb(-digits)
    return str(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def format_currency(amount: float) -> str:
    """Compact dollar amount: ``$1.5B``, ``$2.3M``, ``$45K``, ``$900``."""
    sign = "-" if amount < 0 else ""
    amount = abs(amount)
    if amount >= 1_000_000_000:
        return f"{sign}${_round_half_up(amount / 1_000_000_000, 1)}B"
    if amount >= 1_000_000:
        return f"{sign}${_round_half_up(amount / 1_000_000, 1)}M"
    if amount >= 1_000:
        return f"{sign}${_round_half_up(amount / 1_000)}K"
    return f"{sign}${_round_half_up(amount)}"


def format_usd(amount: float) -> str:
    """Whole-dollar amount with thousands separators, e.g. ``$1,234,567``."""
    sign = "-" if amount < 0 else ""
    whole = int(Decimal(_round_half_up(abs(amount))))
    return f"{sign}${whole:,}"


def format_large_number(amount: float) -> str:
    """Like ``format_currency`` but keeps one decimal for thousands; small values use ``format_usd``."""
    sign = "-" if amount < 0 else ""
    value = abs(amount)
    if value >= 1_000_000_000:
        return f"{sign}${_round_half_up(value / 1_000_000_000, 1)}B"
    if value >= 1_000_000:
        return f"{sign}${_round_half_up(value / 1_000_000, 1)}M"
    if value >= 1_000:
        return f"{sign}${_round_half_up(value / 1_000, 1)}K"
    return format_usd(amount)


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
