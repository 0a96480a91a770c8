"""Display helpers for prices and fee tiers.

Amounts come in with an explicit unit: ``*_minor`` arguments are kobo,
``Money`` values carry their own currency. Tier labels are built from the
same fee schedule the calculator uses.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Optional

from .fee.config import FeeScheduleConfig, DEFAULT_FEE_SCHEDULE
from .money import Money, to_major_units
from .units import UnitManager, DEFAULT_CURRENCY


def _symbol(currency: str = DEFAULT_CURRENCY) -> str:
    return UnitManager.instance().currency_symbol(currency)


def _is_valid_minor(amount_minor: Any) -> bool:
    if amount_minor is None or isinstance(amount_minor, bool):
        return False
    try:
        value = float(amount_minor)
    except (TypeError, ValueError):
        return False
    return value == value and value >= 0


def format_price(amount_minor: Any, currency: str = DEFAULT_CURRENCY) -> str:
    """Compact price for cards and lists.

    Examples: 0 -> "FREE", 150000000 -> "₦1.5M", 3500000 -> "₦35.0K",
    50000 -> "₦500", 1250 -> "₦12.50"; None or negative -> "Price TBD".
    """
    if amount_minor == 0 and not isinstance(amount_minor, bool):
        return "FREE"
    if not _is_valid_minor(amount_minor):
        return "Price TBD"

    major = float(to_major_units(float(amount_minor), currency))
    symbol = _symbol(currency)

    if major >= 1_000_000:
        return f"{symbol}{major / 1_000_000:.1f}M"
    if major >= 1000:
        return f"{symbol}{major / 1000:.1f}K"
    if major == int(major):
        return f"{symbol}{int(major):,}"
    return f"{symbol}{major:.2f}"


def format_price_detailed(amount_minor: Any, currency: str = DEFAULT_CURRENCY) -> str:
    """Full price with two decimals, e.g. "₦5,000.00"."""
    if amount_minor == 0 and not isinstance(amount_minor, bool):
        return "FREE"
    if not _is_valid_minor(amount_minor):
        return "Price TBD"
    return format_major(float(to_major_units(float(amount_minor), currency)), currency)


def format_major(amount_major: float, currency: str = DEFAULT_CURRENCY) -> str:
    """Format an amount already in major units, e.g. a computed fee."""
    return f"{_symbol(currency)}{amount_major:,.2f}"


def format_money(money: Money) -> str:
    return format_major(float(money.major), money.currency)


def get_price_range(tickets: Optional[Iterable[Mapping[str, Any]]]) -> dict[str, Any]:
    """Min/max ticket price in Naira plus a display string.

    Tickets without a numeric ``price_kobo`` are skipped.
    """
    empty = {"min": None, "max": None, "formatted": "Price TBD"}
    if not tickets:
        return empty

    prices = [
        float(to_major_units(t["price_kobo"]))
        for t in tickets
        if t and isinstance(t.get("price_kobo"), (int, float))
        and not isinstance(t.get("price_kobo"), bool)
    ]
    if not prices:
        return empty

    low, high = min(prices), max(prices)
    if low == 0 and high == 0:
        formatted = "FREE"
    elif low == high:
        formatted = format_price(Money.from_major(low).amount_minor)
    else:
        formatted = (
            f"{format_price(Money.from_major(low).amount_minor)} - "
            f"{format_price(Money.from_major(high).amount_minor)}"
        )

    return {"min": low, "max": high, "formatted": formatted}


def fee_tier_label(price_major: Any, schedule: Optional[FeeScheduleConfig] = None) -> str:
    """Describe the fee a ticket at ``price_major`` will attract."""
    schedule = schedule or DEFAULT_FEE_SCHEDULE
    try:
        price = float(price_major)
    except (TypeError, ValueError):
        return "Invalid price"
    if price != price or price <= 0:
        return "Invalid price"

    if price <= schedule.tier_threshold[0]:
        rate = f"{schedule.standard_rate[0] * 100:g}%"
        if schedule.vat_on_standard_tier:
            return f"{rate} service fee + VAT"
        return f"{rate} service fee (includes VAT)"

    rate = f"{schedule.premium_rate[0] * 100:g}%"
    flat = f"{_symbol()}{schedule.premium_flat_fee[0]:,.0f}"
    return f"{rate} + {flat} service fee + VAT"
