"""Cart pricing: per-ticket fees, cart totals and single-ticket quotes.

These functions are pure. They take the cart as it is held client-side
(line items priced in kobo) and return immutable breakdowns in Naira,
with the grand total also given in kobo for the payment gateway.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from functools import lru_cache
from typing import Any, Optional, Union
import math

import numpy as np
import jax.numpy as jnp
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .fee.config import FeeScheduleConfig, DEFAULT_FEE_SCHEDULE
from .fee.kernel import line_item_fees, cart_fee_totals, gateway_fee
from .fee.runtime import FeeRuntime
from .fee.tier import Tier
from .money import Money, to_major_units, to_minor_units
from .types import MajorValue, MinorValue

__all__ = [
    'CartLineItem',
    'LineItemFee',
    'ItemBreakdown',
    'CartTotals',
    'OrderTotals',
    'compute_line_item_fee',
    'compute_cart_totals',
    'compute_order_totals',
]


@lru_cache(maxsize=32)
def runtime_for(schedule: FeeScheduleConfig) -> FeeRuntime:
    """JAX runtime for a schedule; schedules are frozen, so this is cached."""
    return schedule.to_runtime()


class CartLineItem(BaseModel):
    """One line of the client-side cart.

    Field names follow the storefront (``cartId``, ``tierName``,
    ``eventTitle``); snake_case names are accepted too. Unknown fields are
    kept so they can be passed through to the payment metadata.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    cart_id: Optional[Union[str, int]] = Field(default=None, alias="cartId")
    id: Optional[Union[str, int]] = None
    price: MinorValue = Field(ge=0, description="Unit price in kobo")
    quantity: int = Field(default=1, ge=1)
    tier_name: Optional[str] = Field(default=None, alias="tierName")
    event_title: Optional[str] = Field(default=None, alias="eventTitle")

    @field_validator("quantity", mode="before")
    @classmethod
    def _default_quantity(cls, v: Any) -> Any:
        # The storefront treats a missing or zero quantity as one ticket
        if v is None or v == 0:
            return 1
        return v

    @property
    def line_id(self) -> Optional[Union[str, int]]:
        """Identifier used to match this line across transformations."""
        return self.cart_id or self.id

    @property
    def unit_price(self) -> Money:
        return Money(self.price)

    def wire_fields(self) -> dict[str, Any]:
        """The fields exactly as the caller supplied them."""
        fields = self.model_dump(by_alias=True, exclude_unset=True)
        fields.update(self.model_extra or {})
        return fields


class LineItemFee(BaseModel):
    """Fees for a single ticket, in Naira."""

    model_config = ConfigDict(frozen=True)

    tier: Tier
    service_fee: MajorValue
    vat: MajorValue
    total_fee: MajorValue


class ItemBreakdown(BaseModel):
    """Priced cart line. Fee components already include the quantity."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cart_id: Optional[Union[str, int]] = Field(default=None, alias="cartId")
    event_title: Optional[str] = Field(default=None, alias="eventTitle")
    tier_name: Optional[str] = Field(default=None, alias="tierName")
    price_per_ticket: MajorValue = Field(alias="pricePerTicket")
    quantity: int
    subtotal: MajorValue
    service_fee: MajorValue = Field(alias="serviceFee")
    vat: MajorValue
    total_fees: MajorValue = Field(alias="totalFees")
    tier: Tier


class CartTotals(BaseModel):
    """Price breakdown for a whole cart.

    Dumping with ``by_alias=True`` gives the storefront's keys
    (``serviceFee``, ``finalTotalKobo``, ``itemsBreakdown``...).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    subtotal: MajorValue = 0.0
    service_fee: MajorValue = Field(default=0.0, alias="serviceFee")
    vat: MajorValue = 0.0
    total_fees: MajorValue = Field(default=0.0, alias="totalFees")
    final_total: MajorValue = Field(default=0.0, alias="finalTotal")
    final_total_minor: MinorValue = Field(default=0, alias="finalTotalKobo")
    items_breakdown: tuple[ItemBreakdown, ...] = Field(default=(), alias="itemsBreakdown")
    has_mixed_tiers: bool = Field(default=False, alias="hasMixedTiers")
    item_count: int = Field(default=0, alias="itemCount")

    @classmethod
    def zero(cls) -> CartTotals:
        return cls()

    @property
    def final_total_money(self) -> Money:
        return Money(self.final_total_minor)


class OrderTotals(BaseModel):
    """Quote for ``quantity`` tickets at one price, including gateway costs."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    ticket_price: MajorValue = Field(default=0.0, alias="ticketPrice")
    quantity: int = 0
    subtotal: MajorValue = 0.0
    service_fee: MajorValue = Field(default=0.0, alias="serviceFee")
    vat: MajorValue = 0.0
    total_fees: MajorValue = Field(default=0.0, alias="totalFees")
    final_total: MajorValue = Field(default=0.0, alias="finalTotal")
    gateway_fee: MajorValue = Field(default=0.0, alias="paystackFee")
    platform_margin: float = Field(default=0.0, alias="appProfit")
    tier: Optional[Tier] = None
    subtotal_minor: MinorValue = Field(default=0, alias="subtotalKobo")
    final_total_minor: MinorValue = Field(default=0, alias="finalTotalKobo")


def compute_line_item_fee(
    unit_price_major: float,
    schedule: Optional[FeeScheduleConfig] = None
) -> LineItemFee:
    """Service fee and VAT for one ticket.

    Args:
        unit_price_major: Ticket price in Naira; callers validate it is a
            non-negative number
        schedule: Fee schedule (defaults to DEFAULT_FEE_SCHEDULE)

    Returns:
        LineItemFee with tier, service_fee, vat and total_fee

    Example:
        >>> fee = compute_line_item_fee(2000)
        >>> fee.tier, fee.service_fee, fee.vat
        (<Tier.STANDARD: 'small'>, 200.0, 15.0)
    """
    runtime = runtime_for(schedule or DEFAULT_FEE_SCHEDULE)
    fees = line_item_fees(runtime, jnp.asarray(float(unit_price_major)))
    return LineItemFee(
        tier=Tier.from_code(int(fees.tier)),
        service_fee=float(fees.service_fee),
        vat=float(fees.vat),
        total_fee=float(fees.total_fee),
    )


def _coerce_item(item: Union[CartLineItem, Mapping[str, Any]]) -> CartLineItem:
    if isinstance(item, CartLineItem):
        return item
    return CartLineItem.model_validate(item)


def compute_cart_totals(
    cart_items: Any,
    schedule: Optional[FeeScheduleConfig] = None
) -> CartTotals:
    """Price breakdown for a cart.

    Args:
        cart_items: Sequence of CartLineItem or mappings with the same
            fields. Anything that is not a sequence (None, a dict, a string)
            is treated as an empty cart.
        schedule: Fee schedule (defaults to DEFAULT_FEE_SCHEDULE)

    Returns:
        CartTotals; ``items_breakdown`` follows the input order

    Raises:
        pydantic.ValidationError: If a mapping is not a valid line item
    """
    if (
        not isinstance(cart_items, Sequence)
        or isinstance(cart_items, (str, bytes))
        or len(cart_items) == 0
    ):
        logger.bind(input_type=type(cart_items).__name__).debug("Empty cart, returning zero totals")
        return CartTotals.zero()

    items = [_coerce_item(item) for item in cart_items]
    runtime = runtime_for(schedule or DEFAULT_FEE_SCHEDULE)

    unit_prices = [float(to_major_units(item.price)) for item in items]
    quantities = [item.quantity for item in items]

    fees, subtotals = cart_fee_totals(runtime, jnp.asarray(unit_prices), jnp.asarray(quantities))
    tier_codes = np.asarray(fees.tier).tolist()
    service_fees = np.asarray(fees.service_fee).tolist()
    vats = np.asarray(fees.vat).tolist()
    total_fees = np.asarray(fees.total_fee).tolist()
    line_subtotals = np.asarray(subtotals).tolist()

    subtotal = 0.0
    service_fee = 0.0
    vat = 0.0
    tiers: set[Tier] = set()
    breakdown = []

    for i, item in enumerate(items):
        tier = Tier.from_code(tier_codes[i])
        tiers.add(tier)

        subtotal += line_subtotals[i]
        service_fee += service_fees[i]
        vat += vats[i]

        breakdown.append(ItemBreakdown(
            cart_id=item.line_id,
            event_title=item.event_title,
            tier_name=item.tier_name,
            price_per_ticket=unit_prices[i],
            quantity=item.quantity,
            subtotal=line_subtotals[i],
            service_fee=service_fees[i],
            vat=vats[i],
            total_fees=total_fees[i],
            tier=tier,
        ))

    fees_total = service_fee + vat
    final_total = subtotal + fees_total

    totals = CartTotals(
        subtotal=subtotal,
        service_fee=service_fee,
        vat=vat,
        total_fees=fees_total,
        final_total=final_total,
        final_total_minor=to_minor_units(final_total),
        items_breakdown=tuple(breakdown),
        has_mixed_tiers=len(tiers) > 1,
        item_count=sum(quantities),
    )

    logger.bind(
        lines=len(items),
        tiers=sorted(t.value for t in tiers),
    ).debug("Cart totals computed: final_total={} kobo={}", final_total, totals.final_total_minor)

    return totals


def compute_order_totals(
    ticket_price_major: Any,
    quantity: Any = 1,
    schedule: Optional[FeeScheduleConfig] = None
) -> OrderTotals:
    """Quote ``quantity`` tickets at one price, including the gateway charge.

    Invalid, non-finite or non-positive price or quantity yields a zeroed
    quote with no tier. ``platform_margin`` is what remains of the fees
    after the gateway takes its charge, and may be negative for cheap
    tickets.
    """
    try:
        price = float(ticket_price_major)
        qty = float(quantity)
    except (TypeError, ValueError):
        return OrderTotals()

    if not (math.isfinite(price) and math.isfinite(qty)) or price <= 0 or qty <= 0:
        return OrderTotals()

    runtime = runtime_for(schedule or DEFAULT_FEE_SCHEDULE)
    qty = int(qty)
    per_unit = compute_line_item_fee(price, schedule)

    subtotal = price * qty
    service_fee = per_unit.service_fee * qty
    vat = per_unit.vat * qty
    fees_total = per_unit.total_fee * qty
    final_total = subtotal + fees_total
    charge = float(gateway_fee(runtime, jnp.asarray(final_total)))

    return OrderTotals(
        ticket_price=price,
        quantity=qty,
        subtotal=subtotal,
        service_fee=service_fee,
        vat=vat,
        total_fees=fees_total,
        final_total=final_total,
        gateway_fee=charge,
        platform_margin=fees_total - charge,
        tier=per_unit.tier,
        subtotal_minor=to_minor_units(subtotal),
        final_total_minor=to_minor_units(final_total),
    )
