"""High-level adapter for checkout pricing.

The adapter wraps a fee schedule's JAX runtime with a stateful,
user-friendly API. It remembers the last cart it priced so that a page
re-rendering with an unchanged cart gets the previous CartTotals back
instead of a recomputation.
"""

from __future__ import annotations
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from .cart import (
    CartLineItem,
    CartTotals,
    LineItemFee,
    OrderTotals,
    compute_cart_totals,
    compute_line_item_fee,
    compute_order_totals,
)
from .display import fee_tier_label
from .fee.config import FeeScheduleConfig, DEFAULT_FEE_SCHEDULE
from .metadata import CustomerInfo, format_order_metadata


__all__ = ['CheckoutAdapter']

CartKey = Tuple[Tuple[Any, ...], ...]


def _cart_key(cart_items: Any) -> Optional[CartKey]:
    """Value fingerprint of a cart, or None if it cannot be fingerprinted."""
    if not isinstance(cart_items, Sequence) or isinstance(cart_items, (str, bytes)):
        return None
    key = []
    for item in cart_items:
        if isinstance(item, CartLineItem):
            fields = item.wire_fields()
        elif isinstance(item, Mapping):
            fields = dict(item)
        else:
            return None
        try:
            key.append(tuple(sorted((k, v) for k, v in fields.items())))
            hash(key[-1])
        except TypeError:
            return None
    return tuple(key)


class CheckoutAdapter:
    """High-level adapter for cart pricing with a stateful API.

    Example:
        >>> adapter = CheckoutAdapter()
        >>> cart = [{"cartId": "a", "price": 200000}]
        >>> totals = adapter.cart_totals(cart)
        >>> totals.final_total
        2215.0
        >>> payload = adapter.order_metadata(totals, {"email": "a@b.ng"}, cart)

        # JAX power users can access the runtime directly:
        >>> fees = line_item_fees(adapter.runtime, jnp.array([2000.0, 10000.0]))

    Args:
        config: FeeScheduleConfig (defaults to DEFAULT_FEE_SCHEDULE)
        check_units: Dry-run the fee formulas with pint (default: True)

    Attributes:
        config: The FeeScheduleConfig used to build the runtime
        runtime: JAX-ready FeeRuntime structure
        last_totals: CartTotals from the most recent cart_totals call
    """

    def __init__(
        self,
        config: Optional[FeeScheduleConfig] = None,
        *,
        check_units: bool = True
    ):
        """Initialize checkout adapter.

        Raises:
            ValueError: If unit validation fails
        """
        self.config = config or DEFAULT_FEE_SCHEDULE
        self.runtime = self.config.to_runtime(check_units=check_units)
        self._last_key: Optional[CartKey] = None
        self.last_totals: Optional[CartTotals] = None
        self.computations = 0

    def line_fee(self, unit_price_major: float) -> LineItemFee:
        return compute_line_item_fee(unit_price_major, self.config)

    def cart_totals(self, cart_items: Any) -> CartTotals:
        """Price a cart, reusing the previous result for an identical cart.

        Args:
            cart_items: Sequence of CartLineItem or mappings

        Returns:
            CartTotals
        """
        key = _cart_key(cart_items)
        if key is not None and key == self._last_key and self.last_totals is not None:
            return self.last_totals

        totals = compute_cart_totals(cart_items, self.config)
        self.computations += 1
        self._last_key = key
        self.last_totals = totals
        return totals

    def order_totals(self, ticket_price_major: Any, quantity: Any = 1) -> OrderTotals:
        return compute_order_totals(ticket_price_major, quantity, self.config)

    def order_metadata(
        self,
        cart_totals: CartTotals,
        customer_info: Union[CustomerInfo, Mapping[str, Any]],
        cart_items: Sequence[Union[CartLineItem, Mapping[str, Any]]],
    ) -> dict:
        return format_order_metadata(cart_totals, customer_info, cart_items)

    def fee_tier_label(self, price_major: Any) -> str:
        return fee_tier_label(price_major, self.config)

    def reset(self):
        """Forget the memoised cart."""
        self._last_key = None
        self.last_totals = None

    def get_state(self) -> dict:
        """Current memo state as plain Python values."""
        return {
            'has_cached_cart': self.last_totals is not None,
            'computations': self.computations,
            'final_total': self.last_totals.final_total if self.last_totals else None,
        }
