"""Payment metadata payload for the payment-initiation API.

The key names in the payload are a contract with the backend and must not
change: ``customer_info``, ``order_breakdown`` and ``items`` with the
snake_case fields below, customer fields in camelCase.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Optional, Union
import warnings

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from .cart import CartLineItem, CartTotals

__all__ = ['CustomerInfo', 'format_order_metadata']


class CustomerInfo(BaseModel):
    """Buyer details collected by the checkout form."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None

    def to_wire(self) -> dict[str, Any]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "city": self.city,
            "state": self.state,
            "country": self.country,
        }


def _wire_fields(item: Union[CartLineItem, Mapping[str, Any]]) -> dict[str, Any]:
    if isinstance(item, CartLineItem):
        return item.wire_fields()
    return dict(item)


def _line_id(fields: Mapping[str, Any]) -> Any:
    return fields.get("cartId") or fields.get("cart_id") or fields.get("id")


def format_order_metadata(
    cart_totals: CartTotals,
    customer_info: Union[CustomerInfo, Mapping[str, Any]],
    cart_items: Sequence[Union[CartLineItem, Mapping[str, Any]]],
) -> dict[str, Any]:
    """Reshape cart totals and customer details into the payment payload.

    Each breakdown row is merged with the cart item that has the same cart
    id; the cart item's own fields are copied last and win on collisions.
    Rows from cart items that carry no id at all are matched by position.
    Rows without a matching cart item keep only their computed fields and
    a RuntimeWarning is issued.

    Args:
        cart_totals: Result of compute_cart_totals
        customer_info: CustomerInfo or mapping (wire or snake_case keys)
        cart_items: The cart the totals were computed from

    Returns:
        Dict with ``customer_info``, ``order_breakdown`` and ``items``
    """
    if not isinstance(customer_info, CustomerInfo):
        customer_info = CustomerInfo.model_validate(dict(customer_info or {}))

    originals = [_wire_fields(item) for item in cart_items or ()]
    by_id: dict[Any, dict[str, Any]] = {}
    for fields in originals:
        line_id = _line_id(fields)
        if line_id is not None:
            by_id.setdefault(line_id, fields)

    items = []
    unmatched = []
    for i, row in enumerate(cart_totals.items_breakdown):
        merged: dict[str, Any] = {
            "event_title": row.event_title,
            "tier_name": row.tier_name,
            "price_per_ticket": row.price_per_ticket,
            "quantity": row.quantity,
            "subtotal": row.subtotal,
            "service_fee": row.service_fee,
            "vat": row.vat,
            "tier": row.tier.value,
        }
        if row.cart_id is not None:
            original = by_id.get(row.cart_id)
        elif i < len(originals) and _line_id(originals[i]) is None:
            # Lines without any id can only be matched by position
            original = originals[i]
        else:
            original = None
        if original is None:
            unmatched.append(row.cart_id)
        else:
            merged.update(original)
        items.append(merged)

    if unmatched:
        logger.bind(unmatched=unmatched).warning("Breakdown rows without a matching cart item")
        warnings.warn(
            f"No cart item found for breakdown rows {unmatched!r}; "
            "their payload entries carry computed fields only",
            RuntimeWarning,
            stacklevel=2,
        )

    return {
        "customer_info": customer_info.to_wire(),
        "order_breakdown": {
            "subtotal": cart_totals.subtotal,
            "service_fee": cart_totals.service_fee,
            "vat_amount": cart_totals.vat,
            "total_fees": cart_totals.total_fees,
            "final_total": cart_totals.final_total,
            "item_count": cart_totals.item_count,
            "has_mixed_tiers": cart_totals.has_mixed_tiers,
        },
        "items": items,
    }
