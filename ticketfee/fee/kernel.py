"""Fee calculation kernels for JAX.

Pure functions over FeeRuntime; they work on scalars or whole carts of
unit prices at once and are safe to wrap in jax.jit.
"""

from typing import Tuple
import jax
import jax.numpy as jnp

from .runtime import FeeRuntime, LineFees

STANDARD_CODE = 0
PREMIUM_CODE = 1


def line_item_fees(runtime: FeeRuntime, unit_price: jax.Array) -> LineFees:
    """Per-unit service fee and VAT for one or more ticket prices.

    Args:
        runtime: Fee schedule
        unit_price: Unit price(s) in Naira

    Returns:
        LineFees with arrays shaped like ``unit_price``

    Prices at the threshold are standard tier. Free (and non-positive)
    prices carry no fee.
    """
    price = jnp.asarray(unit_price, dtype=jnp.float64)

    is_premium = price > runtime.tier_threshold.value
    standard_fee = price * runtime.standard_rate.value
    premium_fee = price * runtime.premium_rate.value + runtime.premium_flat_fee.value

    service_fee = jnp.where(is_premium, premium_fee, standard_fee)
    service_fee = jnp.where(price > 0, service_fee, 0.0)

    vat = service_fee * runtime.vat_rate.value
    if not runtime.vat_on_standard_tier:
        vat = jnp.where(is_premium, vat, 0.0)

    tier = jnp.where(is_premium, PREMIUM_CODE, STANDARD_CODE).astype(jnp.int32)

    return LineFees(
        tier=tier,
        service_fee=service_fee,
        vat=vat,
        total_fee=service_fee + vat,
    )


def cart_fee_totals(
    runtime: FeeRuntime,
    unit_prices: jax.Array,
    quantities: jax.Array
) -> Tuple[LineFees, jax.Array]:
    """Fees for a whole cart, scaled by quantity.

    Args:
        runtime: Fee schedule
        unit_prices: Unit price per line item in Naira, shape (n,)
        quantities: Quantity per line item, shape (n,)

    Returns:
        Tuple of (line_fees scaled by quantity, subtotals per line)
    """
    qty = jnp.asarray(quantities, dtype=jnp.float64)
    prices = jnp.asarray(unit_prices, dtype=jnp.float64)

    per_unit = line_item_fees(runtime, prices)
    scaled = LineFees(
        tier=per_unit.tier,
        service_fee=per_unit.service_fee * qty,
        vat=per_unit.vat * qty,
        total_fee=per_unit.total_fee * qty,
    )
    return scaled, prices * qty


def gateway_fee(runtime: FeeRuntime, amount: jax.Array) -> jax.Array:
    """Payment gateway charge on an amount, rounded to whole Naira.

    Non-positive amounts are not charged.
    """
    amount = jnp.asarray(amount, dtype=jnp.float64)
    fee = jnp.floor(amount * runtime.gateway_rate.value + runtime.gateway_flat_fee.value + 0.5)
    return jnp.where(amount > 0, fee, 0.0)
