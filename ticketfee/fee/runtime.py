"""Runtime structures for fee calculations with Penzai/JAX.

This module provides JAX-compatible runtime structures for the fee schedule
and the per-unit fee arrays produced by the kernel.
"""

from __future__ import annotations
import dataclasses
import jax
from penzai.core import struct

from ..runtime import QuantityNode


@struct.pytree_dataclass
class FeeRuntime(struct.Struct):
    """Runtime fee schedule for JAX computation.

    Amounts are canonical Naira, rates are fractions. The VAT switch is
    static metadata, so flipping it produces a different compiled kernel.
    """

    tier_threshold: QuantityNode
    standard_rate: QuantityNode
    premium_rate: QuantityNode
    premium_flat_fee: QuantityNode
    vat_rate: QuantityNode
    gateway_rate: QuantityNode
    gateway_flat_fee: QuantityNode
    vat_on_standard_tier: bool = dataclasses.field(
        default=True, metadata={'pytree_node': False}
    )


@struct.pytree_dataclass
class LineFees(struct.Struct):
    """Per-unit fees for a batch of unit prices.

    All arrays share the shape of the unit-price input. ``tier`` holds
    STANDARD_CODE or PREMIUM_CODE.
    """

    tier: jax.Array
    service_fee: jax.Array
    vat: jax.Array
    total_fee: jax.Array

