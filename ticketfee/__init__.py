"""ticketfee: Unit-aware fee and total calculation for ticket checkout."""

import jax

# Kobo-exact totals need float64; float32 drops kobo above roughly ₦100k
jax.config.update("jax_enable_x64", True)

from .units import UnitManager, UnitSpec, QuantityInput, DEFAULT_CURRENCY
from .fields import quantity_field, rate_field, money_field
from .runtime import QuantityNode
from .money import Money, to_major_units, to_minor_units
from .fee import (
    FeeScheduleConfig,
    FeeScheduleOutput,
    FeeRuntime,
    LineFees,
    Tier,
    DEFAULT_FEE_SCHEDULE,
    TIER_THRESHOLD,
    STANDARD_RATE,
    PREMIUM_RATE,
    PREMIUM_FLAT_FEE,
    VAT_RATE,
    GATEWAY_RATE,
    GATEWAY_FLAT_FEE,
    line_item_fees,
    cart_fee_totals,
)
from .cart import (
    CartLineItem,
    LineItemFee,
    ItemBreakdown,
    CartTotals,
    OrderTotals,
    compute_line_item_fee,
    compute_cart_totals,
    compute_order_totals,
)
from .metadata import CustomerInfo, format_order_metadata
from .display import (
    format_price,
    format_price_detailed,
    format_major,
    format_money,
    get_price_range,
    fee_tier_label,
)
from .verification import (
    VerificationStatus,
    VerificationConfig,
    VerificationState,
    GatewayHTTPError,
    advance_verification,
    verify_payment,
)
from .adapters import CheckoutAdapter

__all__ = [
    # Units
    'UnitManager',
    'UnitSpec',
    'QuantityInput',
    'DEFAULT_CURRENCY',
    'quantity_field',
    'rate_field',
    'money_field',
    'QuantityNode',
    # Money
    'Money',
    'to_major_units',
    'to_minor_units',
    # Fee schedule (core tier)
    'FeeScheduleConfig',
    'FeeScheduleOutput',
    'FeeRuntime',
    'LineFees',
    'Tier',
    'DEFAULT_FEE_SCHEDULE',
    'TIER_THRESHOLD',
    'STANDARD_RATE',
    'PREMIUM_RATE',
    'PREMIUM_FLAT_FEE',
    'VAT_RATE',
    'GATEWAY_RATE',
    'GATEWAY_FLAT_FEE',
    'line_item_fees',
    'cart_fee_totals',
    # Cart
    'CartLineItem',
    'LineItemFee',
    'ItemBreakdown',
    'CartTotals',
    'OrderTotals',
    'compute_line_item_fee',
    'compute_cart_totals',
    'compute_order_totals',
    # Payment payload
    'CustomerInfo',
    'format_order_metadata',
    # Display
    'format_price',
    'format_price_detailed',
    'format_major',
    'format_money',
    'get_price_range',
    'fee_tier_label',
    # Verification
    'VerificationStatus',
    'VerificationConfig',
    'VerificationState',
    'GatewayHTTPError',
    'advance_verification',
    'verify_payment',
    # Adapters (high-level tier)
    'CheckoutAdapter',
]
