"""Fee module for the two-tier checkout fee schedule."""

from .config import (
    FeeScheduleConfig,
    FeeScheduleOutput,
    DEFAULT_FEE_SCHEDULE,
    TIER_THRESHOLD,
    STANDARD_RATE,
    PREMIUM_RATE,
    PREMIUM_FLAT_FEE,
    VAT_RATE,
    GATEWAY_RATE,
    GATEWAY_FLAT_FEE,
)
from .runtime import FeeRuntime, LineFees
from .kernel import line_item_fees, cart_fee_totals, gateway_fee, STANDARD_CODE, PREMIUM_CODE
from .tier import Tier

__all__ = [
    'FeeScheduleConfig',
    'FeeScheduleOutput',
    'DEFAULT_FEE_SCHEDULE',
    'TIER_THRESHOLD',
    'STANDARD_RATE',
    'PREMIUM_RATE',
    'PREMIUM_FLAT_FEE',
    'VAT_RATE',
    'GATEWAY_RATE',
    'GATEWAY_FLAT_FEE',
    'FeeRuntime',
    'LineFees',
    'line_item_fees',
    'cart_fee_totals',
    'gateway_fee',
    'STANDARD_CODE',
    'PREMIUM_CODE',
    'Tier',
]
