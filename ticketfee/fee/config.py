"""Fee schedule configuration with unit-aware Pydantic models.

This module holds the two-tier service-fee schedule used at checkout:
a flat percentage for tickets at or below the tier threshold, a smaller
percentage plus a flat amount above it, and VAT charged on the service fee.
The payment gateway's own charge is configured here as well so that quotes
and margins come from the same source.
"""

from __future__ import annotations
from typing import Tuple, Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator
import pint

from ..units import UnitManager, UnitSpec
from ..fields import rate_field, money_field
from ..runtime import QuantityNode
from .runtime import FeeRuntime


class FeeScheduleConfig(BaseModel):
    """Configuration for the checkout fee schedule.

    All amounts accept unit-aware inputs:
    - Rates: "10%", "750 bps", 0.1
    - Amounts: "50 NGN", "₦5,000", "5k NGN", 5000 (bare numbers are Naira)

    Example:
        >>> schedule = FeeScheduleConfig(
        ...     tier_threshold="₦5,000",
        ...     standard_rate="10%",
        ...     premium_rate="7%",
        ...     premium_flat_fee="50 NGN",
        ...     vat_rate="7.5%",
        ... )
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        validate_default=True,
    )

    tier_threshold: Tuple[float, UnitSpec] = Field(
        default="5000 NGN",
        description="Highest unit price (inclusive) charged at the standard rate"
    )

    standard_rate: Tuple[float, UnitSpec] = Field(
        default="10%",
        description="Service fee fraction for tickets at or below the threshold"
    )

    premium_rate: Tuple[float, UnitSpec] = Field(
        default="7%",
        description="Service fee fraction for tickets above the threshold"
    )

    premium_flat_fee: Tuple[float, UnitSpec] = Field(
        default="50 NGN",
        description="Flat amount added to each premium ticket's service fee"
    )

    vat_rate: Tuple[float, UnitSpec] = Field(
        default="7.5%",
        description="VAT fraction applied to the service fee"
    )

    vat_on_standard_tier: bool = Field(
        default=True,
        description="Charge VAT on top of standard-tier fees; False means the rate already includes it"
    )

    gateway_rate: Tuple[float, UnitSpec] = Field(
        default="1.5%",
        description="Payment gateway charge as a fraction of the amount paid"
    )

    gateway_flat_fee: Tuple[float, UnitSpec] = Field(
        default="100 NGN",
        description="Flat payment gateway charge per transaction"
    )

    _validate_threshold = field_validator("tier_threshold", mode="before")(money_field())
    _validate_premium_flat = field_validator("premium_flat_fee", mode="before")(money_field())
    _validate_gateway_flat = field_validator("gateway_flat_fee", mode="before")(money_field())

    _validate_standard_rate = field_validator("standard_rate", mode="before")(rate_field())
    _validate_premium_rate = field_validator("premium_rate", mode="before")(rate_field())
    _validate_vat_rate = field_validator("vat_rate", mode="before")(rate_field())
    _validate_gateway_rate = field_validator("gateway_rate", mode="before")(rate_field())

    def to_runtime(self, check_units: bool = False) -> FeeRuntime:
        """Convert to runtime structure for JAX.

        Args:
            check_units: If True, dry-run the fee formulas with pint first

        Returns:
            FeeRuntime structure with QuantityNodes

        Raises:
            ValueError: If check_units=True and validation fails
        """
        def to_node(value_spec: Tuple[float, UnitSpec]) -> QuantityNode:
            return QuantityNode.from_float(value_spec[0], value_spec[1])

        runtime = FeeRuntime(
            tier_threshold=to_node(self.tier_threshold),
            standard_rate=to_node(self.standard_rate),
            premium_rate=to_node(self.premium_rate),
            premium_flat_fee=to_node(self.premium_flat_fee),
            vat_rate=to_node(self.vat_rate),
            gateway_rate=to_node(self.gateway_rate),
            gateway_flat_fee=to_node(self.gateway_flat_fee),
            vat_on_standard_tier=self.vat_on_standard_tier,
        )

        if check_units:
            from ..validation import validate_fee_dimensions
            validate_fee_dimensions(runtime)

        return runtime

    @staticmethod
    def from_runtime(runtime: FeeRuntime, manager: Optional[UnitManager] = None) -> FeeScheduleOutput:
        """Create output config from runtime structure.

        Args:
            runtime: FeeRuntime to convert
            manager: Optional UnitManager instance

        Returns:
            FeeScheduleOutput with pint quantities in their original units
        """
        if manager is None:
            manager = UnitManager.instance()

        def to_quantity(node: QuantityNode) -> pint.Quantity:
            return manager.from_canonical(float(node.value), node.units)

        return FeeScheduleOutput(
            tier_threshold=to_quantity(runtime.tier_threshold),
            standard_rate=to_quantity(runtime.standard_rate),
            premium_rate=to_quantity(runtime.premium_rate),
            premium_flat_fee=to_quantity(runtime.premium_flat_fee),
            vat_rate=to_quantity(runtime.vat_rate),
            gateway_rate=to_quantity(runtime.gateway_rate),
            gateway_flat_fee=to_quantity(runtime.gateway_flat_fee),
            vat_on_standard_tier=runtime.vat_on_standard_tier,
        )

    def summary(self, format: str = "markdown") -> str:
        """Generate summary of the fee schedule.

        Args:
            format: Output format ('markdown', 'text', or 'dict')

        Returns:
            Formatted summary string
        """
        if format == "dict":
            return str(self.model_dump())

        def render(value: Tuple[float, UnitSpec]) -> str:
            if value[1].dimension == "dimensionless":
                return f"{value[0] * 100:g}%"
            return f"₦{value[0]:,.2f}"

        rows = [
            ("Tier threshold", render(self.tier_threshold)),
            ("Standard rate", render(self.standard_rate)),
            ("Premium rate", render(self.premium_rate)),
            ("Premium flat fee", render(self.premium_flat_fee)),
            ("VAT rate", render(self.vat_rate)),
            ("VAT on standard tier", "yes" if self.vat_on_standard_tier else "included"),
            ("Gateway rate", render(self.gateway_rate)),
            ("Gateway flat fee", render(self.gateway_flat_fee)),
        ]

        if format == "markdown":
            lines = ["# Fee Schedule\n", "| Parameter | Value |", "|-----------|-------|"]
            lines.extend(f"| {name} | {value} |" for name, value in rows)
        else:  # text format
            lines = ["Fee Schedule", "-" * 40]
            lines.extend(f"  {name}: {value}" for name, value in rows)

        return "\n".join(lines)


class FeeScheduleOutput(BaseModel):
    """Output format for the fee schedule with pint quantities.

    Used when converting from runtime back to user-friendly format.
    """

    tier_threshold: pint.Quantity
    standard_rate: pint.Quantity
    premium_rate: pint.Quantity
    premium_flat_fee: pint.Quantity
    vat_rate: pint.Quantity
    gateway_rate: pint.Quantity
    gateway_flat_fee: pint.Quantity
    vat_on_standard_tier: bool = True

    model_config = ConfigDict(arbitrary_types_allowed=True)


DEFAULT_FEE_SCHEDULE = FeeScheduleConfig()

# Shared with display-only fee previews so quoted and charged fees agree
TIER_THRESHOLD = DEFAULT_FEE_SCHEDULE.tier_threshold[0]
STANDARD_RATE = DEFAULT_FEE_SCHEDULE.standard_rate[0]
PREMIUM_RATE = DEFAULT_FEE_SCHEDULE.premium_rate[0]
PREMIUM_FLAT_FEE = DEFAULT_FEE_SCHEDULE.premium_flat_fee[0]
VAT_RATE = DEFAULT_FEE_SCHEDULE.vat_rate[0]
GATEWAY_RATE = DEFAULT_FEE_SCHEDULE.gateway_rate[0]
GATEWAY_FLAT_FEE = DEFAULT_FEE_SCHEDULE.gateway_flat_fee[0]
