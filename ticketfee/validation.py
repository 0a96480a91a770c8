"""Unit validation for fee schedules.

This module re-runs the fee formulas on pint quantities, before any JAX
computation, so that a schedule with a rate given as money (or a flat fee
given as a percentage) is caught when it is configured.
"""

from __future__ import annotations
from typing import Dict, Optional, Any
from dataclasses import dataclass, field
import pint

from .units import UnitManager
from .fee.runtime import FeeRuntime


def fee_schedule_units(
    runtime: FeeRuntime,
    price: pint.Quantity,
    manager: Optional[UnitManager] = None
) -> Dict[str, pint.Quantity]:
    """Pint-based mirror of the fee kernel for one unit price.

    Args:
        runtime: Fee runtime with QuantityNodes
        price: Ticket price as pint Quantity
        manager: UnitManager instance (uses singleton if None)

    Returns:
        Dict with tier-independent terms and both tiers' service fee and VAT

    Raises:
        pint.DimensionalityError: If units don't combine
    """
    if manager is None:
        manager = UnitManager.instance()

    threshold = runtime.tier_threshold.to_quantity(manager)
    standard_rate = runtime.standard_rate.to_quantity(manager)
    premium_rate = runtime.premium_rate.to_quantity(manager)
    premium_flat = runtime.premium_flat_fee.to_quantity(manager)
    vat_rate = runtime.vat_rate.to_quantity(manager)
    gateway_rate = runtime.gateway_rate.to_quantity(manager)
    gateway_flat = runtime.gateway_flat_fee.to_quantity(manager)

    # Comparison fails if price and threshold are different dimensions
    is_premium = price > threshold

    standard_fee = price * standard_rate
    # Adding the flat fee fails unless price * rate is money
    premium_fee = price * premium_rate + premium_flat

    return {
        'is_premium': is_premium,
        'standard_service_fee': standard_fee.to(price.units),
        'standard_vat': (standard_fee * vat_rate).to(price.units),
        'premium_service_fee': premium_fee.to(price.units),
        'premium_vat': (premium_fee * vat_rate).to(price.units),
        'gateway_fee': (price * gateway_rate + gateway_flat).to(price.units),
    }


def validate_fee_dimensions(
    runtime: FeeRuntime,
    manager: Optional[UnitManager] = None
) -> Dict[str, str]:
    """Check that a fee runtime is dimensionally self-consistent.

    Returns:
        Dict mapping term names to their dimensionality

    Raises:
        ValueError: If validation fails
    """
    if manager is None:
        manager = UnitManager.instance()

    probe = manager.registry.Quantity(
        float(runtime.tier_threshold.value) + 1.0,
        manager.get_canonical_unit("price"),
    )

    try:
        terms = fee_schedule_units(runtime, probe, manager)
    except pint.DimensionalityError as e:
        raise ValueError(f"Fee schedule dimension validation failed: {e}")

    dimensions = {'price': str(probe.dimensionality)}
    for name, value in terms.items():
        if isinstance(value, pint.Quantity):
            dimensions[name] = str(value.dimensionality)
    for name in ('standard_rate', 'premium_rate', 'vat_rate', 'gateway_rate'):
        node = getattr(runtime, name)
        dimensions[name] = str(node.to_quantity(manager).dimensionality)

    return dimensions


@dataclass
class ValidationReport:
    """Report from unit validation."""
    success: bool
    dimensions: Dict[str, str] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        lines = ["=== Unit Validation Report ==="]
        lines.append(f"Status: {'PASS' if self.success else 'FAIL'}")

        if self.dimensions:
            lines.append("\nDimensions:")
            for key, dim in self.dimensions.items():
                lines.append(f"  {key}: {dim}")

        if self.warnings:
            lines.append("\nWarnings:")
            for w in self.warnings:
                lines.append(f"  ⚠️  {w}")

        if self.errors:
            lines.append("\nErrors:")
            for e in self.errors:
                lines.append(f"  ❌ {e}")

        return "\n".join(lines)


def validate_config_units(config: Any, verbose: bool = False) -> ValidationReport:
    """Validate units in a fee schedule config.

    Besides dimensional checks, warns when a ticket just above the tier
    threshold would pay a larger service fee than one at the threshold.

    Args:
        config: FeeScheduleConfig
        verbose: If True, print the report

    Returns:
        ValidationReport with results
    """
    report = ValidationReport(success=True)

    try:
        runtime = config.to_runtime(check_units=False)
        report.dimensions = validate_fee_dimensions(runtime)

        threshold = runtime.tier_threshold.to_float()
        at_threshold = threshold * runtime.standard_rate.to_float()
        above_threshold = (
            threshold * runtime.premium_rate.to_float()
            + runtime.premium_flat_fee.to_float()
        )
        if above_threshold > at_threshold:
            report.warnings.append(
                f"Premium service fee just above the threshold ({above_threshold:.2f}) "
                f"exceeds the standard fee at the threshold ({at_threshold:.2f})"
            )
    except ValueError as e:
        report.success = False
        report.errors.append(str(e))

    if verbose:
        print(report)

    return report
