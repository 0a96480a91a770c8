"""Pydantic field validators for unit-aware configurations.

Provides field validators that parse user-friendly unit inputs
("7.5%", "50 NGN", "₦5,000", "3 s") and convert them to canonical
floats with metadata.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from pydantic import field_validator

from .units import UnitManager, UnitSpec


def quantity_field(
    dimension: str,
    default_unit: Optional[str] = None,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
) -> Callable:
    """Create a Pydantic field validator for quantity inputs.

    This validator accepts strings, numbers, or pint Quantities and
    converts them to canonical floats with metadata.

    Args:
        dimension: Expected dimension (e.g., "price", "time", "dimensionless")
        default_unit: Unit to apply to bare numbers
        min_value: Optional minimum value in canonical units
        max_value: Optional maximum value in canonical units

    Returns:
        Field validator function for Pydantic models

    Example:
        class MyConfig(BaseModel):
            flat_fee: Tuple[float, UnitSpec]

            _validate_flat_fee = field_validator("flat_fee", mode="before")(
                quantity_field("price", "NGN", min_value=0.0)
            )
    """
    def validator(value: Any, info: Optional[Any] = None) -> tuple[float, UnitSpec]:
        """Validate and convert quantity input.

        Raises:
            ValueError: If validation fails
        """
        # Already-validated tuples pass through (model_copy / re-validation)
        if isinstance(value, tuple) and len(value) == 2 and isinstance(value[1], UnitSpec):
            return value

        manager = UnitManager.instance()

        try:
            quantity = manager.ensure_quantity(value, default_unit)
        except Exception as e:
            raise ValueError(f"Cannot parse quantity: {e}")

        try:
            canonical_value, spec = manager.to_canonical(quantity, dimension)
        except ValueError as e:
            raise ValueError(f"Dimension mismatch: {e}")

        if min_value is not None and canonical_value < min_value:
            raise ValueError(
                f"Value {canonical_value} below minimum {min_value} "
                f"(in canonical {dimension} units)"
            )
        if max_value is not None and canonical_value > max_value:
            raise ValueError(
                f"Value {canonical_value} above maximum {max_value} "
                f"(in canonical {dimension} units)"
            )

        return canonical_value, spec

    return validator


def rate_field(max_value: float = 1.0) -> Callable:
    """Validator for fractional rates ("10%", "750 bps", 0.1)."""
    return quantity_field("dimensionless", "dimensionless", min_value=0.0, max_value=max_value)


def money_field(currency: str = "NGN") -> Callable:
    """Validator for non-negative money amounts; bare numbers are major units."""
    return quantity_field("price", currency, min_value=0.0)


def create_quantity_validator(
    field_name: str,
    dimension: str,
    default_unit: Optional[str] = None,
    **kwargs
) -> classmethod:
    """Create a field validator method for a Pydantic model.

    Example:
        class RetryConfig(BaseModel):
            delay: Tuple[float, UnitSpec]

            _validate_delay = create_quantity_validator("delay", "time", "second")
    """
    validator_func = quantity_field(dimension, default_unit, **kwargs)

    @field_validator(field_name, mode='before')
    @classmethod
    def field_validator_method(cls, v, info):
        return validator_func(v, info)

    return field_validator_method
