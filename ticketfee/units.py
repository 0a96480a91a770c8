"""Unit management for ticketfee using pint and Penzai.

This module provides the foundation for unit-aware pricing with:
- UnitManager: Singleton registry management and unit conversions
- UnitSpec: Metadata for units that survives JAX transformations
- Currency helpers for minor/major unit factors (kobo per Naira, etc.)
"""

from __future__ import annotations

import re
import pint
from dataclasses import dataclass
from pathlib import Path
from typing import Union, Optional, ClassVar

# Type alias for inputs that can be converted to quantities
QuantityInput = Union[str, float, int, pint.Quantity]

DEFAULT_CURRENCY = "NGN"


@dataclass(frozen=True)
class UnitSpec:
    """Immutable metadata for units that can be attached to JAX arrays.

    Attributes:
        dimension: Dimension string (e.g., "price", "time", "dimensionless")
        symbol: Unit symbol string (e.g., "NGN", "kobo", "s")
        to_canonical: Factor to convert from this unit to canonical
    """
    dimension: str
    symbol: str
    to_canonical: float = 1.0

    def __hash__(self):
        return hash((self.dimension, self.symbol, self.to_canonical))


class UnitManager:
    """Manages unit registry and conversions for ticketfee.

    Provides:
    - Singleton pint.UnitRegistry access
    - Canonical unit definitions per dimension (Naira for prices)
    - Minor-unit definitions for each supported currency
    - Conversion utilities to/from canonical floats
    """

    _instance: ClassVar[Optional[UnitManager]] = None

    # currency -> (minor unit name, minor units per major unit)
    MINOR_UNITS: ClassVar[dict[str, tuple[str, int]]] = {
        "NGN": ("kobo", 100),
        "USD": ("cent", 100),
    }

    SYMBOLS: ClassVar[dict[str, str]] = {
        "NGN": "₦",
        "USD": "$",
    }

    def __init__(self, registry: Optional[pint.UnitRegistry] = None):
        """Initialize with optional custom registry.

        Args:
            registry: Custom pint registry. If None, creates default.
        """
        self.registry = registry or pint.UnitRegistry()

        # Currency units must exist before canonical_units references them
        self._setup_currencies()

        self.canonical_units = {
            "time": self.registry.second,
            "price": self.registry.NGN,
            "dimensionless": self.registry.dimensionless,
        }

    @classmethod
    def instance(cls) -> UnitManager:
        """Get or create the singleton instance.

        Returns:
            The global UnitManager instance
        """
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def _setup_currencies(self) -> None:
        """Define currencies, their minor units and percentage aliases.

        Each currency gets its own base dimension so that NGN and USD never
        convert into each other silently.
        """
        for currency, (minor, factor) in self.MINOR_UNITS.items():
            if not hasattr(self.registry, currency):
                self.registry.define(f"{currency} = [currency_{currency.lower()}]")
            if not hasattr(self.registry, minor):
                self.registry.define(f"{minor} = {currency} / {factor}")

        try:
            if not hasattr(self.registry, 'percent'):
                self.registry.define('percent = 0.01 = %')
            if not hasattr(self.registry, 'basis_point'):
                self.registry.define('basis_point = 0.0001 = bps = bp')
        except (pint.DefinitionSyntaxError, pint.RedefinitionError):
            # May already be defined
            pass

    def load_custom_units(self, paths: list[Path]) -> None:
        """Load extra unit definitions (e.g. another currency) from files.

        Args:
            paths: List of paths to pint definition files

        Raises:
            FileNotFoundError: If a specified path doesn't exist
        """
        for path in paths:
            if not path.exists():
                raise FileNotFoundError(f"Unit definition file not found: {path}")

            self.registry.load_definitions(str(path))

    def minor_factor(self, currency: str = DEFAULT_CURRENCY) -> int:
        """Number of minor units in one major unit of ``currency``.

        Raises:
            ValueError: If the currency is not known to the registry
        """
        if currency not in self.MINOR_UNITS:
            raise ValueError(f"Unsupported currency: {currency}")
        minor, _ = self.MINOR_UNITS[currency]
        one_major = self.registry.Quantity(1, currency)
        return int(round(one_major.to(minor).magnitude))

    def currency_symbol(self, currency: str = DEFAULT_CURRENCY) -> str:
        return self.SYMBOLS.get(currency, f"{currency} ")

    def ensure_quantity(
        self,
        value: QuantityInput,
        default_unit: Optional[str] = None
    ) -> pint.Quantity:
        """Convert input to a pint Quantity.

        Args:
            value: String, number, or Quantity to convert
            default_unit: Unit to use if value is a bare number

        Returns:
            pint.Quantity object

        Raises:
            ValueError: If string cannot be parsed as quantity
        """
        if isinstance(value, pint.Quantity):
            return value
        elif isinstance(value, str):
            # Storefront shorthand: "₦5,000", "5k NGN"
            value = value.strip().replace(",", "").replace("%", " percent")
            for code, symbol in self.SYMBOLS.items():
                if value.startswith(symbol):
                    value = f"{value[len(symbol):]} {code}"
            value = re.sub(r'(\d+(?:\.\d+)?)\s*[kK]\s*(NGN|USD)', r'\g<1>e3 \2', value)
            value = re.sub(r'(\d+(?:\.\d+)?)\s*M\s*(NGN|USD)', r'\g<1>e6 \2', value)

            try:
                q = self.registry(value)
            except Exception as e:
                raise ValueError(f"Cannot parse '{value}' as quantity: {e}")

            if not isinstance(q, pint.Quantity):
                return self.registry.Quantity(q, default_unit or 'dimensionless')
            # "5000" parses as a plain dimensionless number; "7.5 percent" does not
            if default_unit and q.units == self.registry.dimensionless:
                return self.registry.Quantity(q.magnitude, default_unit)
            return q
        else:
            if default_unit:
                return self.registry.Quantity(value, default_unit)
            return self.registry.Quantity(value, 'dimensionless')

    def to_canonical(
        self,
        quantity: pint.Quantity,
        dimension: str
    ) -> tuple[float, UnitSpec]:
        """Convert quantity to canonical units for dimension.

        Args:
            quantity: pint Quantity to convert
            dimension: Target dimension name

        Returns:
            Tuple of (canonical_value, unit_spec)

        Raises:
            ValueError: If quantity dimension doesn't match target
        """
        if dimension not in self.canonical_units:
            return (
                quantity.magnitude,
                UnitSpec(dimension=dimension, symbol=str(quantity.units), to_canonical=1.0)
            )

        canonical_unit = self.canonical_units[dimension]

        try:
            canonical_quantity = quantity.to(canonical_unit)
        except pint.DimensionalityError as e:
            raise ValueError(
                f"Cannot convert {quantity} to dimension '{dimension}': {e}"
            )

        # Factor from units, not magnitudes, so zero values still work
        one_original = self.registry.Quantity(1.0, quantity.units)
        conversion_factor = float(one_original.to(canonical_unit).magnitude)

        return (
            float(canonical_quantity.magnitude),
            UnitSpec(
                dimension=dimension,
                symbol=str(quantity.units),
                to_canonical=conversion_factor
            )
        )

    def from_canonical(self, value: float, spec: UnitSpec) -> pint.Quantity:
        """Reconstruct pint Quantity from canonical value and spec.

        Args:
            value: Canonical float value
            spec: UnitSpec with dimension and symbol info

        Returns:
            pint.Quantity in original units
        """
        original_value = value / spec.to_canonical if spec.to_canonical != 0 else value
        return self.registry.Quantity(original_value, spec.symbol)

    def get_canonical_unit(self, dimension: str) -> pint.Unit:
        if dimension not in self.canonical_units:
            return self.registry.dimensionless
        return self.canonical_units[dimension]
