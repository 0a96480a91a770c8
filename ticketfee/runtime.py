"""Runtime structures using Penzai for JAX-compatible unit-aware computations.

This module provides Penzai structs that keep unit metadata attached to
values while staying compatible with JAX transformations like jit and vmap.
"""

from __future__ import annotations

from typing import Optional
import dataclasses
import jax
import jax.numpy as jnp
import pint
from penzai.core import struct

from .units import UnitManager, UnitSpec


# UnitSpec is hashable and immutable, so JAX can treat it as static metadata
jax.tree_util.register_static(UnitSpec)


@struct.pytree_dataclass
class QuantityNode(struct.Struct):
    """A Penzai struct that holds a value with unit metadata.

    The value field participates in JAX transformations, while the units
    field is static metadata.

    Attributes:
        value: JAX array containing the numerical value in canonical units
        units: UnitSpec metadata describing the units
    """
    value: jax.Array
    units: UnitSpec = dataclasses.field(metadata={'pytree_node': False})

    @classmethod
    def from_float(
        cls,
        value: float,
        units: UnitSpec,
        dtype: jnp.dtype = jnp.float64
    ) -> QuantityNode:
        """Create a QuantityNode from a float value.

        Args:
            value: Numerical value in canonical units
            units: Unit specification
            dtype: JAX array dtype (default float64)

        Returns:
            QuantityNode instance
        """
        return cls(value=jnp.array(value, dtype=dtype), units=units)

    def to_float(self) -> float:
        return float(self.value)

    def to_quantity(self, manager: Optional[UnitManager] = None) -> pint.Quantity:
        """Rebuild a pint Quantity in canonical units."""
        if manager is None:
            manager = UnitManager.instance()
        canonical = manager.get_canonical_unit(self.units.dimension)
        return manager.registry.Quantity(float(self.value), canonical)

    def __repr__(self) -> str:
        return f"QuantityNode({self.value}, {self.units.symbol})"
