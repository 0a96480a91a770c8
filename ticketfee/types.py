"""Static typing helpers for currency-unit-aware scalars.

NewType aliases make the minor/major distinction visible to type checkers
so that a kobo amount cannot be passed where Naira is expected without an
explicit conversion.
"""

from typing import NewType, Annotated
from typing_extensions import TypeAlias

# Integer amount in a currency's smallest unit (kobo, cent)
MinorAmount = NewType("MinorAmount", int)
# Amount in the display unit (Naira, dollar); may carry fractions
MajorAmount = NewType("MajorAmount", float)


def to_minor_amount(value: int) -> MinorAmount:
    """Convert an int to a MinorAmount.

    Raises:
        ValueError: If value is negative or not integral
    """
    if isinstance(value, bool) or int(value) != value:
        raise ValueError(f"Minor amount must be an integer, got {value!r}")
    if value < 0:
        raise ValueError(f"Minor amount must be non-negative, got {value}")
    return MinorAmount(int(value))


class Unit:
    """Metadata class for dimension annotations."""

    def __init__(self, dimension: str):
        self.dimension = dimension

    def __repr__(self) -> str:
        return f"Unit({self.dimension!r})"


MinorValue: TypeAlias = Annotated[int, Unit("price_minor")]
MajorValue: TypeAlias = Annotated[float, Unit("price")]
