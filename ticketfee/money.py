"""Tagged money values and minor/major unit conversion.

Every price that leaves this package is either a ``Money`` (which knows its
currency and always stores minor units) or a number whose name says which
unit it is in. Nothing here guesses the unit from the magnitude.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

import pint

from .types import MajorAmount, MinorAmount, to_minor_amount
from .units import UnitManager, DEFAULT_CURRENCY


def to_major_units(amount_minor: Union[int, float], currency: str = DEFAULT_CURRENCY) -> MajorAmount:
    """Convert a minor-unit amount (kobo) to major units (Naira)."""
    factor = UnitManager.instance().minor_factor(currency)
    return MajorAmount(amount_minor / factor)


def to_minor_units(amount_major: Union[int, float], currency: str = DEFAULT_CURRENCY) -> MinorAmount:
    """Convert a major-unit amount to an integer minor-unit amount.

    Rounds half up, so 21612.505 NGN becomes 2161251 kobo. Going through
    ``Decimal(str(x))`` keeps float noise such as 2215.0000000000005 from
    turning into an off-by-one kobo.
    """
    factor = UnitManager.instance().minor_factor(currency)
    scaled = Decimal(str(amount_major)) * factor
    return MinorAmount(int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP)))


@dataclass(frozen=True)
class Money:
    """An amount of a specific currency, stored in minor units.

    Attributes:
        amount_minor: Integer amount in the currency's minor unit
        currency: ISO currency code known to the UnitManager
    """
    amount_minor: int
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        # Fails early for unknown currencies
        UnitManager.instance().minor_factor(self.currency)
        object.__setattr__(self, "amount_minor", to_minor_amount(self.amount_minor))

    @classmethod
    def from_major(cls, amount_major: Union[int, float], currency: str = DEFAULT_CURRENCY) -> Money:
        return cls(to_minor_units(amount_major, currency), currency)

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> Money:
        return cls(0, currency)

    @property
    def major(self) -> MajorAmount:
        return to_major_units(self.amount_minor, self.currency)

    def to_quantity(self, manager: UnitManager | None = None) -> pint.Quantity:
        """Return this amount as a pint Quantity in major units."""
        if manager is None:
            manager = UnitManager.instance()
        return manager.registry.Quantity(float(self.major), self.currency)

    def _check_currency(self, other: Money) -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Expected Money, got {type(other).__name__}")
        if other.currency != self.currency:
            raise ValueError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    def __add__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount_minor + other.amount_minor, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount_minor - other.amount_minor, self.currency)

    def __mul__(self, quantity: int) -> Money:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise TypeError("Money can only be multiplied by an integer quantity")
        return Money(self.amount_minor * quantity, self.currency)

    __rmul__ = __mul__

    def __lt__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount_minor < other.amount_minor

    def __le__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount_minor <= other.amount_minor

    def __bool__(self) -> bool:
        return self.amount_minor != 0

    def __str__(self) -> str:
        symbol = UnitManager.instance().currency_symbol(self.currency)
        return f"{symbol}{float(self.major):,.2f}"
