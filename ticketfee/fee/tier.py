"""Fee tiers and their wire values."""

from enum import Enum

from .kernel import STANDARD_CODE, PREMIUM_CODE


class Tier(str, Enum):
    """Fee-schedule bucket selected by unit price.

    Values are the strings the storefront and payment backend exchange.
    """

    STANDARD = "small"
    PREMIUM = "premium"

    @classmethod
    def from_code(cls, code: int) -> "Tier":
        if int(code) == PREMIUM_CODE:
            return cls.PREMIUM
        if int(code) == STANDARD_CODE:
            return cls.STANDARD
        raise ValueError(f"Unknown tier code: {code}")

    def __str__(self) -> str:
        return self.value
