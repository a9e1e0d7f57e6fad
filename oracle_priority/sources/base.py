"""
Price source capability shared by both oracle slots.

The resolver only ever calls read(); it never inspects why a source
failed, so every reader must signal failure with a PriceSourceError.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from ..priority import OracleSlot


class PriceSource(ABC):
    """Base class for all price sources."""

    slot: OracleSlot

    @abstractmethod
    def read(self) -> Decimal:
        """
        Produce a normalized, non-negative price in natural units.

        Raises:
            PriceSourceError: If no usable reading is available
        """


class FixedPriceSource(PriceSource):
    """Price source that returns a fixed price. Used for manual overrides."""

    def __init__(self, slot: OracleSlot, price):
        self.slot = slot
        self.price = Decimal(price)

    def read(self) -> Decimal:
        return self.price

    def __repr__(self) -> str:
        return f"FixedPriceSource({self.slot.value}, {self.price})"
