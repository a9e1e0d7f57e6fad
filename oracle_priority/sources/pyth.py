"""
Pyth pull-oracle reader.

A PriceUpdate is the verified price message posted for one feed. The
reader asks it for a price no older than MAXIMUM_AGE seconds for the
configured feed id, then converts the (price, expo) pair to a Decimal.
"""

import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from ..errors import (
    FeedIdMismatchError,
    FeedNotConfiguredError,
    MalformedFeedError,
    StalePriceError,
)
from ..fixed_point import from_mantissa_exponent
from ..priority import OracleSlot
from ..record import ZERO_IDENTIFIER, parse_identifier
from .base import PriceSource

logger = logging.getLogger(__name__)

MAXIMUM_AGE = 30  # seconds


@dataclass(frozen=True)
class PythPrice:
    """Raw Pyth price: value is price * 10^exponent."""
    price: int
    conf: int
    exponent: int
    publish_time: int


@dataclass(frozen=True)
class PriceUpdate:
    """Verified price message for a single feed."""
    feed_id: bytes
    price: int
    conf: int
    exponent: int
    publish_time: int

    def get_price_no_older_than(
        self,
        current_time: int,
        maximum_age: int,
        feed_id: bytes,
    ) -> PythPrice:
        """
        Return the price if it belongs to feed_id and is fresh enough.

        Raises:
            FeedIdMismatchError: Update is for another feed
            StalePriceError: publish_time + maximum_age < current_time
        """
        if feed_id != self.feed_id:
            raise FeedIdMismatchError(
                f"Price update is for feed {self.feed_id.hex()}, expected {feed_id.hex()}"
            )
        if self.publish_time + maximum_age < current_time:
            raise StalePriceError(
                f"Price published at {self.publish_time} is older than "
                f"{maximum_age}s (now={current_time})"
            )
        return PythPrice(
            price=self.price,
            conf=self.conf,
            exponent=self.exponent,
            publish_time=self.publish_time,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PriceUpdate":
        try:
            return cls(
                feed_id=parse_identifier(data["feed_id"]),
                price=int(data["price"]),
                conf=int(data.get("conf", 0)),
                exponent=int(data["exponent"]),
                publish_time=int(data["publish_time"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedFeedError(f"Invalid Pyth price update: {e}") from e


class PythPriceSource(PriceSource):
    """Reads the configured Pyth feed from a posted PriceUpdate."""

    slot = OracleSlot.PYTH

    def __init__(
        self,
        price_update: Optional[PriceUpdate],
        feed_id: bytes,
        maximum_age: int = MAXIMUM_AGE,
        clock: Callable[[], float] = time.time,
    ):
        self.price_update = price_update
        self.feed_id = feed_id
        self.maximum_age = maximum_age
        self.clock = clock

    def read(self) -> Decimal:
        if self.feed_id == ZERO_IDENTIFIER:
            raise FeedNotConfiguredError("Pyth feed id has not been set")
        if self.price_update is None:
            raise MalformedFeedError("No Pyth price update supplied")

        price = self.price_update.get_price_no_older_than(
            int(self.clock()), self.maximum_age, self.feed_id
        )
        logger.debug(f"Pyth price was: {price}")

        if price.price < 0:
            raise MalformedFeedError(f"Negative Pyth price {price.price}")

        value = from_mantissa_exponent(price.price, price.exponent)
        logger.debug(f"Pyth decimal was: {value}")
        return value
