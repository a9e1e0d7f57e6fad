"""
Switchboard on-demand feed reader.

The feed account is handed over as an opaque blob. PullFeed.parse turns
the exported JSON snapshot of the account into a PullFeed whose value()
is the current aggregated result. No staleness check is made here.
"""

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from ..errors import FeedIdMismatchError, FeedNotConfiguredError, MalformedFeedError
from ..priority import OracleSlot
from ..record import ZERO_IDENTIFIER, parse_identifier
from .base import PriceSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PullFeed:
    """Parsed Switchboard pull feed account."""
    feed: Optional[bytes]
    result: Optional[Decimal]
    slot: int = 0

    @classmethod
    def parse(cls, data: bytes) -> "PullFeed":
        """
        Parse a feed account snapshot.

        Expected shape: {"feed": "<hex>", "result": "123.45", "slot": 1}

        Raises:
            MalformedFeedError: If the blob is not a valid snapshot
        """
        try:
            payload = json.loads(data, parse_float=Decimal)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedFeedError(f"Switchboard feed is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise MalformedFeedError("Switchboard feed must be a JSON object")

        try:
            feed = payload.get("feed")
            raw_result = payload.get("result")
            return cls(
                feed=parse_identifier(feed) if feed is not None else None,
                result=Decimal(str(raw_result)) if raw_result is not None else None,
                slot=int(payload.get("slot", 0)),
            )
        except (TypeError, ValueError, InvalidOperation) as e:
            raise MalformedFeedError(f"Invalid Switchboard feed: {e}") from e

    def value(self) -> Decimal:
        if self.result is None:
            raise MalformedFeedError("Switchboard feed has no result")
        if not self.result.is_finite() or self.result < 0:
            raise MalformedFeedError(f"Unusable Switchboard result {self.result}")
        return self.result


class SwitchboardPriceSource(PriceSource):
    """Reads the configured Switchboard feed account."""

    slot = OracleSlot.SWITCHBOARD

    def __init__(self, feed_data: Optional[bytes], feed_address: bytes):
        self.feed_data = feed_data
        self.feed_address = feed_address

    def read(self) -> Decimal:
        if self.feed_address == ZERO_IDENTIFIER:
            raise FeedNotConfiguredError("Switchboard feed address has not been set")
        if self.feed_data is None:
            raise MalformedFeedError("No Switchboard feed account supplied")

        logger.debug("Switchboard unpack start")
        feed = PullFeed.parse(self.feed_data)

        if feed.feed is not None and feed.feed != self.feed_address:
            raise FeedIdMismatchError(
                f"Feed account {feed.feed.hex()} does not match "
                f"configured {self.feed_address.hex()}"
            )

        return feed.value()
