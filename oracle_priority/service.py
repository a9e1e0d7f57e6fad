"""
Oracle record operations.

OracleService exposes the four record operations (initialize, update
priorities, update sources, get price) on top of a RecordStore. Each
operation either commits a fully consistent record or leaves the stored
record untouched. Who may call the mutating operations is decided by the
caller; the authority argument is only logged.
"""

import time
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional

from . import metrics
from .errors import InvalidPriorities, NoPriceAvailable
from .logging_utils import OracleLogger, get_oracle_logger
from .priority import OracleSlot, parse_priorities
from .record import AssetPriceRecord, parse_identifier
from .resolver import PriorityResolver, ResolutionResult
from .sources import (
    MAXIMUM_AGE,
    FixedPriceSource,
    PriceSource,
    PriceUpdate,
    PythPriceSource,
    SwitchboardPriceSource,
)
from .store import RecordStore


class OracleService:
    """Record lifecycle and price resolution for every asset in a store."""

    def __init__(
        self,
        store: RecordStore,
        resolver: Optional[PriorityResolver] = None,
        event_logger: Optional[OracleLogger] = None,
        max_price_age_seconds: int = MAXIMUM_AGE,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.clock = clock
        self.resolver = resolver or PriorityResolver(clock=clock)
        self.events = event_logger or get_oracle_logger()
        self.max_price_age_seconds = max_price_age_seconds

    def initialize(self, asset_key: str, asset_name: str = "") -> AssetPriceRecord:
        """Create the record for an asset with both oracles disabled."""
        record = self.store.create(AssetPriceRecord.new(asset_key, asset_name))
        self.events.log_initialized(asset_key, asset_name, record.address)
        return record

    def get_record(self, asset_key: str) -> AssetPriceRecord:
        return self.store.get(asset_key)

    def update_priorities(
        self,
        asset_key: str,
        pyth_priority: int,
        switchboard_priority: int,
        authority: Optional[str] = None,
    ) -> AssetPriceRecord:
        """
        Replace both oracle priorities.

        Raises:
            InvalidPriorities: Record is left unchanged
            RecordNotFoundError: Asset was never initialized
        """
        try:
            pyth, switchboard = parse_priorities(pyth_priority, switchboard_priority)
        except InvalidPriorities:
            metrics.record_priority_update(accepted=False)
            self.events.log_priorities_updated(
                asset_key, pyth_priority, switchboard_priority, accepted=False, authority=authority
            )
            raise

        with self.store.transaction(asset_key) as record:
            record.pyth_priority = pyth
            record.switchboard_priority = switchboard

        metrics.record_priority_update(accepted=True)
        self.events.log_priorities_updated(
            asset_key, pyth_priority, switchboard_priority, accepted=True, authority=authority
        )
        return record.copy()

    def update_sources(
        self,
        asset_key: str,
        pyth_feed_id: Any,
        switchboard_feed: Any,
        authority: Optional[str] = None,
    ) -> AssetPriceRecord:
        """
        Replace both oracle identifiers.

        Identifiers are 32 bytes, given raw or as hex. Malformed identifiers
        raise ValueError before anything is written.
        """
        pyth_id = parse_identifier(pyth_feed_id)
        switchboard_id = parse_identifier(switchboard_feed)

        with self.store.transaction(asset_key) as record:
            record.pyth_feed_id = pyth_id
            record.switchboard_feed = switchboard_id

        self.events.log_sources_updated(
            asset_key, pyth_id.hex(), switchboard_id.hex(), authority=authority
        )
        return record.copy()

    def get_price(
        self,
        asset_key: str,
        sources: Iterable[PriceSource] = (),
    ) -> ResolutionResult:
        """
        Read the given sources, select a price by priority and store it.

        Raises:
            NoPriceAvailable: No enabled oracle produced a reading
            FixedPointOverflowError: Selected price does not fit storage
        """
        sources = list(sources)
        return self._resolve(asset_key, lambda record: sources)

    def get_price_from_feeds(
        self,
        asset_key: str,
        price_update: Optional[PriceUpdate] = None,
        feed_account: Optional[bytes] = None,
        manual_prices: Optional[Dict[OracleSlot, Decimal]] = None,
    ) -> ResolutionResult:
        """
        Resolve using a posted Pyth update and a Switchboard feed account.

        The feed identifiers are taken from the record as it stands inside
        the transaction. A slot listed in manual_prices is read from that
        price instead of its feed.
        """
        manual_prices = manual_prices or {}

        def make_sources(record: AssetPriceRecord) -> List[PriceSource]:
            return [
                FixedPriceSource(source.slot, manual_prices[source.slot])
                if manual_prices.get(source.slot) is not None else source
                for source in self.build_sources(record, price_update, feed_account)
            ]

        return self._resolve(asset_key, make_sources)

    def build_sources(
        self,
        record: AssetPriceRecord,
        price_update: Optional[PriceUpdate] = None,
        feed_account: Optional[bytes] = None,
    ) -> List[PriceSource]:
        """Feed readers bound to the record's configured identifiers."""
        return [
            PythPriceSource(
                price_update,
                record.pyth_feed_id,
                maximum_age=self.max_price_age_seconds,
                clock=self.clock,
            ),
            SwitchboardPriceSource(feed_account, record.switchboard_feed),
        ]

    def _resolve(
        self,
        asset_key: str,
        make_sources: Callable[[AssetPriceRecord], List[PriceSource]],
    ) -> ResolutionResult:
        try:
            with self.store.transaction(asset_key) as record:
                result = self.resolver.resolve_from_sources(record, make_sources(record))
        except NoPriceAvailable:
            self.events.log_price_unavailable(asset_key, "no oracle reading")
            raise
        except OverflowError:
            self.events.log_price_unavailable(asset_key, "price overflow")
            raise

        self.events.log_price_resolved(result.to_dict())
        return result

    def current_price(self, asset_key: str) -> Optional[Decimal]:
        """Last stored price, or None if the asset was never resolved."""
        record = self.store.get(asset_key)
        return record.price if record.has_price else None
