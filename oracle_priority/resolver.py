"""
Priority Resolver for oracle-priority.

Selects the effective price for an asset from up to two oracle readings:
- Each enabled oracle with a reading is placed at the slot matching its rank
- Slots are scanned in rank order 0, 1, 2 and the first reading wins
- A failed read only removes that oracle's candidate

The selected price is written to the record together with the current
timestamp, or not at all.
"""

import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from . import metrics
from .errors import NoPriceAvailable, PriceSourceError
from .fixed_point import to_compact
from .priority import OracleSlot, Priority, RANK_SLOTS
from .record import AssetPriceRecord
from .sources.base import PriceSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reading:
    """One normalized price attributed to an oracle slot."""
    slot: OracleSlot
    price: Decimal


@dataclass
class ResolutionResult:
    """Outcome of a successful resolution."""
    asset_key: str
    price: Decimal
    compact_price: int
    source: OracleSlot
    rank: int
    timestamp: int
    candidates: Dict[OracleSlot, Decimal] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/output."""
        return {
            "asset_key": self.asset_key,
            "price": str(self.price),
            "compact_price": str(self.compact_price),
            "source": self.source.value,
            "rank": self.rank,
            "timestamp": self.timestamp,
            "candidates": {slot.value: str(p) for slot, p in self.candidates.items()},
        }


@dataclass
class ResolverMetrics:
    """In-process counters for resolver activity."""
    total_requests: int = 0
    pyth_hits: int = 0
    switchboard_hits: int = 0
    failures: int = 0
    source_read_failures: int = 0
    total_latency_ms: float = 0.0

    @property
    def avg_latency_ms(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.total_latency_ms / self.total_requests

    def record_hit(self, source: Optional[OracleSlot], latency_ms: float) -> None:
        """Record a resolve call; source None means no price was found."""
        self.total_requests += 1
        self.total_latency_ms += latency_ms

        if source is OracleSlot.PYTH:
            self.pyth_hits += 1
        elif source is OracleSlot.SWITCHBOARD:
            self.switchboard_hits += 1
        else:
            self.failures += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_requests": self.total_requests,
            "pyth_hits": self.pyth_hits,
            "switchboard_hits": self.switchboard_hits,
            "failures": self.failures,
            "source_read_failures": self.source_read_failures,
            "avg_latency_ms": round(self.avg_latency_ms, 3),
            "success_rate_pct": round(
                (self.total_requests - self.failures) / max(self.total_requests, 1) * 100, 2
            ),
        }


def select_reading(
    candidates: Iterable[Tuple[Priority, Optional[Reading]]],
) -> Optional[Tuple[int, Reading]]:
    """
    Pick the reading with the lowest enabled rank.

    Args:
        candidates: (priority, reading) pairs; reading None means the
            oracle produced nothing this round

    Returns:
        (rank, reading) of the winner, or None if no slot is populated
    """
    slots: List[Optional[Reading]] = [None] * RANK_SLOTS

    for priority, reading in candidates:
        if not priority.is_enabled or reading is None:
            continue
        logger.debug(f"Assigning {reading.slot.value} price to index {priority.rank}")
        slots[priority.rank] = reading

    for rank, reading in enumerate(slots):
        if reading is not None:
            return rank, reading
    return None


class PriorityResolver:
    """
    Resolves and stores the effective price of an AssetPriceRecord.

    The resolver keeps no per-record state between calls; the record is
    mutated in place only once a price has been selected and converted.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        """
        Args:
            clock: Wall-clock source returning unix seconds
        """
        self.clock = clock
        self.metrics = ResolverMetrics()

    def collect_readings(
        self,
        record: AssetPriceRecord,
        sources: Iterable[PriceSource],
    ) -> Dict[OracleSlot, Decimal]:
        """
        Read every enabled source, dropping the ones that fail.

        Disabled sources are not read at all.
        """
        readings: Dict[OracleSlot, Decimal] = {}

        for source in sources:
            if not record.priority_for(source.slot).is_enabled:
                continue
            try:
                readings[source.slot] = source.read()
            except PriceSourceError as e:
                logger.debug(f"{source.slot.value} read failed for {record.asset_key}: {e}")
                self.metrics.source_read_failures += 1
                metrics.record_source_failure(source.slot.value)

        return readings

    def resolve(
        self,
        record: AssetPriceRecord,
        pyth_price: Optional[Decimal] = None,
        switchboard_price: Optional[Decimal] = None,
    ) -> ResolutionResult:
        """
        Select a price from the supplied readings and store it.

        Raises:
            NoPriceAvailable: No enabled oracle supplied a reading
            FixedPointOverflowError: Selected price does not fit storage
        """
        start_time = time.perf_counter()

        candidates = [
            (record.pyth_priority,
             Reading(OracleSlot.PYTH, pyth_price) if pyth_price is not None else None),
            (record.switchboard_priority,
             Reading(OracleSlot.SWITCHBOARD, switchboard_price) if switchboard_price is not None else None),
        ]
        selected = select_reading(candidates)

        if selected is None:
            self._record(None, start_time)
            metrics.record_resolution_failure(record.asset_key, "no_price")
            logger.warning(f"Price resolution FAILED for {record.asset_key}: no oracle reading")
            raise NoPriceAvailable(record.asset_key)

        rank, reading = selected
        try:
            compact = to_compact(reading.price)
        except OverflowError:
            self._record(None, start_time)
            metrics.record_resolution_failure(record.asset_key, "overflow")
            raise
        timestamp = int(self.clock())

        # Price and timestamp change together
        record.recent_price, record.last_update = compact, timestamp

        result = ResolutionResult(
            asset_key=record.asset_key,
            price=reading.price,
            compact_price=compact,
            source=reading.slot,
            rank=rank,
            timestamp=timestamp,
            candidates={r.slot: r.price for _, r in candidates if r is not None},
        )
        latency_ms = self._record(reading.slot, start_time)
        metrics.record_resolution(
            record.asset_key, reading.slot.value, float(reading.price), timestamp,
            latency_seconds=latency_ms / 1000,
        )
        self._log_resolution(result)
        return result

    def resolve_from_sources(
        self,
        record: AssetPriceRecord,
        sources: Iterable[PriceSource],
    ) -> ResolutionResult:
        """Read the sources, then resolve with whatever they produced."""
        readings = self.collect_readings(record, sources)
        return self.resolve(
            record,
            pyth_price=readings.get(OracleSlot.PYTH),
            switchboard_price=readings.get(OracleSlot.SWITCHBOARD),
        )

    def _record(self, source: Optional[OracleSlot], start_time: float) -> float:
        latency_ms = (time.perf_counter() - start_time) * 1000
        self.metrics.record_hit(source, latency_ms)
        return latency_ms

    def _log_resolution(self, result: ResolutionResult) -> None:
        logger.info(
            f"Price resolved: {result.asset_key} = {result.price} "
            f"(source={result.source.value}, rank={result.rank}, ts={result.timestamp})"
        )

    def get_metrics(self) -> Dict[str, Any]:
        return self.metrics.to_dict()

    def reset_metrics(self) -> None:
        self.metrics = ResolverMetrics()
