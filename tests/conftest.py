"""
Shared pytest fixtures for oracle-priority tests.
"""

import json

import pytest

from oracle_priority.record import AssetPriceRecord
from oracle_priority.priority import Priority
from oracle_priority.service import OracleService
from oracle_priority.sources import PriceUpdate
from oracle_priority.store import RecordStore


# ============================================================================
# Identifiers
# ============================================================================

PYTH_FEED_ID = bytes.fromhex(
    "ef0d8b6fda2ceba41da15d4095d1da392a0d2f8ed0c6c7bc0f4cfac8c280b56d"
)
SWITCHBOARD_FEED = bytes.fromhex(
    "5a3c7d1e9f2b4c6d8e0f1a2b3c4d5e6f708192a3b4c5d6e7f8091a2b3c4d5e6f"
)

START_TIME = 1_700_000_000


class FakeClock:
    """Controllable wall clock returning unix seconds."""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def pyth_feed_id() -> bytes:
    return PYTH_FEED_ID


@pytest.fixture
def switchboard_feed() -> bytes:
    return SWITCHBOARD_FEED


# ============================================================================
# Records
# ============================================================================

@pytest.fixture
def configured_record() -> AssetPriceRecord:
    """Record with both oracles set: Pyth first, Switchboard fallback."""
    return AssetPriceRecord(
        asset_key="SOL_VAULT",
        asset_name="SOL vault",
        pyth_feed_id=PYTH_FEED_ID,
        switchboard_feed=SWITCHBOARD_FEED,
        pyth_priority=Priority.enabled(0),
        switchboard_priority=Priority.enabled(1),
    )


# ============================================================================
# Feed data
# ============================================================================

@pytest.fixture
def make_price_update(clock):
    """Factory for Pyth price updates published 'age' seconds ago."""
    def _make(price: int = 14_523_456_789, exponent: int = -8, age: int = 0,
              feed_id: bytes = PYTH_FEED_ID) -> PriceUpdate:
        return PriceUpdate(
            feed_id=feed_id,
            price=price,
            conf=1_000_000,
            exponent=exponent,
            publish_time=int(clock()) - age,
        )
    return _make


@pytest.fixture
def make_feed_account():
    """Factory for Switchboard feed account snapshots."""
    def _make(result="145.1", feed: bytes = SWITCHBOARD_FEED) -> bytes:
        payload = {"feed": feed.hex(), "result": str(result) if result is not None else None, "slot": 312_000_000}
        return json.dumps(payload).encode("utf-8")
    return _make


# ============================================================================
# Service
# ============================================================================

@pytest.fixture
def store(tmp_path) -> RecordStore:
    return RecordStore(str(tmp_path / "state" / "oracle_records.json"))


@pytest.fixture
def service(store, clock) -> OracleService:
    return OracleService(store, clock=clock)


@pytest.fixture
def configured_service(service) -> OracleService:
    """Service with SOL_VAULT initialized, both feeds set, Pyth at rank 0."""
    service.initialize("SOL_VAULT", "SOL vault")
    service.update_sources("SOL_VAULT", PYTH_FEED_ID, SWITCHBOARD_FEED)
    service.update_priorities("SOL_VAULT", 0, 1)
    return service
