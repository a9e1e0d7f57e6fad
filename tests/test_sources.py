"""
Tests for the Pyth and Switchboard price readers.
"""

from decimal import Decimal

import pytest

from oracle_priority.errors import (
    FeedIdMismatchError,
    FeedNotConfiguredError,
    MalformedFeedError,
    PriceSourceError,
    StalePriceError,
)
from oracle_priority.priority import OracleSlot
from oracle_priority.record import ZERO_IDENTIFIER
from oracle_priority.sources import (
    MAXIMUM_AGE,
    FixedPriceSource,
    PriceUpdate,
    PullFeed,
    PythPriceSource,
    SwitchboardPriceSource,
)


# =============================================================================
# Pyth
# =============================================================================

class TestPythPriceSource:
    """Tests for reading a posted Pyth price update."""

    def test_reads_decimal_price(self, make_price_update, pyth_feed_id, clock):
        source = PythPriceSource(make_price_update(), pyth_feed_id, clock=clock)
        assert source.read() == Decimal("145.23456789")
        assert source.slot is OracleSlot.PYTH

    def test_default_maximum_age(self):
        assert MAXIMUM_AGE == 30

    def test_accepts_price_exactly_at_maximum_age(self, make_price_update, pyth_feed_id, clock):
        source = PythPriceSource(make_price_update(age=MAXIMUM_AGE), pyth_feed_id, clock=clock)
        assert source.read() == Decimal("145.23456789")

    def test_stale_price_rejected(self, make_price_update, pyth_feed_id, clock):
        source = PythPriceSource(make_price_update(age=MAXIMUM_AGE + 1), pyth_feed_id, clock=clock)
        with pytest.raises(StalePriceError):
            source.read()

    def test_custom_maximum_age(self, make_price_update, pyth_feed_id, clock):
        source = PythPriceSource(
            make_price_update(age=45), pyth_feed_id, maximum_age=60, clock=clock
        )
        assert source.read() == Decimal("145.23456789")

    def test_feed_mismatch_rejected(self, make_price_update, pyth_feed_id, clock):
        other_feed = bytes([1] * 32)
        source = PythPriceSource(make_price_update(feed_id=other_feed), pyth_feed_id, clock=clock)
        with pytest.raises(FeedIdMismatchError):
            source.read()

    def test_unset_feed_id_fails(self, make_price_update, clock):
        source = PythPriceSource(make_price_update(), ZERO_IDENTIFIER, clock=clock)
        with pytest.raises(FeedNotConfiguredError):
            source.read()

    def test_missing_update_fails(self, pyth_feed_id, clock):
        source = PythPriceSource(None, pyth_feed_id, clock=clock)
        with pytest.raises(PriceSourceError):
            source.read()

    def test_negative_price_rejected(self, make_price_update, pyth_feed_id, clock):
        source = PythPriceSource(make_price_update(price=-5), pyth_feed_id, clock=clock)
        with pytest.raises(MalformedFeedError):
            source.read()


class TestPriceUpdate:
    """Tests for PriceUpdate parsing."""

    def test_from_dict(self, pyth_feed_id):
        update = PriceUpdate.from_dict({
            "feed_id": "0x" + pyth_feed_id.hex(),
            "price": "6512345",
            "conf": 120,
            "exponent": -5,
            "publish_time": 1_700_000_000,
        })
        assert update.feed_id == pyth_feed_id
        assert update.price == 6_512_345
        assert update.exponent == -5

    def test_from_dict_missing_field(self, pyth_feed_id):
        with pytest.raises(MalformedFeedError):
            PriceUpdate.from_dict({"feed_id": pyth_feed_id.hex(), "price": 1})

    def test_from_dict_bad_feed_id(self):
        with pytest.raises(MalformedFeedError):
            PriceUpdate.from_dict({
                "feed_id": "abcd", "price": 1, "exponent": 0, "publish_time": 0,
            })


# =============================================================================
# Switchboard
# =============================================================================

class TestSwitchboardPriceSource:
    """Tests for reading a Switchboard feed account."""

    def test_reads_result(self, make_feed_account, switchboard_feed):
        source = SwitchboardPriceSource(make_feed_account("145.1"), switchboard_feed)
        assert source.read() == Decimal("145.1")
        assert source.slot is OracleSlot.SWITCHBOARD

    def test_no_staleness_check(self, switchboard_feed):
        """Old snapshots are still read; freshness is the feed's concern."""
        data = b'{"result": "99.5", "slot": 1}'
        assert SwitchboardPriceSource(data, switchboard_feed).read() == Decimal("99.5")

    def test_garbage_blob_rejected(self, switchboard_feed):
        source = SwitchboardPriceSource(b"not-json", switchboard_feed)
        with pytest.raises(MalformedFeedError):
            source.read()

    def test_missing_result_rejected(self, make_feed_account, switchboard_feed):
        source = SwitchboardPriceSource(make_feed_account(None), switchboard_feed)
        with pytest.raises(MalformedFeedError):
            source.read()

    def test_feed_mismatch_rejected(self, make_feed_account, switchboard_feed):
        data = make_feed_account("145.1", feed=bytes([7] * 32))
        with pytest.raises(FeedIdMismatchError):
            SwitchboardPriceSource(data, switchboard_feed).read()

    def test_unset_address_fails(self, make_feed_account):
        source = SwitchboardPriceSource(make_feed_account("145.1"), ZERO_IDENTIFIER)
        with pytest.raises(FeedNotConfiguredError):
            source.read()

    def test_missing_account_fails(self, switchboard_feed):
        with pytest.raises(PriceSourceError):
            SwitchboardPriceSource(None, switchboard_feed).read()


class TestPullFeed:
    """Tests for feed account parsing."""

    def test_numeric_result_kept_exact(self):
        feed = PullFeed.parse(b'{"result": 0.1}')
        assert feed.value() == Decimal("0.1")

    def test_non_object_rejected(self):
        with pytest.raises(MalformedFeedError):
            PullFeed.parse(b'[1, 2, 3]')

    def test_invalid_result_rejected(self):
        with pytest.raises(MalformedFeedError):
            PullFeed.parse(b'{"result": "abc"}')

    def test_negative_result_unusable(self):
        feed = PullFeed.parse(b'{"result": "-3"}')
        with pytest.raises(MalformedFeedError):
            feed.value()


class TestFixedPriceSource:
    """Tests for manual readings."""

    def test_returns_fixed_price(self):
        source = FixedPriceSource(OracleSlot.SWITCHBOARD, "12.5")
        assert source.read() == Decimal("12.5")
        assert source.slot is OracleSlot.SWITCHBOARD
