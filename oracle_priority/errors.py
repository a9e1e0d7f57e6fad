"""
Error taxonomy for oracle-priority.

Configuration errors block a mutation entirely. Price source errors are
raised by the readers and converted to "reading absent" by the resolver.
"""


class OracleError(Exception):
    """Base class for all oracle-priority errors."""

    pass


class InvalidPriorities(OracleError):
    """Priority configuration violates the range, uniqueness or at-least-one rules."""

    def __init__(self, rank_a: int, rank_b: int):
        self.rank_a = rank_a
        self.rank_b = rank_b
        super().__init__(
            f"Invalid oracle priorities configuration (pyth={rank_a}, switchboard={rank_b})"
        )


class NoPriceAvailable(OracleError):
    """No enabled source produced a reading."""

    def __init__(self, asset_key: str = ""):
        self.asset_key = asset_key
        super().__init__(f"No price available from configured oracles for '{asset_key}'")


class FixedPointOverflowError(OracleError, OverflowError):
    """Scaled value does not fit the storage integer."""

    pass


# =============================================================================
# Price source errors
# =============================================================================

class PriceSourceError(OracleError):
    """A price source could not produce a reading."""

    pass


class StalePriceError(PriceSourceError):
    """Reading is older than the allowed age."""

    pass


class FeedIdMismatchError(PriceSourceError):
    """Price update belongs to a different feed."""

    pass


class FeedNotConfiguredError(PriceSourceError):
    """Source identifier is still all zeros."""

    pass


class MalformedFeedError(PriceSourceError):
    """Feed data could not be parsed."""

    pass


# =============================================================================
# Persistence errors
# =============================================================================

class RecordNotFoundError(OracleError):
    """No record exists for the asset key."""

    pass


class RecordExistsError(OracleError):
    """A record already exists for the asset key."""

    pass
