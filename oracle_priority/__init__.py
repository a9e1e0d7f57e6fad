"""
oracle-priority - priority-based oracle price resolution.

Resolves one current price per asset class from up to two oracles
(Pyth and Switchboard), each enabled at a distinct rank, and stores it
as a WAD-scaled integer.
"""

__version__ = "0.1.0"

from .errors import (
    OracleError,
    InvalidPriorities,
    NoPriceAvailable,
    FixedPointOverflowError,
    PriceSourceError,
    RecordExistsError,
    RecordNotFoundError,
)
from .fixed_point import (
    WAD,
    LAMPORTS_PER_SOL,
    to_compact,
    from_compact,
    from_subunit_offset,
    from_mantissa_exponent,
)
from .priority import OracleSlot, Priority, validate_priorities
from .record import AssetPriceRecord, record_address
from .resolver import PriorityResolver, ResolutionResult
from .service import OracleService
from .store import RecordStore

__all__ = [
    # Errors
    "OracleError",
    "InvalidPriorities",
    "NoPriceAvailable",
    "FixedPointOverflowError",
    "PriceSourceError",
    "RecordExistsError",
    "RecordNotFoundError",
    # Fixed point
    "WAD",
    "LAMPORTS_PER_SOL",
    "to_compact",
    "from_compact",
    "from_subunit_offset",
    "from_mantissa_exponent",
    # Priorities and records
    "OracleSlot",
    "Priority",
    "validate_priorities",
    "AssetPriceRecord",
    "record_address",
    # Resolution
    "PriorityResolver",
    "ResolutionResult",
    "OracleService",
    "RecordStore",
]
