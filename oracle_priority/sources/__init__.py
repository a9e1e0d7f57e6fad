"""
Price source readers.

Both oracle slots are read through the PriceSource capability.
"""

from .base import PriceSource, FixedPriceSource
from .pyth import PythPriceSource, PriceUpdate, PythPrice, MAXIMUM_AGE
from .switchboard import SwitchboardPriceSource, PullFeed

__all__ = [
    "PriceSource",
    "FixedPriceSource",
    "PythPriceSource",
    "PriceUpdate",
    "PythPrice",
    "MAXIMUM_AGE",
    "SwitchboardPriceSource",
    "PullFeed",
]
