"""
Priority model for the two oracle slots.

A slot is either disabled or enabled at a rank in [0, MAX_RANK]; lower
rank wins. Raw ranks (signed ints, -1 for disabled) are the wire and
storage form; Priority is the in-memory form and cannot hold an
out-of-range rank.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .errors import InvalidPriorities

DISABLED = -1
MAX_RANK = 2
RANK_SLOTS = MAX_RANK + 1


class OracleSlot(Enum):
    """The two configurable price source slots."""
    PYTH = "pyth"                # Slot A: pull feed addressed by a 32-byte feed id
    SWITCHBOARD = "switchboard"  # Slot B: feed account addressed by a 32-byte address


@dataclass(frozen=True)
class Priority:
    """Disabled, or Enabled(rank) with 0 <= rank <= MAX_RANK."""
    rank: Optional[int] = None

    def __post_init__(self):
        if self.rank is not None:
            if isinstance(self.rank, bool) or not isinstance(self.rank, int):
                raise TypeError(f"Rank must be an int, got {type(self.rank).__name__}")
            if not 0 <= self.rank <= MAX_RANK:
                raise ValueError(f"Rank {self.rank} outside [0, {MAX_RANK}]")

    @classmethod
    def disabled(cls) -> "Priority":
        return cls(None)

    @classmethod
    def enabled(cls, rank: int) -> "Priority":
        return cls(rank)

    @classmethod
    def from_raw(cls, raw: int) -> "Priority":
        """Negative raw values mean disabled."""
        if raw < 0:
            return cls.disabled()
        return cls.enabled(raw)

    @property
    def is_enabled(self) -> bool:
        return self.rank is not None

    def to_raw(self) -> int:
        return DISABLED if self.rank is None else self.rank

    def __str__(self) -> str:
        return "disabled" if self.rank is None else f"rank {self.rank}"


def validate_priorities(rank_a: int, rank_b: int) -> bool:
    """
    Check a raw (pyth, switchboard) priority pair.

    Rules:
        - at least one source must be enabled
        - enabled ranks must not exceed MAX_RANK
        - two enabled sources may not share a rank

    Returns:
        True if the pair may be stored
    """
    # At least one oracle must be enabled
    if rank_a < 0 and rank_b < 0:
        return False

    if (rank_a >= 0 and rank_a > MAX_RANK) or (rank_b >= 0 and rank_b > MAX_RANK):
        return False

    if rank_a >= 0 and rank_b >= 0 and rank_a == rank_b:
        return False

    return True


def parse_priorities(rank_a: int, rank_b: int) -> Tuple[Priority, Priority]:
    """
    Validate a raw pair and convert it to Priority values.

    Raises:
        InvalidPriorities: If validate_priorities rejects the pair
    """
    if not validate_priorities(rank_a, rank_b):
        raise InvalidPriorities(rank_a, rank_b)
    return Priority.from_raw(rank_a), Priority.from_raw(rank_b)
