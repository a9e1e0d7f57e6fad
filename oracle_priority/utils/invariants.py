"""
Runtime invariant checks for oracle records.

Records read back from storage are checked before use so that a
hand-edited or corrupted state file fails loudly instead of producing
a price from an inconsistent priority configuration.

Usage:
    from oracle_priority.utils.invariants import (
        validate_record_data,
        InvariantError,
    )
"""

from typing import Any, Dict, List

from ..fixed_point import U64_MAX, U128_MAX
from ..priority import validate_priorities
from ..record import IDENTIFIER_LENGTH

REQUIRED_FIELDS = ("asset_key",)


class InvariantError(Exception):
    """Raised when a runtime invariant is violated."""

    pass


def validate_record_data(data: Dict[str, Any], context: str = "") -> None:
    """
    Check a stored record dict before it is turned into an AssetPriceRecord.

    Checks:
        - required fields present
        - priorities are a storable configuration, or both disabled
          (the state of a freshly initialized record)
        - recent_price fits u128 and last_update fits u64
        - identifiers are 32-byte hex strings

    Raises:
        InvariantError: With every violation found
    """
    errors: List[str] = []

    for key in REQUIRED_FIELDS:
        if not data.get(key):
            errors.append(f"missing '{key}'")

    try:
        pyth = int(data.get("pyth_priority", -1))
        switchboard = int(data.get("switchboard_priority", -1))
        both_disabled = pyth < 0 and switchboard < 0
        if not both_disabled and not validate_priorities(pyth, switchboard):
            errors.append(f"invalid priorities pyth={pyth} switchboard={switchboard}")
    except (TypeError, ValueError):
        errors.append("priorities are not integers")

    try:
        recent_price = int(data.get("recent_price", 0))
        if not 0 <= recent_price <= U128_MAX:
            errors.append(f"recent_price {recent_price} outside u128 range")
    except (TypeError, ValueError):
        errors.append("recent_price is not an integer")

    try:
        last_update = int(data.get("last_update", 0))
        if not 0 <= last_update <= U64_MAX:
            errors.append(f"last_update {last_update} outside u64 range")
    except (TypeError, ValueError):
        errors.append("last_update is not an integer")

    for key in ("pyth_feed_id", "switchboard_feed"):
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, str) or len(value) != IDENTIFIER_LENGTH * 2:
            errors.append(f"'{key}' is not a {IDENTIFIER_LENGTH}-byte hex string")
            continue
        try:
            bytes.fromhex(value)
        except ValueError:
            errors.append(f"'{key}' is not valid hex")

    if errors:
        raise InvariantError(
            f"Invalid oracle record {data.get('asset_key', '?')}: {'; '.join(errors)}. {context}"
        )
