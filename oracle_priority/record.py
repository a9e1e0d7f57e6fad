"""
Per-asset oracle configuration record.

One AssetPriceRecord exists per asset class (vault type). It owns the
priority configuration of both oracle slots together with the most
recently resolved price and the time it was resolved.
"""

import hashlib
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from .fixed_point import from_compact
from .priority import OracleSlot, Priority

IDENTIFIER_LENGTH = 32
ZERO_IDENTIFIER = bytes(IDENTIFIER_LENGTH)

# Discriminator mixed into every record address
RECORD_SEED = b"Oracle"


def record_address(asset_key: str) -> str:
    """Derive the storage key for an asset's record."""
    digest = hashlib.sha256(asset_key.encode("utf-8") + RECORD_SEED)
    return digest.hexdigest()


def parse_identifier(value: Any) -> bytes:
    """
    Normalize a source identifier to 32 raw bytes.

    Accepts raw bytes or a hex string (with or without a 0x prefix).
    """
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        text = value[2:] if value.lower().startswith("0x") else value
        try:
            raw = bytes.fromhex(text)
        except ValueError as e:
            raise ValueError(f"Identifier is not valid hex: {value!r}") from e
    else:
        raise TypeError(f"Unsupported identifier type: {type(value).__name__}")

    if len(raw) != IDENTIFIER_LENGTH:
        raise ValueError(
            f"Identifier must be {IDENTIFIER_LENGTH} bytes, got {len(raw)}"
        )
    return raw


@dataclass
class AssetPriceRecord:
    """Oracle configuration and last resolved price for one asset class."""
    asset_key: str
    asset_name: str = ""
    pyth_feed_id: bytes = ZERO_IDENTIFIER
    switchboard_feed: bytes = ZERO_IDENTIFIER
    pyth_priority: Priority = field(default_factory=Priority.disabled)
    switchboard_priority: Priority = field(default_factory=Priority.disabled)
    recent_price: int = 0   # WAD-scaled
    last_update: int = 0    # unix seconds

    @classmethod
    def new(cls, asset_key: str, asset_name: str = "") -> "AssetPriceRecord":
        """Fresh record: both oracles disabled, no price."""
        return cls(asset_key=asset_key, asset_name=asset_name)

    @property
    def address(self) -> str:
        return record_address(self.asset_key)

    @property
    def price(self) -> Decimal:
        return from_compact(self.recent_price)

    @property
    def has_price(self) -> bool:
        return self.last_update > 0

    @property
    def last_update_at(self) -> Optional[datetime]:
        if not self.has_price:
            return None
        return datetime.fromtimestamp(self.last_update, tz=timezone.utc)

    def priority_for(self, slot: OracleSlot) -> Priority:
        if slot is OracleSlot.PYTH:
            return self.pyth_priority
        return self.switchboard_priority

    def identifier_for(self, slot: OracleSlot) -> bytes:
        if slot is OracleSlot.PYTH:
            return self.pyth_feed_id
        return self.switchboard_feed

    def copy(self) -> "AssetPriceRecord":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict."""
        return {
            "asset_key": self.asset_key,
            "asset_name": self.asset_name,
            "pyth_feed_id": self.pyth_feed_id.hex(),
            "switchboard_feed": self.switchboard_feed.hex(),
            "pyth_priority": self.pyth_priority.to_raw(),
            "switchboard_priority": self.switchboard_priority.to_raw(),
            # u128 does not survive every JSON reader as a number
            "recent_price": str(self.recent_price),
            "last_update": self.last_update,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssetPriceRecord":
        return cls(
            asset_key=data["asset_key"],
            asset_name=data.get("asset_name", ""),
            pyth_feed_id=parse_identifier(data.get("pyth_feed_id", ZERO_IDENTIFIER)),
            switchboard_feed=parse_identifier(data.get("switchboard_feed", ZERO_IDENTIFIER)),
            pyth_priority=Priority.from_raw(int(data.get("pyth_priority", -1))),
            switchboard_priority=Priority.from_raw(int(data.get("switchboard_priority", -1))),
            recent_price=int(data.get("recent_price", 0)),
            last_update=int(data.get("last_update", 0)),
        )
