"""
Command line interface for oracle-priority.

Usage:
    oracle-priority init SOL_VAULT --name "SOL vault"
    oracle-priority set-sources SOL_VAULT --feed-id <hex> --feed-address <hex>
    oracle-priority set-priorities SOL_VAULT 0 1
    oracle-priority get-price SOL_VAULT --price-update update.json --feed-account feed.json
    oracle-priority show SOL_VAULT
"""

import argparse
import json
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_SETTINGS_FILE, OracleSettings, load_oracle_settings
from .errors import MalformedFeedError, OracleError
from .logging_utils import setup_logging
from .priority import OracleSlot
from .record import AssetPriceRecord
from .service import OracleService
from .sources import PriceUpdate
from .store import RecordStore
from .utils.invariants import InvariantError


def _decimal(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a decimal: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oracle-priority",
        description="Priority-based oracle price resolution",
    )
    parser.add_argument("--config", default=DEFAULT_SETTINGS_FILE, help="Settings YAML file")
    parser.add_argument("--state-file", help="Override the record state file")
    parser.add_argument("--authority", help="Caller identity recorded in logs")

    sub = parser.add_subparsers(dest="command", required=True)

    p_init = sub.add_parser("init", help="Create the oracle record for an asset")
    p_init.add_argument("asset", help="Asset class key")
    p_init.add_argument("--name", default="", help="Human-readable asset name")

    p_prio = sub.add_parser("set-priorities", help="Set oracle priorities (-1 disables)")
    p_prio.add_argument("asset")
    p_prio.add_argument("pyth", type=int, help="Pyth priority")
    p_prio.add_argument("switchboard", type=int, help="Switchboard priority")

    p_src = sub.add_parser("set-sources", help="Set oracle identifiers")
    p_src.add_argument("asset")
    p_src.add_argument("--feed-id", required=True, help="Pyth feed id (32-byte hex)")
    p_src.add_argument("--feed-address", required=True, help="Switchboard feed address (32-byte hex)")

    p_get = sub.add_parser("get-price", help="Resolve and store the current price")
    p_get.add_argument("asset")
    p_get.add_argument("--price-update", help="Pyth price update JSON file")
    p_get.add_argument("--feed-account", help="Switchboard feed account file")
    p_get.add_argument("--pyth-price", type=_decimal, help="Manual Pyth reading")
    p_get.add_argument("--switchboard-price", type=_decimal, help="Manual Switchboard reading")

    p_show = sub.add_parser("show", help="Print the stored record")
    p_show.add_argument("asset")

    return parser


def _record_view(record: AssetPriceRecord) -> dict:
    view = record.to_dict()
    view["address"] = record.address
    view["price"] = str(record.price) if record.has_price else None
    return view


def _load_price_update(path: str) -> PriceUpdate:
    with open(path, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedFeedError(f"Price update file is not valid JSON: {e}") from e
    return PriceUpdate.from_dict(data)


def _get_price(service: OracleService, args: argparse.Namespace) -> dict:
    price_update = _load_price_update(args.price_update) if args.price_update else None
    feed_account = Path(args.feed_account).read_bytes() if args.feed_account else None

    # Manual readings replace the feed reader for their slot
    manual_prices = {
        OracleSlot.PYTH: args.pyth_price,
        OracleSlot.SWITCHBOARD: args.switchboard_price,
    }
    return service.get_price_from_feeds(
        args.asset, price_update, feed_account, manual_prices=manual_prices
    ).to_dict()


def run(args: argparse.Namespace, settings: OracleSettings) -> dict:
    service = OracleService(
        RecordStore(args.state_file or settings.state_file),
        max_price_age_seconds=settings.max_price_age_seconds,
    )

    if args.command == "init":
        return _record_view(service.initialize(args.asset, args.name))
    if args.command == "set-priorities":
        return _record_view(
            service.update_priorities(args.asset, args.pyth, args.switchboard, authority=args.authority)
        )
    if args.command == "set-sources":
        return _record_view(
            service.update_sources(args.asset, args.feed_id, args.feed_address, authority=args.authority)
        )
    if args.command == "get-price":
        return _get_price(service, args)
    return _record_view(service.get_record(args.asset))


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_oracle_settings(args.config)
    setup_logging(settings.log_level, settings.log_file, settings.json_logs)

    try:
        output = run(args, settings)
    except (OracleError, InvariantError, ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
