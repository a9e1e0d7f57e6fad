"""
Structured logging utilities for oracle-priority.
Provides JSON-formatted logging for record lifecycle and price resolution events.
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import structlog


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = True
) -> structlog.BoundLogger:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
        json_format: If True, output logs in JSON format

    Returns:
        Configured structlog logger
    """
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(getattr(logging, log_level.upper()))
        logging.getLogger().addHandler(file_handler)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class OracleLogger:
    """
    Event logger for oracle record operations.
    """

    def __init__(self, logger: Optional[structlog.BoundLogger] = None):
        self.logger = logger or structlog.get_logger()

    def log_initialized(self, asset_key: str, asset_name: str, address: str) -> None:
        self.logger.info(
            "record_initialized",
            event_type="initialize",
            asset_key=asset_key,
            asset_name=asset_name,
            address=address,
            timestamp=_now(),
        )

    def log_priorities_updated(
        self,
        asset_key: str,
        pyth_priority: int,
        switchboard_priority: int,
        accepted: bool,
        authority: Optional[str] = None,
    ) -> None:
        """Log a priority update attempt (accepted or rejected)."""
        log_method = self.logger.info if accepted else self.logger.warning
        log_method(
            "priorities_updated" if accepted else "priorities_rejected",
            event_type="priority",
            asset_key=asset_key,
            pyth_priority=pyth_priority,
            switchboard_priority=switchboard_priority,
            authority=authority,
            timestamp=_now(),
        )

    def log_sources_updated(
        self,
        asset_key: str,
        pyth_feed_id: str,
        switchboard_feed: str,
        authority: Optional[str] = None,
    ) -> None:
        self.logger.info(
            "sources_updated",
            event_type="sources",
            asset_key=asset_key,
            pyth_feed_id=pyth_feed_id,
            switchboard_feed=switchboard_feed,
            authority=authority,
            timestamp=_now(),
        )

    def log_price_resolved(self, result: Dict[str, Any]) -> None:
        self.logger.info(
            "price_resolved",
            event_type="resolve",
            **result,
        )

    def log_price_unavailable(self, asset_key: str, reason: str) -> None:
        self.logger.warning(
            "price_unavailable",
            event_type="resolve",
            asset_key=asset_key,
            reason=reason,
            timestamp=_now(),
        )


def get_oracle_logger(name: str = "oracle_priority") -> OracleLogger:
    """Get a configured oracle logger instance."""
    return OracleLogger(structlog.get_logger(name))
