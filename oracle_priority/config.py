"""
Settings for oracle-priority.

Loaded from a YAML file; every key is optional.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .sources.pyth import MAXIMUM_AGE

DEFAULT_SETTINGS_FILE = "config/settings.yaml"


@dataclass
class OracleSettings:
    """Runtime configuration."""
    state_file: str = "state/oracle_records.json"
    max_price_age_seconds: int = MAXIMUM_AGE
    log_level: str = "INFO"
    log_file: Optional[str] = None
    json_logs: bool = True

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "OracleSettings":
        """Create config from settings dict."""
        oracle = settings.get("oracle", {}) or {}
        logging_cfg = settings.get("logging", {}) or {}
        return cls(
            state_file=oracle.get("state_file", cls.state_file),
            max_price_age_seconds=int(oracle.get("max_price_age_seconds", cls.max_price_age_seconds)),
            log_level=logging_cfg.get("level", cls.log_level),
            log_file=logging_cfg.get("file", cls.log_file),
            json_logs=bool(logging_cfg.get("json", cls.json_logs)),
        )


def load_settings(config_path: str = DEFAULT_SETTINGS_FILE) -> Dict:
    """Load application settings from YAML file."""
    path = Path(config_path)
    if not path.exists():
        return {}
    with open(path, 'r') as f:
        return yaml.safe_load(f) or {}


def load_oracle_settings(config_path: str = DEFAULT_SETTINGS_FILE) -> OracleSettings:
    return OracleSettings.from_settings(load_settings(config_path))
