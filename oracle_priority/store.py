"""
Persistent record store for oracle-priority.

Records are kept in a JSON file keyed by their derived address. Every
committed change rewrites the file through a temporary file and an
atomic rename, so a reader never sees a half-written state.
"""

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from .errors import RecordExistsError, RecordNotFoundError
from .record import AssetPriceRecord, record_address
from .utils.invariants import InvariantError, validate_record_data

logger = logging.getLogger(__name__)

STATE_VERSION = "1.0"


class RecordStore:
    """
    Address-keyed store of AssetPriceRecords.

    Mutations go through transaction(), which hands out a working copy
    and commits it only if the block completes. Operations on one store
    are serialized with a lock.
    """

    def __init__(self, state_file: Optional[str] = None):
        """
        Args:
            state_file: JSON file to persist to (None = memory only)
        """
        self.state_file = Path(state_file) if state_file else None
        self._records: Dict[str, AssetPriceRecord] = {}
        self._lock = threading.RLock()
        self._load()

    def _load(self) -> None:
        if self.state_file is None or not self.state_file.exists():
            logger.info("No existing oracle state found, starting fresh")
            return

        with open(self.state_file, 'r') as f:
            data = json.load(f)

        records = {}
        for address, entry in data.get("records", {}).items():
            validate_record_data(entry, context=f"(state file {self.state_file})")
            record = AssetPriceRecord.from_dict(entry)
            if record.address != address:
                raise InvariantError(
                    f"Record {record.asset_key} stored under {address}, expected {record.address}"
                )
            records[address] = record

        self._records = records
        logger.info(f"Loaded {len(records)} oracle records from {self.state_file}")

    def _save(self, records: Dict[str, AssetPriceRecord]) -> None:
        if self.state_file is None:
            return

        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "records": {address: record.to_dict() for address, record in records.items()},
            "last_updated": datetime.now(timezone.utc).isoformat(),
            "version": STATE_VERSION,
        }

        fd, tmp_path = tempfile.mkstemp(
            dir=str(self.state_file.parent), prefix=".oracle-", suffix=".json"
        )
        try:
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.state_file)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _commit(self, record: AssetPriceRecord) -> None:
        records = dict(self._records)
        records[record.address] = record
        self._save(records)
        self._records = records

    def exists(self, asset_key: str) -> bool:
        with self._lock:
            return record_address(asset_key) in self._records

    def get(self, asset_key: str) -> AssetPriceRecord:
        """
        Return a copy of the record for asset_key.

        Raises:
            RecordNotFoundError: If the asset has not been initialized
        """
        with self._lock:
            record = self._records.get(record_address(asset_key))
            if record is None:
                raise RecordNotFoundError(f"No oracle record for '{asset_key}'")
            return record.copy()

    def create(self, record: AssetPriceRecord) -> AssetPriceRecord:
        """
        Store a new record.

        Raises:
            RecordExistsError: If a record already lives at the address
        """
        with self._lock:
            if record.address in self._records:
                raise RecordExistsError(f"Oracle record for '{record.asset_key}' already exists")
            self._commit(record.copy())
            return record.copy()

    @contextmanager
    def transaction(self, asset_key: str) -> Iterator[AssetPriceRecord]:
        """
        Read-modify-write a record.

        The yielded record is a working copy; it replaces the stored record
        only when the block exits without raising.
        """
        with self._lock:
            working = self.get(asset_key)
            yield working
            self._commit(working)

    def list_records(self) -> List[AssetPriceRecord]:
        with self._lock:
            return [record.copy() for record in self._records.values()]
