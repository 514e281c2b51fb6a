"""
JSON snapshot store - reads the previous run and atomically writes the new one
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List

from jsonschema import Draft7Validator

from ..config.schema import ServiceRecord
from ..core.exceptions import SnapshotWriteError

logger = logging.getLogger(__name__)

_TIMESTAMP = {'type': ['string', 'null']}

RECORD_SCHEMA = {
    'type': 'object',
    'required': ['name', 'dailyLimit', 'monthlyLimit'],
    'properties': {
        'name': {'type': 'string', 'minLength': 1},
        'url': {'type': 'string'},
        'dailyLimit': {'type': 'integer'},
        'monthlyLimit': {'type': 'integer'},
        'note': {'type': ['string', 'null']},
        'lastScraped': _TIMESTAMP,
        'lastChanged': _TIMESTAMP,
        'scrapedSuccessfully': {'type': 'boolean'},
    },
}

def sort_records(records: Iterable[ServiceRecord]) -> List[ServiceRecord]:
    """Sort by monthly limit, highest first; equal limits keep their input order"""
    return sorted(records, key=lambda record: record.monthly_limit, reverse=True)

class SnapshotStore:
    """Persist the provider snapshot as a JSON array"""

    def __init__(self, snapshot_path: str = "data.json"):
        self.path = Path(snapshot_path)
        self.validator = Draft7Validator(RECORD_SCHEMA)

    def load(self) -> List[ServiceRecord]:
        """
        Load the previous snapshot

        A missing, unreadable or malformed file degrades to an empty baseline;
        individual malformed entries are skipped.
        """
        if not self.path.exists():
            logger.info(f"No previous snapshot at {self.path}, starting fresh")
            return []

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Could not load previous data: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"⚠️ Previous snapshot {self.path} is not a JSON array, ignoring it")
            return []

        records = []
        for index, entry in enumerate(data):
            errors = list(self.validator.iter_errors(entry))
            if errors:
                logger.warning(f"⚠️ Skipping malformed snapshot entry #{index}: {errors[0].message}")
                continue
            records.append(ServiceRecord.from_dict(entry))

        logger.info(f"Loaded {len(records)} records from previous snapshot")
        return records

    def save(self, records: Iterable[ServiceRecord]) -> List[ServiceRecord]:
        """
        Sort and write the snapshot, replacing the previous file atomically

        Returns:
            The records in the order they were written

        Raises:
            SnapshotWriteError: the previous snapshot is left untouched
        """
        ordered = sort_records(records)
        payload = json.dumps([record.to_dict() for record in ordered], indent=2, ensure_ascii=False)

        directory = self.path.parent if str(self.path.parent) else Path('.')
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
                f.write('\n')
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise SnapshotWriteError(f"Failed to write snapshot {self.path}: {e}") from e

        logger.info(f"📄 {self.path} updated with {len(ordered)} services")
        return ordered
