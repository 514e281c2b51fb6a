"""
Change tracking against the previous snapshot
"""
import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional

from ..config.schema import ServiceRecord
from ..core.utils import parse_timestamp

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class LimitChange:
    """A detected limit change for one provider"""
    name: str
    old_daily: int
    old_monthly: int
    new_daily: int
    new_monthly: int

    def describe(self) -> str:
        return (f"{self.name}: {self.old_daily}/day, {self.old_monthly}/month"
                f" -> {self.new_daily}/day, {self.new_monthly}/month")

class ChangeTracker:
    """Stamp lastChanged only where limits actually moved"""

    def __init__(self, previous_records: Iterable[ServiceRecord]):
        self.previous: Dict[str, ServiceRecord] = {}
        for record in previous_records:
            # Names are unique per snapshot; keep the first if a file says otherwise
            self.previous.setdefault(record.name, record)
        self.changes: List[LimitChange] = []

    def stamp(self, records: Iterable[ServiceRecord], now: str) -> List[ServiceRecord]:
        """Return copies of records with lastChanged resolved against the previous snapshot"""
        stamped = []
        for record in records:
            previous = self.previous.get(record.name)

            if previous is None:
                # New provider
                last_changed = now
            elif (previous.daily_limit != record.daily_limit
                    or previous.monthly_limit != record.monthly_limit):
                change = LimitChange(
                    name=record.name,
                    old_daily=previous.daily_limit,
                    old_monthly=previous.monthly_limit,
                    new_daily=record.daily_limit,
                    new_monthly=record.monthly_limit,
                )
                self.changes.append(change)
                logger.info(f"🔄 CHANGE DETECTED: {record.name}")
                logger.info(f"   Old: {previous.daily_limit}/day, {previous.monthly_limit}/month")
                logger.info(f"   New: {record.daily_limit}/day, {record.monthly_limit}/month")
                last_changed = self._not_before(now, previous.last_changed)
            else:
                last_changed = previous.last_changed

            stamped.append(replace(record, last_changed=last_changed))

        return stamped

    @staticmethod
    def _not_before(now: str, previous_stamp: Optional[str]) -> str:
        """Keep lastChanged non-decreasing when the previous stamp is ahead of the clock"""
        current = parse_timestamp(now)
        previous = parse_timestamp(previous_stamp)
        if current is not None and previous is not None and previous > current:
            logger.warning(f"Previous lastChanged {previous_stamp} is later than {now}, keeping it")
            return previous_stamp
        return now
