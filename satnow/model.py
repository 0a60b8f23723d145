"""
Tracked-satellite model: records paired with their look angles from one
observer, ordered by range on request.

Sorting is a separate step from computing so bulk loads add everything and
sort once. Between a recompute and the next sort the order is not meaningful.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from satnow.errors import PropagationError
from satnow.propagation import LookAngle, ObserverPosition
from satnow.tle import OrbitalRecord

logger = logging.getLogger(__name__)


def utcnow():
    return datetime.now(timezone.utc)


@dataclass
class TrackedEntry:
    record: OrbitalRecord
    look_angle: LookAngle

    @property
    def catalog_id(self):
        return self.record.catalog_id


class TrackedSatellites:
    def __init__(self, observer: ObserverPosition, propagator, clock=utcnow):
        self.observer = observer
        self.propagator = propagator
        self.clock = clock
        self.timestamp = clock()
        self.failures = []
        self._entries: List[TrackedEntry] = []

    def _compute(self, record):
        try:
            return self.propagator.look_angle(record, self.observer, self.timestamp)
        except PropagationError as e:
            logger.warning("No position for %s (%d): %s", record.display_name, record.catalog_id, e)
            self.failures.append((record, str(e)))
            return LookAngle.unavailable(str(e))

    def add(self, record: OrbitalRecord):
        self._entries.append(TrackedEntry(record, self._compute(record)))

    def recompute(self):
        """Move to the current time and refresh every look angle. Does not sort."""
        self.timestamp = self.clock()
        self.failures = []
        for entry in self._entries:
            entry.look_angle = self._compute(entry.record)

    def sort(self):
        # list.sort is stable, so equal ranges keep their order
        self._entries.sort(key=lambda e: e.look_angle.range_km)

    def index_of(self, catalog_id) -> Optional[int]:
        for i, entry in enumerate(self._entries):
            if entry.catalog_id == catalog_id:
                return i
        return None

    def __len__(self):
        return len(self._entries)

    def size(self):
        return len(self._entries)

    def __getitem__(self, index) -> TrackedEntry:
        if not 0 <= index < len(self._entries):
            raise IndexError(f"tracked index {index} out of range (size {len(self._entries)})")
        return self._entries[index]

    def __iter__(self):
        return iter(list(self._entries))


def build_tracked_set(observer, records, propagator, clock=utcnow):
    """Add every record, then sort once by range."""
    tracked = TrackedSatellites(observer, propagator, clock=clock)
    for record in records:
        tracked.add(record)
    tracked.sort()
    return tracked
