"""Thread-safe, append-only in-memory log store with filtered queries."""

from typing import Mapping

from log_ingestor.filters import matches
from log_ingestor.models import LogRecord
from log_ingestor.rwlock import ReadWriteLock


class LogStore:
    """Holds every ingested record in arrival order.

    Writes take the lock exclusively for a single append; queries share it
    for the length of one full scan.
    """

    def __init__(self):
        self._records: list[LogRecord] = []
        self._lock = ReadWriteLock()

    def ingest(self, record: LogRecord):
        """Append a record to the end of the store."""
        with self._lock.write_locked():
            self._records.append(record)

    def query(self, filters: Mapping[str, str]) -> list[LogRecord]:
        """Return records matching every filter, in insertion order."""
        with self._lock.read_locked():
            return [r for r in self._records if matches(r, filters)]

    @property
    def count(self) -> int:
        """Number of records currently stored."""
        with self._lock.read_locked():
            return len(self._records)

    def __len__(self):
        return self.count
