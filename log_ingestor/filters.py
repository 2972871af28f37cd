"""Filter predicates for log records: exact, substring and time-window."""

import enum
from datetime import datetime, timedelta
from typing import Mapping, Optional

from log_ingestor.models import LogRecord, parse_timestamp

TIMESTAMP_WINDOW = timedelta(hours=24)


class MatchStrategy(enum.Enum):
    EXACT = "exact"
    SUBSTRING = "substring"
    WINDOW = "window"


class FilterKey(enum.Enum):
    """Every filter key a query may use, bound to how it is compared.

    The value is the key as it appears in a query body.
    """

    LEVEL = ("level", MatchStrategy.EXACT)
    MESSAGE = ("message", MatchStrategy.SUBSTRING)
    RESOURCE_ID = ("resourceId", MatchStrategy.EXACT)
    TIMESTAMP = ("timestamp", MatchStrategy.WINDOW)
    TRACE_ID = ("traceId", MatchStrategy.EXACT)
    SPAN_ID = ("spanId", MatchStrategy.EXACT)
    COMMIT = ("commit", MatchStrategy.EXACT)
    PARENT_RESOURCE_ID = ("metadata.parentResourceId", MatchStrategy.EXACT)

    def __init__(self, key: str, strategy: MatchStrategy):
        self.key = key
        self.strategy = strategy

    @classmethod
    def lookup(cls, key: str) -> Optional["FilterKey"]:
        """Return the FilterKey for a query key, or None if it is not one."""
        return _KEYS_BY_NAME.get(key)

    def field_value(self, record: LogRecord):
        """Return the record field this key filters on."""
        if self is FilterKey.PARENT_RESOURCE_ID:
            return record.metadata.parent_resource_id
        return getattr(record, _ATTRIBUTES[self])


_KEYS_BY_NAME = {member.key: member for member in FilterKey}

_ATTRIBUTES = {
    FilterKey.LEVEL: "level",
    FilterKey.MESSAGE: "message",
    FilterKey.RESOURCE_ID: "resource_id",
    FilterKey.TIMESTAMP: "timestamp",
    FilterKey.TRACE_ID: "trace_id",
    FilterKey.SPAN_ID: "span_id",
    FilterKey.COMMIT: "commit",
}


def match_exact(actual: str, expected: str) -> bool:
    """True if the strings are equal (case-sensitive)."""
    return actual == expected


def match_substring(actual: str, fragment: str) -> bool:
    """True if fragment appears in actual (case-sensitive)."""
    return fragment in actual


def match_window(actual: datetime, start_str: str) -> bool:
    """True if actual falls in [start, start + 24h], both ends inclusive.

    An unparseable start never matches.
    """
    try:
        start = parse_timestamp(start_str)
    except ValueError:
        return False
    if actual < start:
        return False
    try:
        end = start + TIMESTAMP_WINDOW
    except OverflowError:
        # Window runs past datetime.max
        return True
    return actual <= end


_MATCHERS = {
    MatchStrategy.EXACT: match_exact,
    MatchStrategy.SUBSTRING: match_substring,
    MatchStrategy.WINDOW: match_window,
}


def matches(record: LogRecord, filters: Mapping[str, str]) -> bool:
    """True if the record satisfies every recognised filter.

    Unknown keys are skipped, so an empty or all-unknown filter set matches
    every record.
    """
    for name, value in filters.items():
        key = FilterKey.lookup(name)
        if key is None:
            continue
        if not _MATCHERS[key.strategy](key.field_value(record), value):
            return False
    return True


def recognised_keys(filters: Mapping[str, str]) -> list[FilterKey]:
    """Return the filter keys in a filter set that will take effect."""
    return [key for key in map(FilterKey.lookup, filters) if key is not None]
