"""Log record model and its RFC-3339 JSON codec."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

_RFC3339_RE = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)

# Timestamp of a record submitted without one.
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an RFC-3339 string into a timezone-aware datetime.

    Raises ValueError if the string is not RFC-3339 (a date, a time and an
    explicit offset are all required).
    """
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    match = _RFC3339_RE.match(value)
    if match is None:
        raise ValueError(f"invalid RFC-3339 timestamp: {value!r}")

    year, month, day, hour, minute, second = (int(g) for g in match.groups()[:6])
    fraction, offset = match.group(7), match.group(8)

    microsecond = 0
    if fraction:
        # Sub-microsecond digits are truncated
        microsecond = int(fraction[1:7].ljust(6, "0"))

    if offset in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = 1 if offset[0] == "+" else -1
        hours, minutes = int(offset[1:3]), int(offset[4:6])
        if hours > 23 or minutes > 59:
            raise ValueError(f"invalid RFC-3339 offset: {value!r}")
        tz = timezone(sign * timedelta(hours=hours, minutes=minutes))

    return datetime(year, month, day, hour, minute, second, microsecond, tzinfo=tz)


def format_timestamp(dt: datetime) -> str:
    """Render a datetime as RFC-3339; UTC is written with a trailing 'Z'."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    timespec = "microseconds" if dt.microsecond else "seconds"
    text = dt.isoformat(timespec=timespec)
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


@dataclass(frozen=True)
class Metadata:
    parent_resource_id: str = ""


@dataclass(frozen=True)
class LogRecord:
    level: str = ""
    message: str = ""
    resource_id: str = ""
    timestamp: datetime = ZERO_TIME
    trace_id: str = ""
    span_id: str = ""
    commit: str = ""
    metadata: Metadata = field(default_factory=Metadata)

    @classmethod
    def from_dict(cls, data: dict) -> "LogRecord":
        """Build a record from its JSON object form.

        Missing fields take their zero value and unknown keys are ignored.
        Raises ValueError on a malformed timestamp.
        """
        raw_ts = data.get("timestamp")
        timestamp = ZERO_TIME if raw_ts is None else parse_timestamp(raw_ts)
        metadata = data.get("metadata") or {}
        return cls(
            level=data.get("level") or "",
            message=data.get("message") or "",
            resource_id=data.get("resourceId") or "",
            timestamp=timestamp,
            trace_id=data.get("traceId") or "",
            span_id=data.get("spanId") or "",
            commit=data.get("commit") or "",
            metadata=Metadata(
                parent_resource_id=metadata.get("parentResourceId") or "",
            ),
        )

    def to_dict(self) -> dict:
        return {
            "level": self.level,
            "message": self.message,
            "resourceId": self.resource_id,
            "timestamp": format_timestamp(self.timestamp),
            "traceId": self.trace_id,
            "spanId": self.span_id,
            "commit": self.commit,
            "metadata": {
                "parentResourceId": self.metadata.parent_resource_id,
            },
        }
