"""Clock and timezone helpers."""

from datetime import datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..logging_config import get_logger

logger = get_logger(__name__)


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """Return the named zone, or None to use the host's local zone."""
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone '{name}', falling back to host local time")
        return None


def align_to(value: datetime, reference: datetime) -> datetime:
    """Make ``value`` comparable with ``reference`` (both naive or both aware).

    Naive values are read as wall-clock time in the reference's zone; aware
    values compared against a naive reference are converted to host local time.
    """
    if (value.tzinfo is None) == (reference.tzinfo is None):
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=reference.tzinfo)
    return value.astimezone().replace(tzinfo=None)


class SystemClock:
    """Wall clock returning timezone-aware datetimes."""

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz

    def now(self) -> datetime:
        if self.tz is not None:
            return datetime.now(self.tz)
        return datetime.now().astimezone()
