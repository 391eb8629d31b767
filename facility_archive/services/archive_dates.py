"""Date handling shared by the archive fetchers, search and housekeeping jobs."""

from datetime import date, datetime, time, timezone
from typing import Any, Dict, Iterable, List, Optional

from dateutil.parser import isoparse

from ..database.collections import COMPLETION_FIELDS

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
DEFAULT_COMPLETION_FIELD = 'completedAt'


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_range_start(value: str) -> datetime:
    """Inclusive lower bound of a date filter: the start of the given day (UTC)"""
    return _as_utc(isoparse(value))


def parse_range_end(value: str) -> datetime:
    """Inclusive upper bound of a date filter: 23:59:59 of the given day (UTC)"""
    day = isoparse(value).date()
    return datetime.combine(day, time(23, 59, 59), tzinfo=timezone.utc)


def coerce_instant(value: Any) -> Optional[datetime]:
    """
    Normalize a stored timestamp into an aware datetime.

    Firestore hands back datetime subclasses; records that went through JSON
    may carry ISO strings or ``{"seconds": ...}`` / ``{"_seconds": ...}`` maps.
    Anything else is treated as missing.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        try:
            return _as_utc(isoparse(value))
        except ValueError:
            return None
    if isinstance(value, dict):
        seconds = value.get('seconds', value.get('_seconds'))
        if isinstance(seconds, (int, float)):
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
    return None


def completion_instant(record: Dict[str, Any]) -> Optional[datetime]:
    """Completion moment of a tagged archive record, read from its source's field"""
    field = COMPLETION_FIELDS.get(record.get('collectionSource'), DEFAULT_COMPLETION_FIELD)
    return coerce_instant(record.get(field))


def sort_by_completion(records: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Newest completion first; records without one are dated at the epoch"""
    return sorted(records, key=lambda record: completion_instant(record) or EPOCH, reverse=True)
