"""Crossing Times — Time-of-Day Normalization.

The feed reports readings as a bare 12-hour wall-clock time ("h:mm A") in
New York civil time. The date is assumed to be "today" in that zone at
the reference instant, rolled back one calendar day when that would put
the reading in the future.
"""

from datetime import datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from crossings.config import settings
from crossings.core.errors import TimestampUnparseable
from crossings.core.logging import get_logger

logger = get_logger("ingest.time")

FEED_TIME_FORMAT = "%I:%M %p"
STORE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:00+00"


def parse_time_of_day(value: Optional[str]) -> time:
    """Parse "11:45 PM" style strings. AM/PM is case-insensitive."""
    if not value or not isinstance(value, str):
        raise TimestampUnparseable(value)
    try:
        return datetime.strptime(value.strip(), FEED_TIME_FORMAT).time()
    except ValueError as e:
        raise TimestampUnparseable(value) from e


def resolve_time_of_day(
    value: Optional[str],
    reference: datetime,
    tz: Optional[ZoneInfo] = None,
) -> datetime:
    """Anchor a time-of-day string to an absolute UTC minute.

    Raises:
        TimestampUnparseable: if `value` is not a 12-hour time.
    """
    tz = tz or ZoneInfo(settings.feed_timezone)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)

    wall_clock = parse_time_of_day(value)
    local_reference = reference.astimezone(tz)
    local = datetime.combine(local_reference.date(), wall_clock, tzinfo=tz)

    # Compare instants; wall clocks repeat during the fall-back hour
    if local.astimezone(timezone.utc) > reference.astimezone(timezone.utc):
        local = datetime.combine(
            local_reference.date() - timedelta(days=1), wall_clock, tzinfo=tz
        )

    return local.astimezone(timezone.utc).replace(second=0, microsecond=0)


def normalize_timestamp(
    value: Optional[str],
    reference: datetime,
    tz: Optional[ZoneInfo] = None,
) -> Optional[datetime]:
    """Like resolve_time_of_day, but an unparseable value yields None."""
    try:
        return resolve_time_of_day(value, reference, tz)
    except TimestampUnparseable as e:
        logger.warning(f"{e}; reading will be dropped")
        return None


def format_store_timestamp(value: datetime) -> str:
    """Render an instant as "YYYY-MM-DD HH:MM:00+00". Naive values are UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime(STORE_TIMESTAMP_FORMAT)
