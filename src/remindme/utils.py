from datetime import date, datetime, time
from zoneinfo import ZoneInfo

__all__ = ["now_in_tz", "ensure_aware", "start_of_day", "local_date", "combine_local", "to_local_min_str"]


def now_in_tz(tz: str) -> datetime:
    """Current time as an aware datetime in the given IANA zone."""
    return datetime.now(ZoneInfo(tz))


def ensure_aware(dt: datetime, tz: str) -> datetime:
    # naive values are wall-clock times in the user's zone
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(tz))
    return dt


def start_of_day(dt: datetime, tz: str) -> datetime:
    local = ensure_aware(dt, tz).astimezone(ZoneInfo(tz))
    return datetime.combine(local.date(), time.min, tzinfo=ZoneInfo(tz))


def local_date(dt: datetime, tz: str) -> date:
    return ensure_aware(dt, tz).astimezone(ZoneInfo(tz)).date()


def combine_local(date_str: str, time_str: str, tz: str) -> datetime:
    """Build an aware datetime from "YYYY-MM-DD" and "HH:MM" in the user's zone.

    Raises ValueError (or TypeError for non-string input) when either part is unparsable.
    """
    parsed_date = datetime.strptime(date_str.strip(), "%Y-%m-%d").date()
    parsed_time = datetime.strptime(time_str.strip(), "%H:%M").time()
    return datetime.combine(parsed_date, parsed_time, tzinfo=ZoneInfo(tz))


def to_local_min_str(dt: datetime, tz: str) -> str:
    return ensure_aware(dt, tz).astimezone(ZoneInfo(tz)).strftime("%Y-%m-%d %H:%M")
