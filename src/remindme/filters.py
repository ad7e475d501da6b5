"""Sort order and filter predicates for reminder views.

Everything here is a pure function of (reminders, filter, now, tz).
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Tuple

from remindme.datamodel import Reminder, ReminderFilter
from remindme.utils import local_date, start_of_day

_HORIZON_DAYS = {
    ReminderFilter.NEXT_7_DAYS: 7,
    ReminderFilter.NEXT_30_DAYS: 30,
}


def sort_reminders(reminders: Iterable[Reminder]) -> List[Reminder]:
    """Incomplete first, then by due time. Ties keep insertion order."""
    return sorted(reminders, key=lambda r: (r.completed, r.due_at))


def matches_filter(reminder: Reminder, selected: ReminderFilter, now: datetime, tz: str) -> bool:
    if selected == ReminderFilter.ALL:
        return True
    if reminder.completed:
        return False

    if selected == ReminderFilter.TODAY:
        return local_date(reminder.due_at, tz) == local_date(now, tz)

    horizon_end = start_of_day(now, tz) + timedelta(days=_HORIZON_DAYS[selected])
    return now < reminder.due_at < horizon_end


def apply_filter(
    reminders: Iterable[Reminder],
    selected: ReminderFilter,
    now: datetime,
    tz: str,
) -> Tuple[Reminder, ...]:
    """Sort, then filter; the result is an immutable snapshot."""
    return tuple(r for r in sort_reminders(reminders) if matches_filter(r, selected, now, tz))


__all__ = ["sort_reminders", "matches_filter", "apply_filter"]
