"""Apply a text-parsing result to an in-progress add/edit draft.

The parsed fields are untrusted. A bad priority falls back to medium, and a date/time
that does not parse leaves the draft's due_at untouched with a warning, while the
remaining fields are still applied.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import List

from remindme.datamodel import ReminderDraft, parse_priority
from remindme.llm.base import ParsedReminder
from remindme.logger import logger
from remindme.utils import combine_local

DATETIME_WARNING = "AI could not parse date/time accurately. Please set manually."


@dataclass
class ApplyResult:
    draft: ReminderDraft
    warnings: List[str] = field(default_factory=list)


def apply_parsed_reminder(draft: ReminderDraft, parsed: ParsedReminder, tz: str) -> ApplyResult:
    warnings: List[str] = []

    due_at = draft.due_at
    try:
        due_at = combine_local(parsed.date, parsed.time, tz)
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning(f"Error parsing date/time from AI: date={parsed.date!r}, time={parsed.time!r}, error={e}")
        warnings.append(DATETIME_WARNING)

    updated = dataclasses.replace(
        draft,
        title=parsed.title if parsed.title is not None else draft.title,
        description=parsed.description if parsed.description is not None else draft.description,
        recurring=bool(parsed.recurring),
        priority=parse_priority(parsed.priority),
        due_at=due_at,
    )
    return ApplyResult(draft=updated, warnings=warnings)


__all__ = ["ApplyResult", "apply_parsed_reminder", "DATETIME_WARNING"]
