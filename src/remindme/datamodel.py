from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

__all__ = [
    "ReminderPriority", "ReminderFilter", "parse_priority",
    "Reminder", "ReminderDraft",
]


# ----------------- Enums ----------------
class ReminderPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ReminderFilter(str, Enum):
    ALL = "all"
    TODAY = "today"
    NEXT_7_DAYS = "next7Days"
    NEXT_30_DAYS = "next30Days"


def parse_priority(value: Any) -> ReminderPriority:
    """Map a collaborator-supplied value onto a priority level, falling back to MEDIUM."""
    if isinstance(value, ReminderPriority):
        return value
    if not isinstance(value, str):
        return ReminderPriority.MEDIUM
    normalized = value.strip().lower()
    for priority in ReminderPriority:
        if priority.value == normalized:
            return priority
    return ReminderPriority.MEDIUM


# ----------------- Reminder data model ----------------
@dataclass(frozen=True)
class Reminder:
    id: str
    owner_id: str
    title: str
    due_at: datetime  # always timezone-aware once stored
    created_at: datetime
    description: Optional[str] = None
    completed: bool = False
    recurring: bool = False  # stored only, never expanded into occurrences
    priority: ReminderPriority = ReminderPriority.MEDIUM
    image_ref: Optional[str] = None


@dataclass
class ReminderDraft:
    """Editable form of a reminder; id/created_at/owner_id are filled in by the store when absent."""
    title: str
    due_at: datetime
    description: Optional[str] = None
    completed: bool = False
    recurring: bool = False
    priority: ReminderPriority = ReminderPriority.MEDIUM
    image_ref: Optional[str] = None
    id: Optional[str] = None
    owner_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_reminder(cls, reminder: Reminder) -> "ReminderDraft":
        return cls(
            title=reminder.title,
            due_at=reminder.due_at,
            description=reminder.description,
            completed=reminder.completed,
            recurring=reminder.recurring,
            priority=reminder.priority,
            image_ref=reminder.image_ref,
            id=reminder.id,
            owner_id=reminder.owner_id,
            created_at=reminder.created_at,
        )
