"""In-memory reminder store.

State only lives for the process lifetime. All operations are synchronous and run on
the event loop thread, so they never interleave with a due scan.
"""

from __future__ import annotations

import dataclasses
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple
from uuid import uuid4

from remindme.broadcast import BroadcastChannel
from remindme.datamodel import Reminder, ReminderDraft, ReminderFilter, parse_priority
from remindme.events import Bus, E, Handler
from remindme.filters import apply_filter
from remindme.logger import logger
from remindme.metrics import RuntimeMetrics, runtime_metrics
from remindme.utils import ensure_aware, now_in_tz
from remindme.world.due_notifier import CHECK_INTERVAL_SECONDS, DueNotifier

# rescheduling further out than this re-arms the due notification
GRACE_WINDOW = timedelta(minutes=5)


class ReminderValidationError(ValueError):
    """The reminder was rejected before touching the store."""


def _validate_title(title: Optional[str]) -> str:
    if title is None or not str(title).strip():
        raise ReminderValidationError("Please enter a title")
    return str(title).strip()


class ReminderStore:
    """Authoritative reminder collection plus its sorted/filtered views."""

    def __init__(
        self,
        owner_id: str,
        timezone: str = "UTC",
        clock: Callable[[], datetime] | None = None,
        events: Bus | None = None,
        due_channel: BroadcastChannel[Reminder] | None = None,
        check_interval_seconds: float = CHECK_INTERVAL_SECONDS,
        metrics: RuntimeMetrics = runtime_metrics,
    ) -> None:
        self.owner_id = owner_id
        self.timezone = timezone
        self._clock = clock or (lambda: now_in_tz(self.timezone))
        self.events = events or Bus()
        self.due_events: BroadcastChannel[Reminder] = due_channel or BroadcastChannel("due-reminders")
        self._metrics = metrics
        self._reminders: List[Reminder] = []
        self._current_filter = ReminderFilter.ALL
        self._closed = False
        self.notifier = DueNotifier(
            source=self.raw,
            channel=self.due_events,
            clock=self.now,
            interval_seconds=check_interval_seconds,
            metrics=metrics,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def now(self) -> datetime:
        return ensure_aware(self._clock(), self.timezone)

    @property
    def current_filter(self) -> ReminderFilter:
        return self._current_filter

    def raw(self) -> Tuple[Reminder, ...]:
        """Unsorted, unfiltered contents in insertion order."""
        return tuple(self._reminders)

    def get(self, reminder_id: str) -> Reminder | None:
        for reminder in self._reminders:
            if reminder.id == reminder_id:
                return reminder
        return None

    def list(self, selected: ReminderFilter | None = None) -> Tuple[Reminder, ...]:
        selected = ReminderFilter(selected or self._current_filter)
        return apply_filter(self._reminders, selected, self.now(), self.timezone)

    def __len__(self) -> int:
        return len(self._reminders)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def create(self, draft: ReminderDraft) -> Reminder:
        title = _validate_title(draft.title)

        reminder_id = draft.id or uuid4().hex
        if self.get(reminder_id) is not None:
            raise ReminderValidationError(f"Reminder id already exists: {reminder_id}")

        reminder = Reminder(
            id=reminder_id,
            owner_id=draft.owner_id or self.owner_id,
            title=title,
            description=draft.description,
            due_at=ensure_aware(draft.due_at, self.timezone),
            completed=bool(draft.completed),
            recurring=bool(draft.recurring),
            priority=parse_priority(draft.priority),
            image_ref=draft.image_ref,
            created_at=ensure_aware(draft.created_at, self.timezone) if draft.created_at else self.now(),
        )
        self._reminders.append(reminder)
        self._metrics.record_created()
        logger.debug(f"Reminder created: reminder_id={reminder.id}, title={reminder.title}, due_at={reminder.due_at.isoformat()}")

        self.notifier.scan()
        self._notify_changed()
        return reminder

    def update(self, record: Reminder | ReminderDraft) -> bool:
        """Replace the stored record with the same id. Returns False when no such id exists."""
        if not record.id:
            logger.warning("Reminder update without an id ignored")
            return False

        index = self._index_of(record.id)
        if index is None:
            logger.debug(f"Reminder update ignored, not found: reminder_id={record.id}")
            return False

        stored = self._reminders[index]
        updated = dataclasses.replace(
            stored,
            owner_id=record.owner_id or stored.owner_id,
            title=_validate_title(record.title),
            description=record.description,
            due_at=ensure_aware(record.due_at, self.timezone),
            completed=bool(record.completed),
            recurring=bool(record.recurring),
            priority=parse_priority(record.priority),
            image_ref=record.image_ref,
        )
        self._reminders[index] = updated
        self._metrics.record_updated()

        if updated.completed or updated.due_at > self.now() + GRACE_WINDOW:
            self.notifier.reset(updated.id)
        logger.debug(f"Reminder updated: reminder_id={updated.id}, completed={updated.completed}, due_at={updated.due_at.isoformat()}")

        self.notifier.scan()
        self._notify_changed()
        return True

    def delete(self, reminder_id: str) -> bool:
        """Remove a reminder and its due state. Returns False when no such id exists."""
        index = self._index_of(reminder_id)
        if index is None:
            logger.debug(f"Reminder delete ignored, not found: reminder_id={reminder_id}")
            return False

        del self._reminders[index]
        self.notifier.reset(reminder_id)
        self._metrics.record_deleted()
        logger.debug(f"Reminder deleted: reminder_id={reminder_id}")

        self._notify_changed()
        return True

    def set_filter(self, selected: ReminderFilter) -> None:
        selected = ReminderFilter(selected)
        if selected == self._current_filter:
            return
        self._current_filter = selected
        logger.trace(f"Filter changed: {selected.value}")
        self.events.emit(E.FILTER_CHANGED, self)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def add_listener(self, handler: Handler) -> Handler:
        """Call handler(store) after every content or filter change."""
        self.events.add_listener(E.REMINDERS_CHANGED, handler)
        self.events.add_listener(E.FILTER_CHANGED, handler)
        return handler

    def remove_listener(self, handler: Handler) -> None:
        self.events.remove_listener(E.REMINDERS_CHANGED, handler)
        self.events.remove_listener(E.FILTER_CHANGED, handler)

    def _notify_changed(self) -> None:
        self.events.emit(E.REMINDERS_CHANGED, self)

    def _index_of(self, reminder_id: str) -> int | None:
        for index, reminder in enumerate(self._reminders):
            if reminder.id == reminder_id:
                return index
        return None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self):
        """Start periodic due checks; must be called from a running event loop."""
        return self.notifier.start()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self.notifier.stop()
        self.due_events.close()
        logger.info("Reminder store closed")


__all__ = ["ReminderStore", "ReminderValidationError", "GRACE_WINDOW"]
