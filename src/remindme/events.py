"""State-change event bus: the Bus class and the E event-name constants.

Observers (presentation code) register here to learn that the store's contents or
filter selection changed, then re-read via ReminderStore.list(). Due reminders are
NOT announced on this bus; they travel over the BroadcastChannel in remindme.broadcast.

Handlers may be plain callables (run inline during emit) or coroutine functions
(scheduled on the running loop).
"""

from __future__ import annotations

from typing import Any, Callable

from pyee.asyncio import AsyncIOEventEmitter

from remindme.logger import logger

Handler = Callable[..., Any]


# Event names live in one place
class E:
    REMINDERS_CHANGED = "reminders.changed"
    FILTER_CHANGED = "reminders.filter_changed"


class Bus(AsyncIOEventEmitter):
    def add_listener(self, event: str, f: Handler) -> Handler:
        logger.debug(f"Registering event handler: {event} -> {getattr(f, '__name__', f)}")
        return super().add_listener(event, f)


__all__ = ["Bus", "E", "Handler"]
