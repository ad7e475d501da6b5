"""
Due detection: a periodic scan over the store's raw collection that publishes each
reminder once per due episode.

A reminder is due when it is not completed and its due_at is at or before now + LOOKAHEAD.
Once published, its id sits in the notified-set until the store resets it (update that
completes or reschedules past the grace window) or deletes the reminder. Time passing
alone never re-arms a reminder.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Set

from remindme.broadcast import BroadcastChannel
from remindme.datamodel import Reminder
from remindme.logger import logger
from remindme.metrics import RuntimeMetrics, runtime_metrics

CHECK_INTERVAL_SECONDS = 30.0
LOOKAHEAD = timedelta(minutes=1)


class DueNotifier:
    def __init__(
        self,
        source: Callable[[], Iterable[Reminder]],
        channel: BroadcastChannel[Reminder],
        clock: Callable[[], datetime],
        interval_seconds: float = CHECK_INTERVAL_SECONDS,
        metrics: RuntimeMetrics = runtime_metrics,
    ) -> None:
        self._source = source
        self.channel = channel
        self._clock = clock
        self.interval_seconds = interval_seconds
        self._metrics = metrics
        self._notified: Set[str] = set()
        self._task: asyncio.Task | None = None
        self._shutdown_event: asyncio.Event | None = None
        self._stopped = False
        self._last_check_at_epoch: float | None = None

    @property
    def notified_ids(self) -> frozenset[str]:
        return frozenset(self._notified)

    def is_notified(self, reminder_id: str) -> bool:
        return reminder_id in self._notified

    def reset(self, reminder_id: str) -> None:
        """Make a reminder eligible for notification again."""
        if reminder_id in self._notified:
            self._notified.discard(reminder_id)
            logger.trace(f"Due state reset: reminder_id={reminder_id}")

    def scan(self) -> List[Reminder]:
        """Publish every newly due reminder, in collection order, and return them."""
        now = self._clock()
        horizon = now + LOOKAHEAD
        self._last_check_at_epoch = time.time()

        emitted: List[Reminder] = []
        for reminder in self._source():
            if reminder.completed or reminder.id in self._notified:
                continue
            if reminder.due_at <= horizon:
                if not self.channel.publish(reminder):
                    # channel closed during teardown
                    break
                self._notified.add(reminder.id)
                emitted.append(reminder)
                logger.info(f"Reminder due: reminder_id={reminder.id}, title={reminder.title}, due_at={reminder.due_at.isoformat()}")

        self._metrics.record_scan(len(emitted))
        return emitted

    async def main_loop(self, shutdown_event: asyncio.Event) -> None:
        self._shutdown_event = shutdown_event
        logger.info(f"Due notifier started, interval={self.interval_seconds}s")

        # first scan runs immediately to surface reminders already overdue at startup
        while not shutdown_event.is_set():
            try:
                self.scan()
            except Exception as e:
                logger.error(f"Due scan failed: {e}", exc_info=e)

            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass

        logger.info("Due notifier stopped")

    def start(self) -> asyncio.Task:
        """Spawn the periodic loop on the running event loop."""
        if self._task is not None:
            return self._task
        if self._stopped:
            raise RuntimeError("Due notifier has already been stopped")
        self._task = asyncio.create_task(self.main_loop(asyncio.Event()), name="due-notifier")
        return self._task

    async def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        if self._task is None:
            return
        if self._shutdown_event is not None:
            self._shutdown_event.set()
        else:
            # task created but not yet scheduled
            self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    def get_status(self) -> dict[str, object]:
        return {
            "running": self._task is not None and not self._task.done(),
            "stopped": self._stopped,
            "interval_seconds": self.interval_seconds,
            "notified_count": len(self._notified),
            "last_check_at_epoch": self._last_check_at_epoch,
        }


__all__ = ["DueNotifier", "CHECK_INTERVAL_SECONDS", "LOOKAHEAD"]
