from remindme.logger import setup_logging, logger
from remindme.config.settings import *

import asyncio
import signal

from remindme.admin.http_server import main_loop as admin_http_main
from remindme.broadcast import Subscription
from remindme.datamodel import Reminder
from remindme.llm import create_text_parser
from remindme.storage.reminder_store import ReminderStore
from remindme.utils import to_local_min_str


async def log_due_reminders(subscription: Subscription[Reminder], tz: str) -> None:
    """Console stand-in for a notification popup."""
    async for reminder in subscription:
        logger.success(f"Reminder due: {reminder.title} (due {to_local_min_str(reminder.due_at, tz)}, priority={reminder.priority.value})")


async def main():
    shutdown_event = asyncio.Event()

    def signal_handler(sig, frame):
        logger.info("Interrupt received, shutting down components...")
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    store = ReminderStore(owner_id=OWNER_ID, timezone=USER_TIMEZONE)
    parser = create_text_parser(LLM_PROVIDER)

    console = asyncio.create_task(log_due_reminders(store.due_events.subscribe(), USER_TIMEZONE))
    store.start()
    try:
        await admin_http_main(shutdown_event, store, parser)
    finally:
        logger.info("Stopping reminder store...")
        await store.close()
        await console
        logger.info("remindme stopped")


def run() -> None:
    setup_logging(
        log_level=LOG_LEVEL,
        log_file=LOG_FILE,
        console_level="INFO",
    )
    logger.info("Starting remindme...")
    asyncio.run(main())


if __name__ == "__main__":
    run()
