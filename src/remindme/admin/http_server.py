from __future__ import annotations

import asyncio
import time

import uvicorn

from remindme.config.settings import ADMIN_AUTH_TOKEN, ADMIN_HTTP_HOST, ADMIN_HTTP_PORT
from remindme.llm.base import ReminderTextParser
from remindme.logger import logger
from remindme.storage.reminder_store import ReminderStore

from .app import create_app
from .schemas import RuntimeControl


async def _wait_shutdown_signal(shutdown_event: asyncio.Event, server: uvicorn.Server) -> None:
    await shutdown_event.wait()
    server.should_exit = True


async def main_loop(
    shutdown_event: asyncio.Event,
    store: ReminderStore,
    parser: ReminderTextParser,
) -> None:
    control = RuntimeControl(
        shutdown_event=shutdown_event,
        started_at=time.time(),
    )
    app = create_app(control, store, parser, ADMIN_AUTH_TOKEN)

    config = uvicorn.Config(
        app,
        host=ADMIN_HTTP_HOST,
        port=ADMIN_HTTP_PORT,
        log_level="info",
        access_log=False,
    )
    server = uvicorn.Server(config)
    # signals are handled once in remindme.main
    server.install_signal_handlers = lambda: None

    watcher = asyncio.create_task(_wait_shutdown_signal(shutdown_event, server))
    logger.info(f"Admin HTTP server starting: http://{ADMIN_HTTP_HOST}:{ADMIN_HTTP_PORT}")
    try:
        await server.serve()
    finally:
        watcher.cancel()
        try:
            await watcher
        except asyncio.CancelledError:
            pass
        logger.info("Admin HTTP server stopped")
