from __future__ import annotations

import asyncio
import time
from typing import Any, AsyncIterator

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse, StreamingResponse

from remindme.broadcast import Subscription
from remindme.datamodel import Reminder, ReminderDraft, ReminderFilter
from remindme.drafting import apply_parsed_reminder
from remindme.llm.base import ParseFailure, ReminderTextParser
from remindme.logger import logger
from remindme.metrics import runtime_metrics
from remindme.storage.reminder_store import ReminderStore, ReminderValidationError

from .auth import make_admin_auth
from .schemas import (
    FilterIn,
    ParseRequest,
    ParseResponse,
    ReminderIn,
    ReminderOut,
    RuntimeControl,
    ShutdownRequest,
)


def _format_sse(reminder: Reminder) -> str:
    return f"event: due\ndata: {ReminderOut.from_record(reminder).model_dump_json()}\n\n"


async def _due_event_source(subscription: Subscription[Reminder]) -> AsyncIterator[str]:
    try:
        async for reminder in subscription:
            yield _format_sse(reminder)
    finally:
        subscription.unsubscribe()


def create_app(
    control: RuntimeControl,
    store: ReminderStore,
    parser: ReminderTextParser,
    admin_token: str,
) -> FastAPI:
    app = FastAPI(title="remindme Admin API", version="1.0.0")
    require_admin_auth = make_admin_auth(admin_token)

    def health_payload() -> dict[str, Any]:
        return {
            "status": "ok",
            "now_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            "uptime_seconds": max(0.0, time.time() - control.started_at),
            "reminders": len(store),
            "shutdown_requested": control.shutdown_event.is_set(),
        }

    @app.get("/healthz", include_in_schema=False)
    async def healthz() -> PlainTextResponse:
        return PlainTextResponse("ok")

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, Any]:
        return health_payload()

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------
    @app.get("/api/v1/reminders")
    async def list_reminders(request: Request, filter: ReminderFilter | None = None) -> dict[str, Any]:
        await require_admin_auth(request)
        selected = filter or store.current_filter
        items = store.list(selected)
        return {
            "filter": selected.value,
            "total": len(items),
            "items": [ReminderOut.from_record(r).model_dump(mode="json") for r in items],
        }

    @app.post("/api/v1/reminders", status_code=201)
    async def create_reminder(payload: ReminderIn, request: Request) -> ReminderOut:
        await require_admin_auth(request)
        try:
            reminder = store.create(payload.to_draft())
        except ReminderValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))
        return ReminderOut.from_record(reminder)

    @app.get("/api/v1/reminders/due/stream")
    async def stream_due_reminders(request: Request) -> StreamingResponse:
        await require_admin_auth(request)
        subscription = store.due_events.subscribe()
        return StreamingResponse(_due_event_source(subscription), media_type="text/event-stream")

    @app.post("/api/v1/reminders/parse")
    async def parse_reminder(payload: ParseRequest, request: Request) -> ParseResponse:
        await require_admin_auth(request)
        draft = payload.draft.to_draft() if payload.draft else ReminderDraft(title="", due_at=store.now())

        result = await parser.parse(payload.text)
        if isinstance(result, ParseFailure):
            logger.warning(f"Text parsing failed: {result.message}")
            return ParseResponse(ok=False, error=result.message, draft=ReminderOut.from_record(draft))

        applied = apply_parsed_reminder(draft, result, store.timezone)
        return ParseResponse(ok=True, draft=ReminderOut.from_record(applied.draft), warnings=applied.warnings)

    @app.get("/api/v1/reminders/{reminder_id}")
    async def get_reminder(reminder_id: str, request: Request) -> ReminderOut:
        await require_admin_auth(request)
        reminder = store.get(reminder_id)
        if reminder is None:
            raise HTTPException(status_code=404, detail="Reminder not found")
        return ReminderOut.from_record(reminder)

    @app.put("/api/v1/reminders/{reminder_id}")
    async def update_reminder(reminder_id: str, payload: ReminderIn, request: Request) -> ReminderOut:
        await require_admin_auth(request)
        try:
            found = store.update(payload.to_draft(reminder_id))
        except ReminderValidationError as e:
            raise HTTPException(status_code=422, detail=str(e))
        if not found:
            raise HTTPException(status_code=404, detail="Reminder not found")
        return ReminderOut.from_record(store.get(reminder_id))

    @app.delete("/api/v1/reminders/{reminder_id}")
    async def delete_reminder(reminder_id: str, request: Request) -> dict[str, Any]:
        await require_admin_auth(request)
        if not store.delete(reminder_id):
            raise HTTPException(status_code=404, detail="Reminder not found")
        return {"ok": True, "id": reminder_id}

    # ------------------------------------------------------------------
    # Filter selection
    # ------------------------------------------------------------------
    @app.get("/api/v1/filter")
    async def get_filter(request: Request) -> dict[str, str]:
        await require_admin_auth(request)
        return {"filter": store.current_filter.value}

    @app.put("/api/v1/filter")
    async def set_filter(payload: FilterIn, request: Request) -> dict[str, str]:
        await require_admin_auth(request)
        store.set_filter(payload.filter)
        return {"filter": store.current_filter.value}

    # ------------------------------------------------------------------
    # Runtime
    # ------------------------------------------------------------------
    @app.get("/api/v1/metrics")
    async def get_metrics(request: Request) -> dict[str, Any]:
        await require_admin_auth(request)
        return {
            "runtime": runtime_metrics.snapshot(),
            "components": {
                "due_notifier": store.notifier.get_status(),
                "due_channel": {
                    "closed": store.due_events.closed,
                    "subscribers": store.due_events.subscriber_count,
                },
            },
            "active_tasks": len(asyncio.all_tasks()),
        }

    @app.post("/api/v1/admin/shutdown")
    async def admin_shutdown(payload: ShutdownRequest, request: Request) -> dict[str, Any]:
        auth_info = await require_admin_auth(request)
        logger.warning(f"Remote shutdown requested: by={auth_info['user']}, reason={payload.reason}")
        control.shutdown_event.set()
        return {"ok": True, "action": "shutdown", "reason": payload.reason}

    return app


__all__ = ["create_app"]
