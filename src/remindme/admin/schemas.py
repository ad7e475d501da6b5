from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from remindme.datamodel import Reminder, ReminderDraft, ReminderFilter, ReminderPriority, parse_priority


@dataclass
class RuntimeControl:
    shutdown_event: asyncio.Event
    started_at: float


class ShutdownRequest(BaseModel):
    reason: str = Field(default="manual")


class ReminderIn(BaseModel):
    title: str = ""
    due_at: datetime
    description: Optional[str] = None
    completed: bool = False
    recurring: bool = False
    # free-form on input, mapped with parse_priority
    priority: str = ReminderPriority.MEDIUM.value
    image_ref: Optional[str] = None

    def to_draft(self, reminder_id: str | None = None) -> ReminderDraft:
        return ReminderDraft(
            id=reminder_id,
            title=self.title,
            due_at=self.due_at,
            description=self.description,
            completed=self.completed,
            recurring=self.recurring,
            priority=parse_priority(self.priority),
            image_ref=self.image_ref,
        )


class ReminderOut(BaseModel):
    id: Optional[str] = None
    owner_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    due_at: datetime
    completed: bool
    recurring: bool
    priority: ReminderPriority
    image_ref: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Reminder | ReminderDraft) -> "ReminderOut":
        return cls(
            id=record.id,
            owner_id=record.owner_id,
            title=record.title,
            description=record.description,
            due_at=record.due_at,
            completed=record.completed,
            recurring=record.recurring,
            priority=record.priority,
            image_ref=record.image_ref,
            created_at=record.created_at,
        )


class FilterIn(BaseModel):
    filter: ReminderFilter


class ParseRequest(BaseModel):
    text: str
    draft: Optional[ReminderIn] = None


class ParseResponse(BaseModel):
    ok: bool
    error: Optional[str] = None
    draft: Optional[ReminderOut] = None
    warnings: list[str] = Field(default_factory=list)
