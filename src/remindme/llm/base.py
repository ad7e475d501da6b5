from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

__all__ = [
    "ParsedReminder", "ParseFailure", "ParseResult", "ReminderTextParser", "UnconfiguredParser",
    "PARSE_INSTRUCTIONS", "NOT_CONFIGURED_MESSAGE", "EMPTY_TEXT_MESSAGE",
]

NOT_CONFIGURED_MESSAGE = "AI API key is not configured."
EMPTY_TEXT_MESSAGE = "Please enter text for AI parsing."

PARSE_INSTRUCTIONS = (
    "Extract the title, description, date (YYYY-MM-DD), time (HH:MM), and if it's recurring (true/false), "
    "and priority (low, medium, high, critical) from the following text. If a field is not present, use null. "
    "For date, infer the closest future date if only day/month is provided. "
    "For time, infer a reasonable time if not provided (e.g., 09:00). "
    "For recurring, assume false if not explicitly stated. "
    "For priority, assume 'medium' if not stated. "
    "Respond in JSON format according to the schema provided."
)


@dataclass
class ParsedReminder:
    """Candidate fields from the parsing service. Untrusted: any of them may be missing or malformed."""
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None  # "YYYY-MM-DD"
    time: Optional[str] = None  # "HH:MM"
    recurring: Optional[bool] = None
    priority: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ParsedReminder":
        def text(key: str) -> Optional[str]:
            value = payload.get(key)
            return value if isinstance(value, str) else None

        recurring = payload.get("recurring", payload.get("isRecurring"))
        return cls(
            title=text("title"),
            description=text("description"),
            date=text("date"),
            time=text("time"),
            recurring=recurring if isinstance(recurring, bool) else None,
            priority=text("priority"),
        )


@dataclass
class ParseFailure:
    message: str


ParseResult = Union[ParsedReminder, ParseFailure]


class ReminderTextParser(ABC):
    @abstractmethod
    async def parse(self, text: str) -> ParseResult:
        """Turn free text into candidate reminder fields. Never raises; failures come back as ParseFailure."""
        pass


class UnconfiguredParser(ReminderTextParser):
    async def parse(self, text: str) -> ParseResult:
        return ParseFailure(NOT_CONFIGURED_MESSAGE)
