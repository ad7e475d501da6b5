from remindme.logger import logger
from remindme.config.settings import (
    OPENAI_API_KEY,
    OPENAI_BASE_URL,
    LLM_PARSE_MODEL,
)
from remindme.llm.base import (
    EMPTY_TEXT_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    PARSE_INSTRUCTIONS,
    ParsedReminder,
    ParseFailure,
    ParseResult,
    ReminderTextParser,
)
from remindme.metrics import runtime_metrics
from openai import AsyncOpenAI, OpenAIError
from typing import Any, Dict
import json
import time

# strict mode: every property required, nullability expressed via type unions
RESPONSE_FORMAT: Dict[str, Any] = {
    "type": "json_schema",
    "name": "reminder",
    "strict": True,
    "schema": {
        "type": "object",
        "properties": {
            "title": {"type": ["string", "null"]},
            "description": {"type": ["string", "null"]},
            "date": {"type": ["string", "null"], "description": "YYYY-MM-DD"},
            "time": {"type": ["string", "null"], "description": "HH:MM"},
            "isRecurring": {"type": "boolean"},
            "priority": {"type": "string", "enum": ["low", "medium", "high", "critical"]},
        },
        "required": ["title", "description", "date", "time", "isRecurring", "priority"],
        "additionalProperties": False,
    },
}


class OpenAIReminderParser(ReminderTextParser):
    def __init__(
        self,
        api_key: str = OPENAI_API_KEY,
        base_url: str = OPENAI_BASE_URL,
        model: str = LLM_PARSE_MODEL,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.client = None
        if api_key:
            self.client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url
            )

    async def parse(self, text: str) -> ParseResult:
        if not text or not text.strip():
            return ParseFailure(EMPTY_TEXT_MESSAGE)
        if self.client is None:
            logger.warning("OpenAI API key is missing; text parsing is unavailable")
            return ParseFailure(NOT_CONFIGURED_MESSAGE)

        started = time.perf_counter()
        try:
            logger.trace(f"OpenAI parse request BaseUrl:{self.base_url}; Model:{self.model}; Text:{text}")
            response = await self.client.responses.create(
                model=self.model,
                instructions=PARSE_INSTRUCTIONS,
                input=text,
                text={"format": RESPONSE_FORMAT},
            )
            logger.trace(f"OpenAI parse response: {response}")
        except OpenAIError as e:
            runtime_metrics.record_parse_call((time.perf_counter() - started) * 1000, error=True)
            logger.error(f"OpenAI parse request failed: {e}")
            return ParseFailure(f"API call failed: {e}")

        runtime_metrics.record_parse_call((time.perf_counter() - started) * 1000)
        try:
            payload = json.loads(response.output_text or "")
        except json.JSONDecodeError as e:
            logger.warning(f"OpenAI returned malformed JSON: {e}")
            return ParseFailure("Unexpected AI response structure")
        if not isinstance(payload, dict):
            return ParseFailure("Unexpected AI response structure")

        return ParsedReminder.from_payload(payload)


__all__ = ["OpenAIReminderParser", "RESPONSE_FORMAT"]
