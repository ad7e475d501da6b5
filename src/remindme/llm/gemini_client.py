import asyncio
import json
import time
from typing import Any, Dict, List

from google import genai
from google.genai import types

from remindme.config.settings import GEMINI_API_KEY, GEMINI_BASE_URL, LLM_PARSE_MODEL
from remindme.llm.base import (
    EMPTY_TEXT_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    PARSE_INSTRUCTIONS,
    ParsedReminder,
    ParseFailure,
    ParseResult,
    ReminderTextParser,
)
from remindme.logger import logger
from remindme.metrics import runtime_metrics

RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "title": {"type": "STRING"},
        "description": {"type": "STRING", "nullable": True},
        "date": {"type": "STRING"},
        "time": {"type": "STRING"},
        "isRecurring": {"type": "BOOLEAN"},
        "priority": {"type": "STRING", "enum": ["low", "medium", "high", "critical"]},
    },
    "required": ["title", "date", "time", "isRecurring", "priority"],
}


class GeminiReminderParser(ReminderTextParser):
    API_RETRY_DELAYS_SECONDS = [2.0, 5.0]

    def __init__(self, api_key: str = GEMINI_API_KEY, base_url: str | None = GEMINI_BASE_URL, model: str = LLM_PARSE_MODEL) -> None:
        self.api_key = api_key
        self.model = model
        self.client = None
        if api_key:
            self.client = genai.Client(api_key=api_key, http_options={"base_url": base_url} if base_url else None)

    @staticmethod
    def _is_retryable_error(error: Exception) -> bool:
        msg = str(error).lower()
        signals = [
            "429",
            "rate limit",
            "resource_exhausted",
            "temporarily unavailable",
            "timeout",
            "timed out",
            "503",
            "502",
            "504",
            "connection reset",
            "connection aborted",
        ]
        return any(s in msg for s in signals)

    @staticmethod
    def _text_message(role: str, text: str) -> Dict[str, Any]:
        return {
            "role": role,
            "parts": [{"text": text}],
        }

    def _build_contents(self, text: str) -> List[Dict[str, Any]]:
        return [
            self._text_message("user", PARSE_INSTRUCTIONS),
            self._text_message("model", "Understood. Please provide the text."),
            self._text_message("user", text),
        ]

    async def _generate_once(self, contents: List[Dict[str, Any]], config: types.GenerateContentConfig) -> Any:
        return await self.client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=config,
        )

    async def _generate_once_with_retry(self, contents: List[Dict[str, Any]], config: types.GenerateContentConfig) -> Any:
        for idx, delay in enumerate([0.0, *self.API_RETRY_DELAYS_SECONDS]):
            try:
                if delay > 0:
                    await asyncio.sleep(delay)
                return await self._generate_once(contents, config)
            except Exception as e:
                is_last = idx == len(self.API_RETRY_DELAYS_SECONDS)
                if is_last or not self._is_retryable_error(e):
                    raise
                logger.warning(
                    f"Gemini request failed temporarily, retrying: attempt={idx + 1}/{len(self.API_RETRY_DELAYS_SECONDS) + 1}, delay={self.API_RETRY_DELAYS_SECONDS[idx]}s, error={e}"
                )

        raise RuntimeError("Gemini retry loop exited unexpectedly")

    async def parse(self, text: str) -> ParseResult:
        if not text or not text.strip():
            return ParseFailure(EMPTY_TEXT_MESSAGE)
        if self.client is None:
            logger.warning("Gemini API key is missing; text parsing is unavailable")
            return ParseFailure(NOT_CONFIGURED_MESSAGE)

        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
        )

        started = time.perf_counter()
        try:
            logger.trace(f"Gemini parse request Model:{self.model}; Text:{text}")
            response = await self._generate_once_with_retry(self._build_contents(text), config)
            logger.trace(f"Gemini parse response: {response}")
        except Exception as e:
            runtime_metrics.record_parse_call((time.perf_counter() - started) * 1000, error=True)
            logger.error(f"Gemini parse request failed: {e}")
            return ParseFailure(f"API call failed: {e}")

        runtime_metrics.record_parse_call((time.perf_counter() - started) * 1000)
        raw = getattr(response, "text", None)
        if not isinstance(raw, str) or not raw.strip():
            logger.warning(f"Gemini returned an unexpected response structure: {response}")
            return ParseFailure("Unexpected AI response structure")

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Gemini returned malformed JSON: {e}; raw={raw}")
            return ParseFailure("Unexpected AI response structure")
        if not isinstance(payload, dict):
            return ParseFailure("Unexpected AI response structure")

        return ParsedReminder.from_payload(payload)


__all__ = ["GeminiReminderParser", "RESPONSE_SCHEMA"]
