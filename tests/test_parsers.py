import json
from types import SimpleNamespace

import httpx
import openai
import pytest

from remindme.llm import create_text_parser
from remindme.llm.base import (
    EMPTY_TEXT_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    ParsedReminder,
    ParseFailure,
    UnconfiguredParser,
)
from remindme.llm.gemini_client import GeminiReminderParser
from remindme.llm.openai_client import OpenAIReminderParser

PAYLOAD = {
    "title": "Dentist",
    "description": None,
    "date": "2026-03-12",
    "time": "09:30",
    "isRecurring": False,
    "priority": "high",
}


def test_from_payload_tolerates_wrong_types() -> None:
    parsed = ParsedReminder.from_payload({"title": 3, "date": ["x"], "isRecurring": "yes", "priority": "low"})

    assert parsed == ParsedReminder(priority="low")


def test_from_payload_reads_both_recurring_spellings() -> None:
    assert ParsedReminder.from_payload({"isRecurring": True}).recurring is True
    assert ParsedReminder.from_payload({"recurring": True}).recurring is True


def test_create_text_parser_without_provider() -> None:
    assert isinstance(create_text_parser("none"), UnconfiguredParser)


@pytest.mark.asyncio
async def test_unconfigured_parser_reports_missing_key() -> None:
    assert await UnconfiguredParser().parse("buy milk") == ParseFailure(NOT_CONFIGURED_MESSAGE)


@pytest.mark.asyncio
async def test_gemini_without_key_is_not_configured() -> None:
    parser = GeminiReminderParser(api_key="", base_url=None, model="gemini-2.0-flash")

    assert await parser.parse("buy milk tomorrow") == ParseFailure(NOT_CONFIGURED_MESSAGE)


@pytest.mark.asyncio
async def test_gemini_rejects_empty_text() -> None:
    parser = GeminiReminderParser(api_key="", base_url=None, model="gemini-2.0-flash")

    assert await parser.parse("   ") == ParseFailure(EMPTY_TEXT_MESSAGE)


@pytest.mark.asyncio
async def test_gemini_parses_json_response(monkeypatch) -> None:
    parser = GeminiReminderParser(api_key="test-key", base_url=None, model="gemini-2.0-flash")

    async def fake_generate(contents, config):
        assert contents[-1]["parts"][0]["text"] == "dentist thursday 9:30, important"
        return SimpleNamespace(text=json.dumps(PAYLOAD))

    monkeypatch.setattr(parser, "_generate_once", fake_generate)
    result = await parser.parse("dentist thursday 9:30, important")

    assert result == ParsedReminder(title="Dentist", date="2026-03-12", time="09:30", recurring=False, priority="high")


@pytest.mark.asyncio
async def test_gemini_retries_transient_errors(monkeypatch) -> None:
    parser = GeminiReminderParser(api_key="test-key", base_url=None, model="gemini-2.0-flash")
    parser.API_RETRY_DELAYS_SECONDS = [0.0, 0.0]
    calls = []

    async def flaky_generate(contents, config):
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("503 UNAVAILABLE")
        return SimpleNamespace(text=json.dumps(PAYLOAD))

    monkeypatch.setattr(parser, "_generate_once", flaky_generate)
    result = await parser.parse("dentist")

    assert isinstance(result, ParsedReminder)
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_gemini_transport_failure_is_structured(monkeypatch) -> None:
    parser = GeminiReminderParser(api_key="test-key", base_url=None, model="gemini-2.0-flash")

    async def broken_generate(contents, config):
        raise RuntimeError("400 INVALID_ARGUMENT")

    monkeypatch.setattr(parser, "_generate_once", broken_generate)
    result = await parser.parse("dentist")

    assert isinstance(result, ParseFailure)
    assert "400" in result.message


@pytest.mark.asyncio
@pytest.mark.parametrize("text", [None, "", "not json", "[1, 2]"])
async def test_gemini_malformed_response_is_structured(monkeypatch, text) -> None:
    parser = GeminiReminderParser(api_key="test-key", base_url=None, model="gemini-2.0-flash")

    async def odd_generate(contents, config):
        return SimpleNamespace(text=text)

    monkeypatch.setattr(parser, "_generate_once", odd_generate)

    assert await parser.parse("dentist") == ParseFailure("Unexpected AI response structure")


@pytest.mark.asyncio
async def test_openai_parses_json_response() -> None:
    parser = OpenAIReminderParser(api_key="test-key", base_url="http://127.0.0.1:9/v1", model="gpt-4o-mini")
    seen = {}

    async def fake_create(**kwargs):
        seen.update(kwargs)
        return SimpleNamespace(output_text=json.dumps(PAYLOAD))

    parser.client = SimpleNamespace(responses=SimpleNamespace(create=fake_create))
    result = await parser.parse("dentist thursday")

    assert result == ParsedReminder(title="Dentist", date="2026-03-12", time="09:30", recurring=False, priority="high")
    assert seen["input"] == "dentist thursday"
    assert seen["text"]["format"]["type"] == "json_schema"


@pytest.mark.asyncio
async def test_openai_transport_failure_is_structured() -> None:
    parser = OpenAIReminderParser(api_key="test-key", base_url="http://127.0.0.1:9/v1", model="gpt-4o-mini")

    async def failing_create(**kwargs):
        raise openai.APIConnectionError(request=httpx.Request("POST", "http://127.0.0.1:9/v1/responses"))

    parser.client = SimpleNamespace(responses=SimpleNamespace(create=failing_create))
    result = await parser.parse("dentist")

    assert isinstance(result, ParseFailure)
    assert result.message.startswith("API call failed")


@pytest.mark.asyncio
async def test_openai_without_key_is_not_configured() -> None:
    parser = OpenAIReminderParser(api_key="", base_url="http://127.0.0.1:9/v1", model="gpt-4o-mini")

    assert await parser.parse("dentist") == ParseFailure(NOT_CONFIGURED_MESSAGE)
