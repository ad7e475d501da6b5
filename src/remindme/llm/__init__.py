from remindme.llm.base import ReminderTextParser, UnconfiguredParser
from remindme.logger import logger


def create_text_parser(provider: str) -> ReminderTextParser:
    """Pick the text-parsing backend named by LLM_PROVIDER."""
    if provider == "gemini":
        from remindme.llm.gemini_client import GeminiReminderParser

        return GeminiReminderParser()

    if provider == "openai":
        from remindme.llm.openai_client import OpenAIReminderParser

        return OpenAIReminderParser()

    logger.info(f"Text parsing disabled (LLM_PROVIDER={provider})")
    return UnconfiguredParser()


__all__ = ["create_text_parser"]
