"""LLM integration — chat client and health alert synthesis."""

from bloomie.engine.llm.client import chat_completion, strip_think_tags
from bloomie.engine.llm.health_alerts import (
    SYSTEM_PROMPT,
    build_context,
    normalize_alert,
    parse_alerts_response,
    request_llm_alerts,
)

__all__ = [
    "chat_completion",
    "strip_think_tags",
    "SYSTEM_PROMPT",
    "build_context",
    "normalize_alert",
    "parse_alerts_response",
    "request_llm_alerts",
]
