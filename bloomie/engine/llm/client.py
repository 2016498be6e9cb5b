"""Chat-completion client — low-level async API call and output cleaning."""

import logging
import re

import aiohttp

from bloomie.engine.config import LLMConfig

logger = logging.getLogger(__name__)


def strip_think_tags(text):
    """Strip <think>...</think> blocks from reasoning-model output."""
    return re.sub(r"<think>.*?</think>", "", text, flags=re.DOTALL).strip()


async def chat_completion(messages, config: LLMConfig = None, session: aiohttp.ClientSession = None):
    """POST ``messages`` to an OpenAI-compatible endpoint and return the reply text.

    Returns "" on any transport, status, or decoding failure so callers can
    fall back without handling exceptions.
    """
    if config is None:
        config = LLMConfig()

    payload = {
        "model": config.model,
        "messages": messages,
        "max_tokens": config.max_tokens,
        "temperature": config.temperature,
    }
    headers = {"Content-Type": "application/json"}
    if config.api_key:
        headers["Authorization"] = f"Bearer {config.api_key}"

    own_session = session is None
    if own_session:
        session = aiohttp.ClientSession()
    try:
        async with session.post(
            config.url,
            json=payload,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=config.timeout),
        ) as resp:
            if resp.status != 200:
                body = await resp.text()
                logger.warning("Chat request failed (model=%s): HTTP %d %s", config.model, resp.status, body[:200])
                return ""
            result = await resp.json(content_type=None)
        content = result.get("choices", [{}])[0].get("message", {}).get("content", "")
        if not isinstance(content, str):
            logger.warning("Chat reply content is not text (model=%s): %s", config.model, type(content).__name__)
            return ""
        return content
    except Exception as e:
        logger.warning("Chat request failed (model=%s): %s", config.model, e)
        return ""
    finally:
        if own_session:
            await session.close()
