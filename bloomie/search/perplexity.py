"""Perplexity web search — web-grounded answers when local care knowledge runs out.

Answers are cached per normalized query in an injected key-value store for a
week, with the oldest entries evicted past a fixed count. Cache and transport
errors never propagate: a failed search yields an empty answer and callers fall
back to whatever they know locally.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import timedelta

import aiohttp

from bloomie.engine.config import SearchConfig
from bloomie.engine.schema import NurtureType
from bloomie.hub.cache import KeyValueStore

logger = logging.getLogger(__name__)

CACHE_PREFIX = "perplexity_cache_"
MAX_SOURCES = 3
MIN_LOCAL_ANSWER_LENGTH = 50

# Topics where local care tables go stale and a live answer is worth paying for
REAL_TIME_TOPICS = (
    # plants
    "disease",
    "pest",
    "infestation",
    "dying",
    "emergency",
    "rare species",
    "new treatment",
    "organic solution",
    "specific variety",
    # pets
    "poison",
    "toxic",
    "emergency vet",
    "breed specific",
    "medication",
    "recall",
    "new vaccine",
    "specific condition",
    # babies
    "safety alert",
    "new guidelines",
    "developmental concern",
    "medical",
)

QUESTION_PATTERN = re.compile(r"^(what|why|how|when|where|is|can|should|do|does)")

TYPE_CONTEXT = {
    NurtureType.PLANT: "houseplant care",
    NurtureType.PET: "pet care veterinary",
    NurtureType.BABY: "infant baby care parenting",
}

DEFAULT_SYSTEM_PROMPT = "You are a helpful care assistant. Provide concise, accurate, and actionable advice."
SYSTEM_PROMPTS = {
    NurtureType.PLANT: (
        "You are an expert botanist and houseplant care specialist. Provide concise, practical "
        "advice about plant care, diseases, pests, and treatments. Focus on actionable steps."
    ),
    NurtureType.PET: (
        "You are a veterinary care advisor. Provide helpful pet care information. For serious "
        "health concerns, always recommend consulting a veterinarian. Keep advice practical and safe."
    ),
    NurtureType.BABY: (
        "You are a parenting and infant care advisor. Provide supportive, evidence-based baby care "
        "information. For health concerns, always recommend consulting a pediatrician. "
        "Be reassuring but accurate."
    ),
}
CONCISE_SUFFIX = (
    "\n\nIMPORTANT: Keep your response concise (2-3 paragraphs max). "
    "Focus on the most relevant and actionable information."
)

NO_LOCAL_ANSWER = "I don't have specific information about that. Could you tell me more?"
NO_ANSWER = "I couldn't find specific information. Please try asking in a different way."


@dataclass
class SearchResult:
    answer: str
    sources: list[str] = field(default_factory=list)
    from_cache: bool = False


@dataclass
class SmartAnswer:
    answer: str
    source: str  # "local" | "perplexity" | "combined"
    sources: list[str] = field(default_factory=list)


def should_use_search(query: str, local_knowledge_found: bool) -> bool:
    """Decide whether a query is worth a web search."""
    lowered = query.lower()
    if local_knowledge_found:
        return any(topic in lowered for topic in REAL_TIME_TOPICS)
    return "?" in lowered or bool(QUESTION_PATTERN.match(lowered))


def cache_key(query: str) -> str:
    """Order-insensitive cache key: significant words, sorted, underscore-joined."""
    normalized = re.sub(r"[^\w\s]", "", query.lower())
    words = sorted(w for w in normalized.split(" ") if len(w) > 2)
    return CACHE_PREFIX + "_".join(words)[:100]


def enhance_query(query: str, nurture_type: NurtureType | str | None) -> str:
    if not nurture_type:
        return query
    return f"{query} ({TYPE_CONTEXT[NurtureType(nurture_type)]})"


class PerplexityClient:
    """Web-search client with a response cache."""

    def __init__(self, cache: KeyValueStore, config: SearchConfig = None, session: aiohttp.ClientSession = None):
        self.cache = cache
        self.config = config or SearchConfig()
        self.session = session

    @property
    def cache_expiry(self) -> timedelta:
        return timedelta(hours=self.config.cache_expiry_hours)

    async def get_cached(self, query: str) -> SearchResult | None:
        try:
            entry = await self.cache.get(cache_key(query), max_age=self.cache_expiry)
        except Exception as e:
            logger.warning("Search cache read error: %s", e)
            return None
        if not isinstance(entry, dict) or not entry.get("response"):
            return None
        return SearchResult(answer=entry["response"], sources=entry.get("sources") or [], from_cache=True)

    async def store(self, query: str, answer: str, sources: list[str]):
        try:
            await self.cache.set(cache_key(query), {"query": query, "response": answer, "sources": sources})
            evicted = await self.cache.trim(self.config.max_cache_entries, prefix=CACHE_PREFIX)
            if evicted:
                logger.debug("Evicted %d search cache entries", evicted)
        except Exception as e:
            logger.warning("Search cache write error: %s", e)

    async def search(self, query: str, nurture_type: NurtureType | str | None = None) -> SearchResult:
        """Cached web-grounded answer; empty answer on failure."""
        cached = await self.get_cached(query)
        if cached is not None:
            logger.info("Search: using cached response")
            return cached

        answer, sources = await self._request(enhance_query(query, nurture_type), nurture_type)
        if not answer:
            return SearchResult(answer="")
        await self.store(query, answer, sources)
        return SearchResult(answer=answer, sources=sources)

    async def _request(self, query: str, nurture_type) -> tuple[str, list[str]]:
        if not self.config.api_key:
            logger.warning("Search API key not configured")
            return "", []

        system_prompt = DEFAULT_SYSTEM_PROMPT
        if nurture_type:
            system_prompt = SYSTEM_PROMPTS[NurtureType(nurture_type)]
        payload = {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt + CONCISE_SUFFIX},
                {"role": "user", "content": query},
            ],
            "max_tokens": 500,
            "temperature": 0.2,
            "return_citations": True,
            "return_related_questions": False,
        }
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        session = self.session
        own_session = session is None
        if own_session:
            session = aiohttp.ClientSession()
        try:
            async with session.post(
                self.config.url,
                json=payload,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
            ) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    logger.warning("Search API error: HTTP %d %s", resp.status, body[:200])
                    return "", []
                data = await resp.json(content_type=None)
            answer = data.get("choices", [{}])[0].get("message", {}).get("content", "")
            if not isinstance(answer, str):
                logger.warning("Search reply content is not text: %s", type(answer).__name__)
                return "", []
            citations = data.get("citations") or []
            return answer, [str(c) for c in citations[:MAX_SOURCES]]
        except Exception as e:
            logger.warning("Search query error: %s", e)
            return "", []
        finally:
            if own_session:
                await session.close()

    async def get_smart_answer(
        self,
        query: str,
        local_answer: str | None,
        nurture_type: NurtureType | str | None = None,
    ) -> SmartAnswer:
        """Pick between the local answer, a web answer, or both."""
        has_local = bool(local_answer) and len(local_answer) > MIN_LOCAL_ANSWER_LENGTH

        if not should_use_search(query, has_local):
            return SmartAnswer(answer=local_answer or NO_LOCAL_ANSWER, source="local")

        result = await self.search(query, nurture_type)
        if result.answer:
            if has_local:
                return SmartAnswer(
                    answer=f"{local_answer}\n\n📡 **Latest info**: {result.answer}",
                    source="combined",
                    sources=result.sources,
                )
            return SmartAnswer(answer=result.answer, source="perplexity", sources=result.sources)

        return SmartAnswer(answer=local_answer or NO_ANSWER, source="local")
