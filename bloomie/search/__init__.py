"""Web-grounded answers for care questions."""

from bloomie.search.perplexity import PerplexityClient, SearchResult, SmartAnswer, cache_key, should_use_search

__all__ = ["PerplexityClient", "SearchResult", "SmartAnswer", "cache_key", "should_use_search"]
