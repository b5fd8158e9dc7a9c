"""Configuration models for the search engine."""

from __future__ import annotations

from pydantic import BaseModel, Field

from record_search.matching.sorting import SortOption


class SearchConfig(BaseModel):
    """Configures query evaluation and batching."""

    batch_size: int = Field(default=150, ge=1)
    min_query_length: int = Field(default=2, ge=0)
    default_sort: SortOption = Field(default=SortOption.RELEVANCE)


class GroupLimitConfig(BaseModel):
    """Per-group result caps applied after grouping."""

    default_limit: int = Field(default=4, ge=0)
    limits: dict[str, int] = Field(default_factory=dict)

    def limit_for(self, key: str) -> int:
        return max(0, self.limits.get(key, self.default_limit))


class HighlightConfig(BaseModel):
    """Configures the highlighter and its render cache."""

    cache_size: int = Field(default=1000, ge=0)
    cache_key_prefix_chars: int = Field(default=100, ge=1)
    snippet_max_length: int = Field(default=100, ge=10)
