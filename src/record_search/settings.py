"""Host settings loaded from the environment."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from record_search.config import GroupLimitConfig, HighlightConfig, SearchConfig


class RecordSearchSettings(BaseSettings):
    """Settings for running the engine behind the HTTP host."""

    model_config = SettingsConfigDict(
        env_prefix="RECORD_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    corpus_path: str = "data/search_corpus.json"

    # Logging levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"
    log_level_engine: str = "INFO"

    default_group_limit: int = 4
    group_limits: dict[str, int] = {}
    batch_size: int = 150
    min_query_length: int = 2
    highlight_cache_size: int = 1000

    def to_search_config(self) -> SearchConfig:
        return SearchConfig(
            batch_size=self.batch_size,
            min_query_length=self.min_query_length,
        )

    def to_group_limit_config(self) -> GroupLimitConfig:
        return GroupLimitConfig(
            default_limit=self.default_group_limit,
            limits=dict(self.group_limits),
        )

    def to_highlight_config(self) -> HighlightConfig:
        return HighlightConfig(cache_size=self.highlight_cache_size)


@lru_cache
def get_settings() -> RecordSearchSettings:
    """Cached settings instance, reads the environment once."""
    return RecordSearchSettings()
