"""Query matching and relevance engine over in-memory business records."""

from .config import GroupLimitConfig, HighlightConfig, SearchConfig
from .engine import SearchEngine

__all__ = ["GroupLimitConfig", "HighlightConfig", "SearchConfig", "SearchEngine"]
