"""Non-overlapping `<mark>` highlighting for text and monetary queries."""

from record_search.highlight.cache import HighlightCache
from record_search.highlight.highlighter import Highlighter, HighlightMode
from record_search.highlight.snippets import HighlightMatch, context_snippet, find_best_match

__all__ = [
    "HighlightCache",
    "HighlightMatch",
    "HighlightMode",
    "Highlighter",
    "context_snippet",
    "find_best_match",
]
