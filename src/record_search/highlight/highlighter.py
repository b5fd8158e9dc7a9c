"""Marking query matches in rendered text.

Output is HTML-escaped text with `<mark>` elements. Spans are claimed on a
shared `SpanTracker`, so a later pattern never marks characters an earlier
one already covers and marks never overlap or nest.

Text mode marks every simple-leaf term of the (possibly boolean) query,
longest term first. Monetary mode runs four passes in order: exact formatted
amounts for `$` tokens, progressive partial matches on remaining numbers,
numbers inside a queried range, and finally the leftover free-text tokens.
"""

from __future__ import annotations

import re
from enum import Enum

from record_search.config import HighlightConfig
from record_search.highlight.cache import HighlightCache
from record_search.highlight.spans import SpanTracker, escape_html, render_marks
from record_search.query.boolean import extract_search_terms
from record_search.query.monetary import (
    MonetaryTokens,
    extract_monetary_tokens,
    matches_monetary_string,
    normalize_monetary_string,
    number_to_string,
    parse_currency_string,
    parse_float_prefix,
)
from record_search.query.tokenizer import tokenize
from record_search.types import PriceRange

SEARCH_HIGHLIGHT = "search-highlight"
MONETARY_EXACT = "monetary-highlight-exact"
MONETARY_PARTIAL = "monetary-highlight-partial"
MONETARY_RANGE = "monetary-highlight-range"
MONETARY_TEXT = "monetary-highlight-text"

_NUMERIC = re.compile(r"\$?[\d,]+(?:\.\d{2})?")


class HighlightMode(str, Enum):
    TEXT = "text"
    MONETARY = "monetary"


class Highlighter:
    """Renders highlighted HTML fragments, memoized in a bounded cache."""

    def __init__(
        self,
        config: HighlightConfig | None = None,
        cache: HighlightCache | None = None,
    ) -> None:
        self.config = config or HighlightConfig()
        if cache is None:
            cache = HighlightCache(
                max_entries=self.config.cache_size,
                key_prefix_chars=self.config.cache_key_prefix_chars,
            )
        self.cache = cache

    def highlight(self, text: str, query: str, mode: HighlightMode | str = HighlightMode.TEXT) -> str:
        mode = HighlightMode(mode)
        if not text or not query.strip():
            return escape_html(text)

        key = self.cache.make_key(mode.value, text, query)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        tracker = SpanTracker()
        if mode is HighlightMode.MONETARY:
            self._mark_monetary(text, query, tracker)
        else:
            self._mark_terms(text, extract_search_terms(query), SEARCH_HIGHLIGHT, tracker)

        rendered = render_marks(text, tracker.spans())
        self.cache.put(key, rendered)
        return rendered

    def highlight_text(self, text: str, query: str) -> str:
        return self.highlight(text, query, HighlightMode.TEXT)

    def highlight_monetary(self, text: str, query: str) -> str:
        return self.highlight(text, query, HighlightMode.MONETARY)

    def clear_cache(self) -> None:
        self.cache.clear()

    @staticmethod
    def _mark_terms(text: str, terms: list[str], css_class: str, tracker: SpanTracker) -> None:
        for term in sorted(terms, key=len, reverse=True):
            for match in re.finditer(re.escape(term), text, flags=re.IGNORECASE):
                tracker.claim(match.start(), match.end(), css_class)

    def _mark_monetary(self, text: str, query: str, tracker: SpanTracker) -> None:
        tokens = extract_monetary_tokens(query)
        if tokens.is_empty:
            return

        self._mark_exact_amounts(text, query, tracker)
        if tokens.amount_tokens:
            self._mark_partial_amounts(text, tokens, tracker)
        if tokens.range is not None:
            self._mark_range(text, tokens.range, tracker)
        if tokens.text_tokens:
            self._mark_terms(text, tokens.text_tokens, MONETARY_TEXT, tracker)

    def _mark_exact_amounts(self, text: str, query: str, tracker: SpanTracker) -> None:
        for token in tokenize(query):
            if not token.startswith("$"):
                continue
            amount = parse_currency_string(token)
            if amount is None:
                continue
            for variant in _formatted_variants(amount, token):
                pattern = re.compile(
                    r"(?<![\d.,])\$?" + re.escape(variant) + r"(?!\d|[.,]\d)"
                )
                for match in pattern.finditer(text):
                    tracker.claim(match.start(), match.end(), MONETARY_EXACT)

    @staticmethod
    def _mark_partial_amounts(text: str, tokens: MonetaryTokens, tracker: SpanTracker) -> None:
        for start, end, value in _numeric_substrings(text):
            if tracker.overlaps(start, end):
                continue
            if any(matches_monetary_string(token, value) for token in tokens.amount_tokens):
                tracker.claim(start, end, MONETARY_PARTIAL)

    @staticmethod
    def _mark_range(text: str, price_range: PriceRange, tracker: SpanTracker) -> None:
        for start, end, value in _numeric_substrings(text):
            if tracker.overlaps(start, end):
                continue
            number = parse_float_prefix(value)
            if number is not None and price_range.contains(number):
                tracker.claim(start, end, MONETARY_RANGE)


def _formatted_variants(amount: float, token: str) -> list[str]:
    """Ways an amount may be written in text, longest first."""
    if amount == int(amount):
        grouped = f"{int(amount):,}"
    else:
        grouped = f"{amount:,}"
    candidates = {
        number_to_string(amount),
        grouped,
        f"{amount:.2f}",
        f"{amount:,.2f}",
        token.lstrip("$"),
    }
    return sorted((c for c in candidates if c), key=len, reverse=True)


def _numeric_substrings(text: str) -> list[tuple[int, int, str]]:
    """Numbers in `text` as (start, end, normalized value) with digits only."""
    found: list[tuple[int, int, str]] = []
    for match in _NUMERIC.finditer(text):
        start, end = match.start(), match.end()
        while end > start and text[end - 1] == ",":
            end -= 1
        value = normalize_monetary_string(text[start:end])
        if any(char.isdigit() for char in value):
            found.append((start, end, value))
    return found
