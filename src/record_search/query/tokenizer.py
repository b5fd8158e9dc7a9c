"""Whitespace tokenization and query length checks."""

from __future__ import annotations

import re

MIN_EFFECTIVE_QUERY_LENGTH = 2

_WHITESPACE = re.compile(r"\s+")


def tokenize(query: str) -> list[str]:
    """Split on runs of whitespace and lowercase; empty tokens are dropped."""
    return [token.strip() for token in _WHITESPACE.split(query.lower()) if token.strip()]


def effective_query_length(query: str) -> int:
    """Length that counts toward the minimum: whitespace and `$` are ignored."""
    if not query:
        return 0
    return len(_WHITESPACE.sub("", query.replace("$", "")))


def is_query_too_short(query: str, minimum: int = MIN_EFFECTIVE_QUERY_LENGTH) -> bool:
    length = effective_query_length(query)
    return 0 < length < minimum
