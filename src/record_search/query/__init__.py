"""Query parsing layer: tokens, monetary amounts and boolean expressions."""

from record_search.query.boolean import extract_search_terms, is_boolean_query, parse_boolean_query
from record_search.query.monetary import (
    MonetaryQuery,
    MonetaryTokens,
    extract_monetary_tokens,
    has_monetary_potential,
    is_close_match,
    matches_monetary_string,
    parse_monetary_query,
)
from record_search.query.tokenizer import is_query_too_short, tokenize

__all__ = [
    "MonetaryQuery",
    "MonetaryTokens",
    "extract_monetary_tokens",
    "extract_search_terms",
    "has_monetary_potential",
    "is_boolean_query",
    "is_close_match",
    "is_query_too_short",
    "matches_monetary_string",
    "parse_boolean_query",
    "parse_monetary_query",
    "tokenize",
]
