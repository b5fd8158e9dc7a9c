"""Record matching, relevance scoring and result ordering."""

from record_search.matching.matcher import (
    build_haystack,
    matches_boolean_query,
    matches_monetary_query,
    matches_query,
    matches_query_with_monetary_support,
    matches_record,
)
from record_search.matching.scorer import (
    calculate_monetary_relevance_score,
    calculate_relevance_score,
    score_boolean_query,
    score_record,
    score_records,
)
from record_search.matching.sorting import (
    SortOption,
    sort_by_recency,
    sort_by_relevance,
    sort_records,
)

__all__ = [
    "SortOption",
    "build_haystack",
    "calculate_monetary_relevance_score",
    "calculate_relevance_score",
    "matches_boolean_query",
    "matches_monetary_query",
    "matches_query",
    "matches_query_with_monetary_support",
    "matches_record",
    "score_boolean_query",
    "score_record",
    "score_records",
    "sort_by_recency",
    "sort_by_relevance",
    "sort_records",
]
